"""Shared FastAPI dependency providers and error translation for routers."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from conservation.domain.errors import (
    AllocationRuleError,
    ConservationError,
    EntityNotFoundError,
    ValidationError,
)
from conservation.services.allocation_service import AllocationService
from conservation.services.conservation_service import ConservationService
from conservation.services.settings_service import SettingsProvider


def _require_state(request: Request, attribute: str, label: str):
    service = getattr(request.app.state, attribute, None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{label} is not initialized",
        )
    return service


def get_allocation_service(request: Request) -> AllocationService:
    return _require_state(request, "allocation_service", "Allocation service")


def get_conservation_service(request: Request) -> ConservationService:
    return _require_state(request, "conservation_service", "Conservation service")


def get_settings_provider(request: Request) -> SettingsProvider:
    return _require_state(request, "settings_provider", "Settings provider")


def to_http_exception(exc: ConservationError) -> HTTPException:
    """Map a core error onto the HTTP status a client can act on."""
    if isinstance(exc, EntityNotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, AllocationRuleError):
        status_code = status.HTTP_409_CONFLICT
    elif isinstance(exc, ValidationError):
        status_code = status.HTTP_400_BAD_REQUEST
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(
        status_code=status_code,
        detail={"error": type(exc).__name__, "message": str(exc)},
    )
