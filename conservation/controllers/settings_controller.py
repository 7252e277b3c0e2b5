"""HTTP controller layer for business configuration."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from conservation.controllers.dependencies import get_settings_provider
from conservation.domain.constraints import AnimalRules, KeeperConstraints
from conservation.services.settings_service import SettingsProvider
from conservation.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])


class KeeperConstraintsPayload(BaseModel):
    min_cages: int = Field(ge=0)
    max_cages: int = Field(gt=0)


class AnimalRulesPayload(BaseModel):
    predator_shareable: bool
    prey_shareable: bool


class SettingsResponse(BaseModel):
    first_run: bool
    keeper_constraints: KeeperConstraintsPayload
    animal_rules: AnimalRulesPayload


def _snapshot(provider: SettingsProvider) -> SettingsResponse:
    constraints = provider.get_keeper_constraints()
    rules = provider.get_animal_rules()
    return SettingsResponse(
        first_run=provider.is_first_run(),
        keeper_constraints=KeeperConstraintsPayload(
            min_cages=constraints.min_cages,
            max_cages=constraints.max_cages,
        ),
        animal_rules=AnimalRulesPayload(
            predator_shareable=rules.predator_shareable,
            prey_shareable=rules.prey_shareable,
        ),
    )


@router.get("", response_model=SettingsResponse)
async def get_settings_snapshot(
    provider: SettingsProvider = Depends(get_settings_provider),
) -> SettingsResponse:
    return _snapshot(provider)


@router.put("/keeper-constraints", response_model=SettingsResponse)
async def update_keeper_constraints(
    payload: KeeperConstraintsPayload,
    provider: SettingsProvider = Depends(get_settings_provider),
) -> SettingsResponse:
    try:
        provider.update_keeper_constraints(
            KeeperConstraints(min_cages=payload.min_cages, max_cages=payload.max_cages)
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except OSError as exc:
        logger.exception("Failed to persist keeper constraints")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save settings",
        ) from exc
    return _snapshot(provider)


@router.put("/animal-rules", response_model=SettingsResponse)
async def update_animal_rules(
    payload: AnimalRulesPayload,
    provider: SettingsProvider = Depends(get_settings_provider),
) -> SettingsResponse:
    try:
        provider.update_animal_rules(
            AnimalRules(
                predator_shareable=payload.predator_shareable,
                prey_shareable=payload.prey_shareable,
            )
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except OSError as exc:
        logger.exception("Failed to persist animal rules")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save settings",
        ) from exc
    return _snapshot(provider)
