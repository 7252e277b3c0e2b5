"""HTTP controller layer for animal and keeper allocations."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from conservation.controllers.dependencies import (
    get_allocation_service,
    get_conservation_service,
    to_http_exception,
)
from conservation.controllers.registry_controller import (
    AnimalResponse,
    CageResponse,
    KeeperResponse,
)
from conservation.domain.errors import ConservationError
from conservation.services.allocation_service import AllocationService
from conservation.services.conservation_service import ConservationService
from conservation.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(prefix="/allocations", tags=["allocation"])


class AnimalAllocationRequest(BaseModel):
    """Input DTO validated before entering service layer."""

    animal_id: int = Field(gt=0)
    cage_id: int = Field(gt=0)


class KeeperAssignmentRequest(BaseModel):
    keeper_id: int = Field(gt=0)
    cage_id: int = Field(gt=0)


class AnimalAllocationResponse(BaseModel):
    animal: AnimalResponse
    cage: CageResponse


class KeeperAssignmentResponse(BaseModel):
    keeper: KeeperResponse
    cage: CageResponse


@router.post(
    "/animals",
    response_model=AnimalAllocationResponse,
    status_code=status.HTTP_200_OK,
)
async def allocate_animal(
    payload: AnimalAllocationRequest,
    service: AllocationService = Depends(get_allocation_service),
    registry: ConservationService = Depends(get_conservation_service),
) -> AnimalAllocationResponse:
    """Place an animal in a cage; repeating a placement is a no-op."""
    try:
        service.allocate_animal(payload.animal_id, payload.cage_id)
        return AnimalAllocationResponse(
            animal=AnimalResponse.from_entity(registry.get_animal(payload.animal_id)),
            cage=CageResponse.from_entity(registry.get_cage(payload.cage_id)),
        )
    except ConservationError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected animal allocation failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to allocate animal",
        ) from exc


@router.delete(
    "/animals/{animal_id}",
    response_model=AnimalResponse,
    status_code=status.HTTP_200_OK,
)
async def deallocate_animal(
    animal_id: int,
    service: AllocationService = Depends(get_allocation_service),
    registry: ConservationService = Depends(get_conservation_service),
) -> AnimalResponse:
    try:
        service.deallocate_animal(animal_id)
        return AnimalResponse.from_entity(registry.get_animal(animal_id))
    except ConservationError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected animal deallocation failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to deallocate animal",
        ) from exc


@router.post(
    "/keepers",
    response_model=KeeperAssignmentResponse,
    status_code=status.HTTP_200_OK,
)
async def assign_keeper(
    payload: KeeperAssignmentRequest,
    service: AllocationService = Depends(get_allocation_service),
    registry: ConservationService = Depends(get_conservation_service),
) -> KeeperAssignmentResponse:
    """Assign a cage to a keeper, taking it from any previous keeper."""
    try:
        service.assign_keeper(payload.keeper_id, payload.cage_id)
        return KeeperAssignmentResponse(
            keeper=KeeperResponse.from_entity(registry.get_keeper(payload.keeper_id)),
            cage=CageResponse.from_entity(registry.get_cage(payload.cage_id)),
        )
    except ConservationError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected keeper assignment failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to assign keeper",
        ) from exc


@router.delete(
    "/keepers/{keeper_id}/cages/{cage_id}",
    response_model=KeeperAssignmentResponse,
    status_code=status.HTTP_200_OK,
)
async def unassign_keeper(
    keeper_id: int,
    cage_id: int,
    allow_underload: bool = False,
    service: AllocationService = Depends(get_allocation_service),
    registry: ConservationService = Depends(get_conservation_service),
) -> KeeperAssignmentResponse:
    try:
        service.unassign_keeper(keeper_id, cage_id, allow_underload=allow_underload)
        return KeeperAssignmentResponse(
            keeper=KeeperResponse.from_entity(registry.get_keeper(keeper_id)),
            cage=CageResponse.from_entity(registry.get_cage(cage_id)),
        )
    except ConservationError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected keeper unassignment failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to unassign keeper",
        ) from exc
