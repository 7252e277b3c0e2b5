"""HTTP controller layer for registering, listing and removing entities."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field

from conservation.controllers.dependencies import get_conservation_service, to_http_exception
from conservation.domain.errors import ConservationError
from conservation.domain.models import (
    Animal,
    Cage,
    CageStatus,
    DietaryRole,
    Keeper,
    KeeperRole,
    OccupancyKind,
    Sex,
)
from conservation.services.conservation_service import ConservationService
from conservation.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["registry"])


class AnimalCreateRequest(BaseModel):
    name: str
    species: str
    dietary_role: DietaryRole
    sex: Sex
    date_of_birth: date
    date_of_acquisition: date


class AnimalResponse(BaseModel):
    animal_id: int = Field(gt=0)
    name: str
    species: str
    dietary_role: DietaryRole
    sex: Sex
    date_of_birth: date
    date_of_acquisition: date
    cage_id: Optional[int] = None

    @classmethod
    def from_entity(cls, animal: Animal) -> "AnimalResponse":
        return cls(
            animal_id=animal.id,
            name=animal.name,
            species=animal.species,
            dietary_role=animal.dietary_role,
            sex=animal.sex,
            date_of_birth=animal.date_of_birth,
            date_of_acquisition=animal.date_of_acquisition,
            cage_id=animal.cage_id if animal.is_allocated else None,
        )


class KeeperCreateRequest(BaseModel):
    role: KeeperRole
    first_name: str
    surname: str
    address: str
    contact_number: str


class KeeperResponse(BaseModel):
    keeper_id: int = Field(gt=0)
    role: KeeperRole
    full_title: str
    first_name: str
    surname: str
    address: str
    contact_number: str
    responsibilities: str
    allocated_cage_ids: list[int]

    @classmethod
    def from_entity(cls, keeper: Keeper) -> "KeeperResponse":
        return cls(
            keeper_id=keeper.id,
            role=keeper.role,
            full_title=keeper.full_title,
            first_name=keeper.first_name,
            surname=keeper.surname,
            address=keeper.address,
            contact_number=keeper.contact_number,
            responsibilities=keeper.responsibilities,
            allocated_cage_ids=list(keeper.allocated_cage_ids),
        )


class CageCreateRequest(BaseModel):
    cage_number: str
    description: str
    capacity: int


class CageResponse(BaseModel):
    cage_id: int = Field(gt=0)
    cage_number: str
    description: str
    capacity: int = Field(gt=0)
    occupant_ids: list[int]
    occupancy_kind: OccupancyKind
    status: CageStatus
    assigned_keeper_id: Optional[int] = None

    @classmethod
    def from_entity(cls, cage: Cage) -> "CageResponse":
        return cls(
            cage_id=cage.id,
            cage_number=cage.cage_number,
            description=cage.description,
            capacity=cage.capacity,
            occupant_ids=list(cage.occupant_ids),
            occupancy_kind=cage.occupancy_kind,
            status=cage.status,
            assigned_keeper_id=cage.assigned_keeper_id,
        )


class StatisticsResponse(BaseModel):
    total_animals: int = Field(ge=0)
    total_keepers: int = Field(ge=0)
    total_cages: int = Field(ge=0)
    empty_cages: int = Field(ge=0)
    full_cages: int = Field(ge=0)
    unassigned_cages: int = Field(ge=0)
    total_capacity: int = Field(ge=0)
    total_occupancy: int = Field(ge=0)
    available_space: int = Field(ge=0)
    occupancy_rate: float = Field(ge=0.0, le=1.0)


def _unexpected(operation: str, exc: Exception) -> HTTPException:
    logger.exception("Unexpected failure during %s", operation)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {operation}",
    )


# --- animals ---


@router.post("/animals", response_model=AnimalResponse, status_code=status.HTTP_201_CREATED)
async def create_animal(
    payload: AnimalCreateRequest,
    service: ConservationService = Depends(get_conservation_service),
) -> AnimalResponse:
    try:
        animal = Animal(
            payload.name,
            payload.species,
            payload.dietary_role,
            payload.sex,
            payload.date_of_birth,
            payload.date_of_acquisition,
        )
        service.add_animal(animal)
        return AnimalResponse.from_entity(animal)
    except ConservationError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise _unexpected("register animal", exc) from exc


@router.get("/animals", response_model=list[AnimalResponse])
async def list_animals(
    available_only: bool = False,
    service: ConservationService = Depends(get_conservation_service),
) -> list[AnimalResponse]:
    animals = service.get_available_animals() if available_only else service.list_animals()
    return [AnimalResponse.from_entity(animal) for animal in animals]


@router.get("/animals/{animal_id}", response_model=AnimalResponse)
async def get_animal(
    animal_id: int,
    service: ConservationService = Depends(get_conservation_service),
) -> AnimalResponse:
    try:
        return AnimalResponse.from_entity(service.get_animal(animal_id))
    except ConservationError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/animals/{animal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_animal(
    animal_id: int,
    service: ConservationService = Depends(get_conservation_service),
) -> Response:
    try:
        service.remove_animal(animal_id)
    except ConservationError as exc:
        raise to_http_exception(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- keepers ---


@router.post("/keepers", response_model=KeeperResponse, status_code=status.HTTP_201_CREATED)
async def create_keeper(
    payload: KeeperCreateRequest,
    service: ConservationService = Depends(get_conservation_service),
) -> KeeperResponse:
    try:
        keeper = Keeper(
            payload.role,
            payload.first_name,
            payload.surname,
            payload.address,
            payload.contact_number,
        )
        service.add_keeper(keeper)
        return KeeperResponse.from_entity(keeper)
    except ConservationError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise _unexpected("register keeper", exc) from exc


@router.get("/keepers", response_model=list[KeeperResponse])
async def list_keepers(
    available_only: bool = False,
    service: ConservationService = Depends(get_conservation_service),
) -> list[KeeperResponse]:
    keepers = service.get_available_keepers() if available_only else service.list_keepers()
    return [KeeperResponse.from_entity(keeper) for keeper in keepers]


@router.get("/keepers/{keeper_id}", response_model=KeeperResponse)
async def get_keeper(
    keeper_id: int,
    service: ConservationService = Depends(get_conservation_service),
) -> KeeperResponse:
    try:
        return KeeperResponse.from_entity(service.get_keeper(keeper_id))
    except ConservationError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/keepers/{keeper_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_keeper(
    keeper_id: int,
    service: ConservationService = Depends(get_conservation_service),
) -> Response:
    try:
        service.remove_keeper(keeper_id)
    except ConservationError as exc:
        raise to_http_exception(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- cages ---


@router.post("/cages", response_model=CageResponse, status_code=status.HTTP_201_CREATED)
async def create_cage(
    payload: CageCreateRequest,
    service: ConservationService = Depends(get_conservation_service),
) -> CageResponse:
    try:
        cage = Cage(payload.cage_number, payload.description, payload.capacity)
        service.add_cage(cage)
        return CageResponse.from_entity(cage)
    except ConservationError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise _unexpected("register cage", exc) from exc


@router.get("/cages", response_model=list[CageResponse])
async def list_cages(
    available_only: bool = False,
    service: ConservationService = Depends(get_conservation_service),
) -> list[CageResponse]:
    cages = service.get_available_cages() if available_only else service.list_cages()
    return [CageResponse.from_entity(cage) for cage in cages]


@router.get("/cages/{cage_id}", response_model=CageResponse)
async def get_cage(
    cage_id: int,
    service: ConservationService = Depends(get_conservation_service),
) -> CageResponse:
    try:
        return CageResponse.from_entity(service.get_cage(cage_id))
    except ConservationError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/cages/{cage_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_cage(
    cage_id: int,
    service: ConservationService = Depends(get_conservation_service),
) -> Response:
    try:
        service.remove_cage(cage_id)
    except ConservationError as exc:
        raise to_http_exception(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/statistics", response_model=StatisticsResponse)
async def get_statistics(
    service: ConservationService = Depends(get_conservation_service),
) -> StatisticsResponse:
    stats = service.get_statistics()
    return StatisticsResponse(
        total_animals=stats.total_animals,
        total_keepers=stats.total_keepers,
        total_cages=stats.total_cages,
        empty_cages=stats.empty_cages,
        full_cages=stats.full_cages,
        unassigned_cages=stats.unassigned_cages,
        total_capacity=stats.total_capacity,
        total_occupancy=stats.total_occupancy,
        available_space=stats.available_space,
        occupancy_rate=stats.occupancy_rate,
    )
