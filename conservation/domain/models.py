"""Entities of the conservation facility: animals, keepers and cages.

Every mutator validates before touching state, so a rejected call leaves the
entity unchanged. Collections are handed out as tuples built on each read.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional, TypeVar

from conservation.domain.constraints import DEFAULT_MAX_CAGES
from conservation.domain.errors import ValidationError, ValidationErrorKind


UNASSIGNED_ID = 0

_EnumT = TypeVar("_EnumT", bound=Enum)


class DietaryRole(str, Enum):
    PREDATOR = "predator"
    PREY = "prey"


class Sex(str, Enum):
    MALE = "male"
    FEMALE = "female"


class KeeperRole(str, Enum):
    HEAD_KEEPER = "head_keeper"
    ASSISTANT_KEEPER = "assistant_keeper"


class OccupancyKind(str, Enum):
    """What a cage currently holds, derived from its occupants."""

    EMPTY = "empty"
    PREDATOR = "predator"
    PREY = "prey"


class CageStatus(str, Enum):
    EMPTY = "empty"
    AVAILABLE = "available"
    FULL = "full"


def _require_text(field: str, value: Any) -> str:
    if value is None or not isinstance(value, str) or not value.strip():
        raise ValidationError(
            ValidationErrorKind.NULL_OR_EMPTY_FIELD,
            field,
            f"{field} cannot be null or empty",
        )
    return value.strip()


def _require_enum(field: str, value: Any, enum_type: type[_EnumT]) -> _EnumT:
    if value is None:
        raise ValidationError(
            ValidationErrorKind.NULL_OR_EMPTY_FIELD,
            field,
            f"{field} cannot be null",
        )
    try:
        return enum_type(value)
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_type)
        raise ValidationError(
            ValidationErrorKind.INVALID_RANGE,
            field,
            f"{field} must be one of: {allowed}",
        ) from exc


def _require_positive_int(field: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(
            ValidationErrorKind.INVALID_RANGE,
            field,
            f"{field} must be a positive integer",
        )
    return value


def _require_date(field: str, value: Any) -> date:
    if value is None:
        raise ValidationError(
            ValidationErrorKind.NULL_OR_EMPTY_FIELD,
            field,
            f"{field} cannot be null",
        )
    if isinstance(value, datetime):
        value = value.date()
    if not isinstance(value, date):
        raise ValidationError(
            ValidationErrorKind.INVALID_RANGE,
            field,
            f"{field} must be a date",
        )
    if value > date.today():
        raise ValidationError(
            ValidationErrorKind.INVALID_RANGE,
            field,
            f"{field} cannot be in the future",
        )
    return value


def _check_life_dates(date_of_birth: date, date_of_acquisition: date) -> None:
    if date_of_acquisition < date_of_birth:
        raise ValidationError(
            ValidationErrorKind.INVALID_RANGE,
            "date_of_acquisition",
            "date_of_acquisition cannot be before date_of_birth",
        )


class _RegistryIdentity:
    """Id holder: unset at construction, fixed once by a registry insert."""

    entity_label = "Entity"

    def __init__(self) -> None:
        self._id = UNASSIGNED_ID

    @property
    def id(self) -> int:
        return self._id

    def assign_id(self, new_id: int) -> None:
        if self._id != UNASSIGNED_ID:
            raise ValidationError(
                ValidationErrorKind.IMMUTABLE_FIELD,
                "id",
                f"{self.entity_label} id is already fixed at {self._id}",
            )
        self._id = _require_positive_int("id", new_id)


class Animal(_RegistryIdentity):
    entity_label = "Animal"

    def __init__(
        self,
        name: str,
        species: str,
        dietary_role: DietaryRole,
        sex: Sex,
        date_of_birth: date,
        date_of_acquisition: date,
    ) -> None:
        super().__init__()
        clean_name = _require_text("name", name)
        clean_species = _require_text("species", species)
        role = _require_enum("dietary_role", dietary_role, DietaryRole)
        clean_sex = _require_enum("sex", sex, Sex)
        birth = _require_date("date_of_birth", date_of_birth)
        acquisition = _require_date("date_of_acquisition", date_of_acquisition)
        _check_life_dates(birth, acquisition)

        self._name = clean_name
        self._species = clean_species
        self._dietary_role = role
        self._sex = clean_sex
        self._date_of_birth = birth
        self._date_of_acquisition = acquisition
        self._cage_id = UNASSIGNED_ID

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        self._name = _require_text("name", value)

    @property
    def species(self) -> str:
        return self._species

    @species.setter
    def species(self, value: str) -> None:
        self._species = _require_text("species", value)

    @property
    def dietary_role(self) -> DietaryRole:
        return self._dietary_role

    @property
    def is_predator(self) -> bool:
        return self._dietary_role is DietaryRole.PREDATOR

    @property
    def sex(self) -> Sex:
        return self._sex

    @sex.setter
    def sex(self, value: Sex) -> None:
        self._sex = _require_enum("sex", value, Sex)

    @property
    def date_of_birth(self) -> date:
        return self._date_of_birth

    @date_of_birth.setter
    def date_of_birth(self, value: date) -> None:
        birth = _require_date("date_of_birth", value)
        _check_life_dates(birth, self._date_of_acquisition)
        self._date_of_birth = birth

    @property
    def date_of_acquisition(self) -> date:
        return self._date_of_acquisition

    @date_of_acquisition.setter
    def date_of_acquisition(self, value: date) -> None:
        acquisition = _require_date("date_of_acquisition", value)
        _check_life_dates(self._date_of_birth, acquisition)
        self._date_of_acquisition = acquisition

    @property
    def cage_id(self) -> int:
        """Id of the housing cage, ``0`` while unallocated."""
        return self._cage_id

    @property
    def is_allocated(self) -> bool:
        return self._cage_id != UNASSIGNED_ID

    def house_in(self, cage_id: int) -> None:
        cage_id = _require_positive_int("cage_id", cage_id)
        if self._cage_id not in (UNASSIGNED_ID, cage_id):
            raise ValidationError(
                ValidationErrorKind.INVALID_RANGE,
                "cage_id",
                f"Animal {self._id} is already housed in cage {self._cage_id}",
            )
        self._cage_id = cage_id

    def release(self, cage_id: int) -> bool:
        if self._cage_id == UNASSIGNED_ID or self._cage_id != cage_id:
            return False
        self._cage_id = UNASSIGNED_ID
        return True

    def __repr__(self) -> str:
        return (
            f"Animal(id={self._id}, name={self._name!r}, species={self._species!r}, "
            f"dietary_role={self._dietary_role.value}, cage_id={self._cage_id})"
        )


class Keeper(_RegistryIdentity):
    """Head or assistant keeper; both variants share one allocation rule."""

    entity_label = "Keeper"

    def __init__(
        self,
        role: KeeperRole,
        first_name: str,
        surname: str,
        address: str,
        contact_number: str,
    ) -> None:
        super().__init__()
        clean_role = _require_enum("role", role, KeeperRole)
        clean_first_name = _require_text("first_name", first_name)
        clean_surname = _require_text("surname", surname)
        clean_address = _require_text("address", address)
        clean_contact = _require_text("contact_number", contact_number)

        self._role = clean_role
        self._first_name = clean_first_name
        self._surname = clean_surname
        self._address = clean_address
        self._contact_number = clean_contact
        self._allocated_cage_ids: list[int] = []

    @classmethod
    def head_keeper(
        cls, first_name: str, surname: str, address: str, contact_number: str
    ) -> "Keeper":
        return cls(KeeperRole.HEAD_KEEPER, first_name, surname, address, contact_number)

    @classmethod
    def assistant_keeper(
        cls, first_name: str, surname: str, address: str, contact_number: str
    ) -> "Keeper":
        return cls(KeeperRole.ASSISTANT_KEEPER, first_name, surname, address, contact_number)

    @property
    def role(self) -> KeeperRole:
        return self._role

    @property
    def first_name(self) -> str:
        return self._first_name

    @first_name.setter
    def first_name(self, value: str) -> None:
        self._first_name = _require_text("first_name", value)

    @property
    def surname(self) -> str:
        return self._surname

    @surname.setter
    def surname(self, value: str) -> None:
        self._surname = _require_text("surname", value)

    @property
    def address(self) -> str:
        return self._address

    @address.setter
    def address(self, value: str) -> None:
        self._address = _require_text("address", value)

    @property
    def contact_number(self) -> str:
        return self._contact_number

    @contact_number.setter
    def contact_number(self, value: str) -> None:
        self._contact_number = _require_text("contact_number", value)

    @property
    def full_name(self) -> str:
        return f"{self._first_name} {self._surname}"

    @property
    def full_title(self) -> str:
        if self._role is KeeperRole.HEAD_KEEPER:
            return f"Head Keeper {self.full_name}"
        return f"Assistant Keeper {self.full_name}"

    @property
    def responsibilities(self) -> str:
        if self._role is KeeperRole.HEAD_KEEPER:
            return (
                "Full management responsibilities including animal allocation, "
                "keeper supervision, and welfare decisions"
            )
        return (
            "Daily animal care, health monitoring, and reporting to head keepers. "
            "No allocation or management responsibilities."
        )

    @property
    def has_management_permissions(self) -> bool:
        return self._role is KeeperRole.HEAD_KEEPER

    @property
    def allocated_cage_ids(self) -> tuple[int, ...]:
        return tuple(self._allocated_cage_ids)

    @property
    def allocated_cage_count(self) -> int:
        return len(self._allocated_cage_ids)

    def has_cage(self, cage_id: int) -> bool:
        return cage_id in self._allocated_cage_ids

    def can_accept_more_cages(self, max_cages: int = DEFAULT_MAX_CAGES) -> bool:
        return len(self._allocated_cage_ids) < max_cages

    def allocate_cage(self, cage_id: int, max_cages: int = DEFAULT_MAX_CAGES) -> bool:
        """Add ``cage_id``; returns False when it was already present."""
        cage_id = _require_positive_int("cage_id", cage_id)
        if cage_id in self._allocated_cage_ids:
            return False
        if not self.can_accept_more_cages(max_cages):
            raise ValidationError(
                ValidationErrorKind.INVALID_RANGE,
                "allocated_cage_ids",
                f"Keeper {self._id} already holds {len(self._allocated_cage_ids)}/{max_cages} cages",
            )
        self._allocated_cage_ids.append(cage_id)
        return True

    def remove_cage(self, cage_id: int) -> bool:
        if cage_id not in self._allocated_cage_ids:
            return False
        self._allocated_cage_ids.remove(cage_id)
        return True

    def __repr__(self) -> str:
        return (
            f"Keeper(id={self._id}, role={self._role.value}, name={self.full_name!r}, "
            f"cages={list(self._allocated_cage_ids)})"
        )


class Cage(_RegistryIdentity):
    entity_label = "Cage"

    def __init__(self, cage_number: str, description: str, capacity: int) -> None:
        super().__init__()
        clean_number = _require_text("cage_number", cage_number)
        clean_description = _require_text("description", description)
        clean_capacity = _require_positive_int("capacity", capacity)

        self._cage_number = clean_number
        self._description = clean_description
        self._capacity = clean_capacity
        # animal id -> dietary role, insertion ordered
        self._occupants: dict[int, DietaryRole] = {}
        self._assigned_keeper_id: Optional[int] = None

    @property
    def cage_number(self) -> str:
        return self._cage_number

    @cage_number.setter
    def cage_number(self, value: str) -> None:
        self._cage_number = _require_text("cage_number", value)

    @property
    def description(self) -> str:
        return self._description

    @description.setter
    def description(self, value: str) -> None:
        self._description = _require_text("description", value)

    @property
    def capacity(self) -> int:
        return self._capacity

    @capacity.setter
    def capacity(self, value: int) -> None:
        new_capacity = _require_positive_int("capacity", value)
        if new_capacity < len(self._occupants):
            raise ValidationError(
                ValidationErrorKind.INVALID_RANGE,
                "capacity",
                "capacity cannot be lower than current occupancy",
            )
        self._capacity = new_capacity

    @property
    def occupant_ids(self) -> tuple[int, ...]:
        return tuple(self._occupants)

    @property
    def occupancy(self) -> int:
        return len(self._occupants)

    @property
    def occupancy_kind(self) -> OccupancyKind:
        if not self._occupants:
            return OccupancyKind.EMPTY
        if DietaryRole.PREDATOR in self._occupants.values():
            return OccupancyKind.PREDATOR
        return OccupancyKind.PREY

    @property
    def is_empty(self) -> bool:
        return not self._occupants

    @property
    def is_full(self) -> bool:
        return len(self._occupants) >= self._capacity

    @property
    def available_space(self) -> int:
        return self._capacity - len(self._occupants)

    @property
    def occupancy_info(self) -> str:
        return f"{len(self._occupants)}/{self._capacity}"

    @property
    def status(self) -> CageStatus:
        if self.is_empty:
            return CageStatus.EMPTY
        if self.is_full:
            return CageStatus.FULL
        return CageStatus.AVAILABLE

    def contains(self, animal_id: int) -> bool:
        return animal_id in self._occupants

    def add_animal(self, animal: Animal) -> bool:
        """Record ``animal`` as an occupant; returns False when already present."""
        animal_id = _require_positive_int("animal_id", animal.id)
        if animal_id in self._occupants:
            return False
        if self.is_full:
            raise ValidationError(
                ValidationErrorKind.INVALID_RANGE,
                "occupants",
                f"Cage {self._id} is at capacity ({self.occupancy_info})",
            )
        self._occupants[animal_id] = animal.dietary_role
        return True

    def remove_animal(self, animal_id: int) -> bool:
        return self._occupants.pop(animal_id, None) is not None

    @property
    def assigned_keeper_id(self) -> Optional[int]:
        return self._assigned_keeper_id

    @property
    def has_assigned_keeper(self) -> bool:
        return self._assigned_keeper_id is not None

    def assign_keeper(self, keeper_id: int) -> None:
        self._assigned_keeper_id = _require_positive_int("keeper_id", keeper_id)

    def clear_keeper(self, keeper_id: int) -> bool:
        if self._assigned_keeper_id is None or self._assigned_keeper_id != keeper_id:
            return False
        self._assigned_keeper_id = None
        return True

    def __repr__(self) -> str:
        return (
            f"Cage(id={self._id}, number={self._cage_number!r}, "
            f"occupancy={self.occupancy_info}, keeper={self._assigned_keeper_id})"
        )


@dataclass(frozen=True)
class SystemStatistics:
    total_animals: int
    total_keepers: int
    total_cages: int
    empty_cages: int
    full_cages: int
    unassigned_cages: int
    total_capacity: int
    total_occupancy: int

    @property
    def available_space(self) -> int:
        return self.total_capacity - self.total_occupancy

    @property
    def occupancy_rate(self) -> float:
        if self.total_capacity == 0:
            return 0.0
        return self.total_occupancy / self.total_capacity
