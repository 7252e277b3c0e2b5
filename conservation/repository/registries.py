"""In-memory registries for animals, keepers and cages.

Registries are pure keyed storage: they assign ids on insert and answer
lookups, but enforce no business rules and never touch cross-references.
"""

from __future__ import annotations

from typing import Generic, Optional, TypeVar

from conservation.domain.constraints import DEFAULT_MAX_CAGES
from conservation.domain.models import (
    Animal,
    Cage,
    DietaryRole,
    Keeper,
    KeeperRole,
)
from conservation.utils.logger import get_logger


logger = get_logger(__name__)

EntityT = TypeVar("EntityT", Animal, Keeper, Cage)


class EntityRegistry(Generic[EntityT]):
    """Id -> entity store with an auto-incrementing id counter."""

    entity_label = "Entity"

    def __init__(self) -> None:
        self._entities: dict[int, EntityT] = {}
        self._last_id = 0

    def insert(self, entity: EntityT) -> int:
        if entity is None:
            raise ValueError(f"Cannot insert a null {self.entity_label.lower()}")
        new_id = self._last_id + 1
        # raises ValidationError(IMMUTABLE_FIELD) for an already registered entity
        entity.assign_id(new_id)
        self._last_id = new_id
        self._entities[new_id] = entity
        logger.debug("%s registered | id=%s", self.entity_label, new_id)
        return new_id

    def exists(self, entity_id: int) -> bool:
        return entity_id in self._entities

    def get(self, entity_id: int) -> Optional[EntityT]:
        return self._entities.get(entity_id)

    def remove(self, entity_id: int) -> bool:
        removed = self._entities.pop(entity_id, None)
        if removed is None:
            return False
        logger.debug("%s removed from registry | id=%s", self.entity_label, entity_id)
        return True

    def list_all(self) -> list[EntityT]:
        return list(self._entities.values())

    def count(self) -> int:
        return len(self._entities)

    def clear(self) -> None:
        """Drop every entity; the id counter keeps running so ids are never reused."""
        self._entities.clear()

    @property
    def last_id(self) -> int:
        return self._last_id


class AnimalRegistry(EntityRegistry[Animal]):
    entity_label = "Animal"

    def find_by_name(self, name: str) -> Optional[Animal]:
        if not name or not name.strip():
            return None
        target = name.strip().lower()
        for animal in self._entities.values():
            if animal.name.lower() == target:
                return animal
        return None

    def find_by_role(self, dietary_role: DietaryRole) -> list[Animal]:
        return [a for a in self._entities.values() if a.dietary_role is dietary_role]

    def find_by_species(self, species: str) -> list[Animal]:
        target = species.strip().lower()
        return [a for a in self._entities.values() if a.species.lower() == target]

    def find_unallocated(self) -> list[Animal]:
        return [a for a in self._entities.values() if not a.is_allocated]


class KeeperRegistry(EntityRegistry[Keeper]):
    entity_label = "Keeper"

    def find_by_role(self, role: KeeperRole) -> list[Keeper]:
        return [k for k in self._entities.values() if k.role is role]

    def find_with_capacity(self, max_cages: int = DEFAULT_MAX_CAGES) -> list[Keeper]:
        return [k for k in self._entities.values() if k.can_accept_more_cages(max_cages)]

    def find_by_cage_id(self, cage_id: int) -> list[Keeper]:
        return [k for k in self._entities.values() if k.has_cage(cage_id)]


class CageRegistry(EntityRegistry[Cage]):
    entity_label = "Cage"

    def find_by_cage_number(self, cage_number: str) -> Optional[Cage]:
        if not cage_number or not cage_number.strip():
            return None
        target = cage_number.strip().lower()
        for cage in self._entities.values():
            if cage.cage_number.lower() == target:
                return cage
        return None

    def find_empty(self) -> list[Cage]:
        return [c for c in self._entities.values() if c.is_empty]

    def find_full(self) -> list[Cage]:
        return [c for c in self._entities.values() if c.is_full]

    def find_available(self) -> list[Cage]:
        return [c for c in self._entities.values() if not c.is_full]

    def find_unassigned(self) -> list[Cage]:
        return [c for c in self._entities.values() if not c.has_assigned_keeper]

    def find_by_keeper_id(self, keeper_id: int) -> list[Cage]:
        return [c for c in self._entities.values() if c.assigned_keeper_id == keeper_id]

    def find_by_animal_id(self, animal_id: int) -> list[Cage]:
        return [c for c in self._entities.values() if c.contains(animal_id)]

    def total_capacity(self) -> int:
        return sum(c.capacity for c in self._entities.values())

    def total_occupancy(self) -> int:
        return sum(c.occupancy for c in self._entities.values())
