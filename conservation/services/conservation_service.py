"""Entity lifecycle and reporting for the conservation facility."""

from __future__ import annotations

from threading import RLock
from typing import Optional

from conservation.domain.errors import EntityNotFoundError
from conservation.domain.models import Animal, Cage, Keeper, SystemStatistics
from conservation.repository.registries import AnimalRegistry, CageRegistry, KeeperRegistry
from conservation.services.settings_service import SettingsProvider
from conservation.utils.logger import format_fields, get_logger


logger = get_logger(__name__)


class ConservationService:
    """Registers and removes entities, keeping cross-references consistent.

    Removal cascades: every link pointing at the removed entity is cleared on
    the other side before the registry entry is dropped.
    """

    def __init__(
        self,
        animals: Optional[AnimalRegistry] = None,
        keepers: Optional[KeeperRegistry] = None,
        cages: Optional[CageRegistry] = None,
        settings_provider: Optional[SettingsProvider] = None,
        lock: Optional[RLock] = None,
    ) -> None:
        self._animals = animals if animals is not None else AnimalRegistry()
        self._keepers = keepers if keepers is not None else KeeperRegistry()
        self._cages = cages if cages is not None else CageRegistry()
        self._settings_provider = settings_provider or SettingsProvider()
        self._lock = lock or RLock()

    # --- registration ---

    def add_animal(self, animal: Animal) -> int:
        with self._lock:
            animal_id = self._animals.insert(animal)
        logger.info(
            "Animal added | %s",
            format_fields(animal_id=animal_id, name=animal.name, role=animal.dietary_role.value),
        )
        return animal_id

    def add_keeper(self, keeper: Keeper) -> int:
        with self._lock:
            keeper_id = self._keepers.insert(keeper)
        logger.info(
            "Keeper added | %s",
            format_fields(keeper_id=keeper_id, name=keeper.full_name, role=keeper.role.value),
        )
        return keeper_id

    def add_cage(self, cage: Cage) -> int:
        with self._lock:
            cage_id = self._cages.insert(cage)
        logger.info(
            "Cage added | %s",
            format_fields(cage_id=cage_id, number=cage.cage_number, capacity=cage.capacity),
        )
        return cage_id

    # --- lookup ---

    def get_animal(self, animal_id: int) -> Animal:
        animal = self._animals.get(animal_id)
        if animal is None:
            raise EntityNotFoundError("Animal", animal_id)
        return animal

    def get_keeper(self, keeper_id: int) -> Keeper:
        keeper = self._keepers.get(keeper_id)
        if keeper is None:
            raise EntityNotFoundError("Keeper", keeper_id)
        return keeper

    def get_cage(self, cage_id: int) -> Cage:
        cage = self._cages.get(cage_id)
        if cage is None:
            raise EntityNotFoundError("Cage", cage_id)
        return cage

    def list_animals(self) -> list[Animal]:
        return sorted(self._animals.list_all(), key=lambda animal: animal.name.lower())

    def list_keepers(self) -> list[Keeper]:
        return sorted(self._keepers.list_all(), key=lambda keeper: keeper.id)

    def list_cages(self) -> list[Cage]:
        return sorted(self._cages.list_all(), key=lambda cage: cage.id)

    # --- removal ---

    def remove_animal(self, animal_id: int) -> None:
        with self._lock:
            animal = self.get_animal(animal_id)
            for cage in self._cages.find_by_animal_id(animal_id):
                cage.remove_animal(animal_id)
                animal.release(cage.id)
            self._animals.remove(animal_id)
        logger.info("Animal removed | %s", format_fields(animal_id=animal_id, name=animal.name))

    def remove_keeper(self, keeper_id: int) -> None:
        with self._lock:
            keeper = self.get_keeper(keeper_id)
            released = list(keeper.allocated_cage_ids)
            for cage_id in released:
                cage = self._cages.get(cage_id)
                if cage is not None:
                    cage.clear_keeper(keeper_id)
                keeper.remove_cage(cage_id)
            for cage in self._cages.find_by_keeper_id(keeper_id):
                cage.clear_keeper(keeper_id)
            self._keepers.remove(keeper_id)
        logger.info(
            "Keeper removed | %s",
            format_fields(keeper_id=keeper_id, released_cages=released),
        )

    def remove_cage(self, cage_id: int) -> None:
        with self._lock:
            cage = self.get_cage(cage_id)
            evicted = list(cage.occupant_ids)
            for animal_id in evicted:
                animal = self._animals.get(animal_id)
                if animal is not None:
                    animal.release(cage_id)
                cage.remove_animal(animal_id)
            for keeper in self._keepers.find_by_cage_id(cage_id):
                keeper.remove_cage(cage_id)
            if cage.assigned_keeper_id is not None:
                cage.clear_keeper(cage.assigned_keeper_id)
            self._cages.remove(cage_id)
        logger.info(
            "Cage removed | %s",
            format_fields(cage_id=cage_id, evicted_animals=evicted),
        )

    # --- reporting ---

    def get_available_animals(self) -> list[Animal]:
        return self._animals.find_unallocated()

    def get_available_cages(self) -> list[Cage]:
        return self._cages.find_available()

    def get_available_keepers(self) -> list[Keeper]:
        max_cages = self._settings_provider.get_keeper_constraints().max_cages
        return self._keepers.find_with_capacity(max_cages)

    def get_statistics(self) -> SystemStatistics:
        with self._lock:
            return SystemStatistics(
                total_animals=self._animals.count(),
                total_keepers=self._keepers.count(),
                total_cages=self._cages.count(),
                empty_cages=len(self._cages.find_empty()),
                full_cages=len(self._cages.find_full()),
                unassigned_cages=len(self._cages.find_unassigned()),
                total_capacity=self._cages.total_capacity(),
                total_occupancy=self._cages.total_occupancy(),
            )
