"""Allocation transactions: animals into cages, keepers onto cages.

Each public operation runs lookup -> validate -> mutate under one lock. A
rejected request raises before any entity is touched; an accepted one updates
both sides of the relationship before the lock is released.
"""

from __future__ import annotations

from threading import RLock
from typing import Optional

from conservation.domain.errors import (
    AllocationRuleError,
    EntityNotFoundError,
    NotAllocatedError,
)
from conservation.domain.models import Animal, Cage, Keeper
from conservation.domain.validators import (
    validate_animal_placement,
    validate_animal_removal,
    validate_keeper_assignment,
    validate_keeper_release,
)
from conservation.repository.registries import AnimalRegistry, CageRegistry, KeeperRegistry
from conservation.services.settings_service import SettingsProvider
from conservation.utils.logger import format_fields, get_logger


logger = get_logger(__name__)


class AllocationService:
    """Orchestrates allocation and deallocation across the registries."""

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

    @property
    def lock(self) -> RLock:
        return self._lock

    def _require_animal(self, animal_id: int) -> Animal:
        animal = self._animals.get(animal_id)
        if animal is None:
            raise EntityNotFoundError("Animal", animal_id)
        return animal

    def _require_keeper(self, keeper_id: int) -> Keeper:
        keeper = self._keepers.get(keeper_id)
        if keeper is None:
            raise EntityNotFoundError("Keeper", keeper_id)
        return keeper

    def _require_cage(self, cage_id: int) -> Cage:
        cage = self._cages.get(cage_id)
        if cage is None:
            raise EntityNotFoundError("Cage", cage_id)
        return cage

    @staticmethod
    def _log_rejection(operation: str, exc: AllocationRuleError, **fields: int) -> None:
        logger.warning(
            "%s rejected | %s | reason=%s | detail=%s",
            operation,
            format_fields(**fields),
            type(exc).__name__,
            exc,
        )

    def allocate_animal(self, animal_id: int, cage_id: int) -> None:
        with self._lock:
            animal = self._require_animal(animal_id)
            cage = self._require_cage(cage_id)
            try:
                decision = validate_animal_placement(
                    animal, cage, self._settings_provider.get_animal_rules()
                )
            except AllocationRuleError as exc:
                self._log_rejection("Animal allocation", exc, animal_id=animal_id, cage_id=cage_id)
                raise

            if decision.already_applied:
                logger.info(
                    "Animal already in cage | %s",
                    format_fields(animal_id=animal_id, cage_id=cage_id),
                )
                return

            cage.add_animal(animal)
            animal.house_in(cage.id)
            logger.info(
                "Animal allocated | %s",
                format_fields(
                    animal_id=animal_id,
                    cage_id=cage_id,
                    occupancy=cage.occupancy_info,
                ),
            )

    def deallocate_animal(self, animal_id: int) -> None:
        with self._lock:
            animal = self._require_animal(animal_id)
            if not animal.is_allocated:
                exc = NotAllocatedError(f"Animal {animal_id} is not housed in any cage")
                self._log_rejection("Animal deallocation", exc, animal_id=animal_id)
                raise exc
            cage = self._require_cage(animal.cage_id)
            try:
                validate_animal_removal(animal, cage)
            except AllocationRuleError as exc:
                self._log_rejection("Animal deallocation", exc, animal_id=animal_id, cage_id=cage.id)
                raise

            cage.remove_animal(animal.id)
            animal.release(cage.id)
            logger.info(
                "Animal deallocated | %s",
                format_fields(
                    animal_id=animal_id,
                    cage_id=cage.id,
                    occupancy=cage.occupancy_info,
                ),
            )

    def assign_keeper(self, keeper_id: int, cage_id: int) -> None:
        """Assign ``cage_id`` to ``keeper_id``.

        A cage held by another keeper is handed over: the previous keeper
        loses it in the same transaction.
        """
        with self._lock:
            keeper = self._require_keeper(keeper_id)
            cage = self._require_cage(cage_id)
            constraints = self._settings_provider.get_keeper_constraints()
            try:
                decision = validate_keeper_assignment(keeper, cage, constraints)
            except AllocationRuleError as exc:
                self._log_rejection("Keeper assignment", exc, keeper_id=keeper_id, cage_id=cage_id)
                raise

            if decision.already_applied:
                logger.info(
                    "Keeper already assigned | %s",
                    format_fields(keeper_id=keeper_id, cage_id=cage_id),
                )
                return

            previous_keeper: Optional[Keeper] = None
            if cage.assigned_keeper_id is not None and cage.assigned_keeper_id != keeper.id:
                previous_keeper = self._keepers.get(cage.assigned_keeper_id)

            keeper.allocate_cage(cage.id, constraints.max_cages)
            if previous_keeper is not None:
                previous_keeper.remove_cage(cage.id)
            cage.assign_keeper(keeper.id)
            logger.info(
                "Keeper assigned | %s",
                format_fields(
                    keeper_id=keeper_id,
                    cage_id=cage_id,
                    previous_keeper_id=previous_keeper.id if previous_keeper else None,
                    workload=f"{keeper.allocated_cage_count}/{constraints.max_cages}",
                ),
            )

    def unassign_keeper(
        self,
        keeper_id: int,
        cage_id: int,
        allow_underload: bool = False,
    ) -> None:
        with self._lock:
            keeper = self._require_keeper(keeper_id)
            cage = self._require_cage(cage_id)
            constraints = self._settings_provider.get_keeper_constraints()
            try:
                validate_keeper_release(keeper, cage, constraints, allow_underload)
            except AllocationRuleError as exc:
                self._log_rejection("Keeper unassignment", exc, keeper_id=keeper_id, cage_id=cage_id)
                raise

            keeper.remove_cage(cage.id)
            cage.clear_keeper(keeper.id)
            logger.info(
                "Keeper unassigned | %s",
                format_fields(
                    keeper_id=keeper_id,
                    cage_id=cage_id,
                    workload=keeper.allocated_cage_count,
                ),
            )
