"""Stateless allocation rules.

Each validator receives fully materialised entities plus the configuration in
force and either returns a decision or raises an ``AllocationRuleError``.
Resolving ids and checking existence is the caller's job.
"""

from __future__ import annotations

from dataclasses import dataclass

from conservation.domain.constraints import AnimalRules, KeeperConstraints
from conservation.domain.errors import (
    CapacityExceededError,
    DuplicateAssignmentError,
    IncompatibleOccupantsError,
    KeeperUnderloadError,
    MaxCagesExceededError,
    NotAllocatedError,
)
from conservation.domain.models import Animal, Cage, Keeper, OccupancyKind


@dataclass(frozen=True)
class PlacementDecision:
    """Outcome of a passed validation.

    ``already_applied`` marks an idempotent repeat: the relationship exists
    and the caller must not mutate anything.
    """

    already_applied: bool = False


def _check_occupant_compatibility(animal: Animal, cage: Cage, rules: AnimalRules) -> None:
    kind = cage.occupancy_kind
    if kind is OccupancyKind.EMPTY:
        return

    if animal.is_predator:
        if kind is OccupancyKind.PREY:
            raise IncompatibleOccupantsError(
                f"Predator '{animal.name}' (id={animal.id}) cannot join cage {cage.id} "
                f"({cage.cage_number}) which houses prey"
            )
        if not rules.predator_shareable:
            raise IncompatibleOccupantsError(
                f"Predator '{animal.name}' (id={animal.id}) must be housed alone; "
                f"cage {cage.id} ({cage.cage_number}) already holds {cage.occupancy} animal(s)"
            )
        return

    if kind is OccupancyKind.PREDATOR:
        raise IncompatibleOccupantsError(
            f"Prey '{animal.name}' (id={animal.id}) cannot share cage {cage.id} "
            f"({cage.cage_number}) with a predator"
        )
    if not rules.prey_shareable:
        raise IncompatibleOccupantsError(
            f"Prey '{animal.name}' (id={animal.id}) may not share cage {cage.id} "
            f"({cage.cage_number}) while prey sharing is disabled"
        )


def validate_animal_placement(
    animal: Animal,
    cage: Cage,
    rules: AnimalRules,
) -> PlacementDecision:
    """Decide whether ``animal`` may be placed in ``cage``.

    Compatibility is checked before capacity, so a full cage holding a
    predator reports ``IncompatibleOccupantsError``.
    """
    if animal.cage_id == cage.id and cage.contains(animal.id):
        return PlacementDecision(already_applied=True)
    if animal.is_allocated:
        raise DuplicateAssignmentError(
            f"Animal '{animal.name}' (id={animal.id}) is already housed in cage "
            f"{animal.cage_id}; deallocate it first"
        )
    if cage.contains(animal.id):
        raise DuplicateAssignmentError(
            f"Cage {cage.id} already lists animal {animal.id} as an occupant"
        )

    _check_occupant_compatibility(animal, cage, rules)

    if cage.is_full:
        raise CapacityExceededError(
            f"Cage {cage.id} ({cage.cage_number}) is at full capacity "
            f"({cage.occupancy_info}); cannot add '{animal.name}' (id={animal.id})"
        )
    return PlacementDecision()


def validate_animal_removal(animal: Animal, cage: Cage) -> None:
    if animal.cage_id != cage.id or not cage.contains(animal.id):
        raise NotAllocatedError(
            f"Animal {animal.id} is not housed in cage {cage.id}"
        )


def validate_keeper_assignment(
    keeper: Keeper,
    cage: Cage,
    constraints: KeeperConstraints,
) -> PlacementDecision:
    """Decide whether ``keeper`` may take on ``cage``.

    Re-assigning a cage the keeper already holds is an idempotent success,
    even when the keeper is at the maximum. Both sides of the link must agree;
    a keeper listing a cage that names another keeper is rejected.
    """
    if keeper.has_cage(cage.id):
        if cage.assigned_keeper_id == keeper.id:
            return PlacementDecision(already_applied=True)
        raise DuplicateAssignmentError(
            f"Keeper {keeper.id} lists cage {cage.id} but the cage is assigned to "
            f"keeper {cage.assigned_keeper_id}"
        )
    if not keeper.can_accept_more_cages(constraints.max_cages):
        raise MaxCagesExceededError(
            f"Keeper '{keeper.full_name}' (id={keeper.id}) has reached the maximum "
            f"cage allocation ({keeper.allocated_cage_count}/{constraints.max_cages}); "
            f"cannot assign cage {cage.id} ({cage.cage_number})"
        )
    return PlacementDecision()


def validate_keeper_release(
    keeper: Keeper,
    cage: Cage,
    constraints: KeeperConstraints,
    allow_underload: bool = False,
) -> None:
    if not keeper.has_cage(cage.id) or cage.assigned_keeper_id != keeper.id:
        raise NotAllocatedError(
            f"Keeper {keeper.id} is not assigned to cage {cage.id}"
        )

    remaining = keeper.allocated_cage_count - 1
    if 0 < remaining < constraints.min_cages and not allow_underload:
        raise KeeperUnderloadError(
            f"Releasing cage {cage.id} would leave keeper '{keeper.full_name}' "
            f"(id={keeper.id}) with {remaining} cage(s); minimum is {constraints.min_cages}"
        )
