"""Tests for allocation transactions across the registries."""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from pathlib import Path

import pytest

from conservation.domain.constraints import AnimalRules, KeeperConstraints
from conservation.domain.errors import (
    CapacityExceededError,
    DuplicateAssignmentError,
    EntityNotFoundError,
    IncompatibleOccupantsError,
    KeeperUnderloadError,
    MaxCagesExceededError,
    NotAllocatedError,
)
from conservation.domain.models import Animal, Cage, DietaryRole, Keeper, OccupancyKind, Sex
from conservation.repository.registries import AnimalRegistry, CageRegistry, KeeperRegistry
from conservation.services.allocation_service import AllocationService
from conservation.services.settings_service import SettingsProvider
from conservation.utils.config import get_settings


class Facility:
    """Registries plus an allocation service sharing a temp settings file."""

    def __init__(self, tmp_path: Path) -> None:
        self.animals = AnimalRegistry()
        self.keepers = KeeperRegistry()
        self.cages = CageRegistry()
        self.provider = SettingsProvider(
            replace(get_settings(), settings_file_path=tmp_path / "settings.json")
        )
        self.service = AllocationService(
            animals=self.animals,
            keepers=self.keepers,
            cages=self.cages,
            settings_provider=self.provider,
        )

    def animal(self, name: str, role: DietaryRole) -> Animal:
        animal = Animal(name, "Tiger", role, Sex.MALE, date(2019, 1, 1), date(2020, 1, 1))
        self.animals.insert(animal)
        return animal

    def cage(self, capacity: int) -> Cage:
        cage = Cage(f"Cage-{self.cages.last_id + 1}", "Test cage", capacity)
        self.cages.insert(cage)
        return cage

    def keeper(self) -> Keeper:
        keeper = Keeper.head_keeper("John", "Smith", "123 Main Street", "07123456789")
        self.keepers.insert(keeper)
        return keeper


@pytest.fixture
def facility(tmp_path: Path) -> Facility:
    return Facility(tmp_path)


def assert_consistent(facility: Facility) -> None:
    """Every cross-reference is mirrored on the other side."""
    for cage in facility.cages.list_all():
        assert cage.occupancy <= cage.capacity
        kinds = {facility.animals.get(a).dietary_role for a in cage.occupant_ids}
        if DietaryRole.PREDATOR in kinds:
            assert kinds == {DietaryRole.PREDATOR}
        for animal_id in cage.occupant_ids:
            assert facility.animals.get(animal_id).cage_id == cage.id
        if cage.assigned_keeper_id is not None:
            assert facility.keepers.get(cage.assigned_keeper_id).has_cage(cage.id)
    for animal in facility.animals.list_all():
        if animal.is_allocated:
            assert facility.cages.get(animal.cage_id).contains(animal.id)
    for keeper in facility.keepers.list_all():
        assert keeper.allocated_cage_count <= 4
        for cage_id in keeper.allocated_cage_ids:
            assert facility.cages.get(cage_id).assigned_keeper_id == keeper.id


# --- Animal allocation ---

def test_allocate_and_deallocate_round_trip(facility: Facility) -> None:
    animal = facility.animal("Marty", DietaryRole.PREY)
    cage = facility.cage(3)

    facility.service.allocate_animal(animal.id, cage.id)
    assert animal.cage_id == cage.id
    assert cage.occupant_ids == (animal.id,)
    assert cage.occupancy_kind is OccupancyKind.PREY

    facility.service.deallocate_animal(animal.id)
    assert animal.is_allocated is False
    assert cage.is_empty
    assert_consistent(facility)


def test_second_predator_rejected_and_nothing_changes(facility: Facility) -> None:
    first = facility.animal("Leo", DietaryRole.PREDATOR)
    second = facility.animal("Tigress", DietaryRole.PREDATOR)
    cage = facility.cage(2)
    facility.service.allocate_animal(first.id, cage.id)

    with pytest.raises(IncompatibleOccupantsError):
        facility.service.allocate_animal(second.id, cage.id)

    assert cage.occupant_ids == (first.id,)
    assert second.is_allocated is False
    assert_consistent(facility)


def test_prey_rejected_from_full_cage(facility: Facility) -> None:
    cage = facility.cage(1)
    facility.service.allocate_animal(facility.animal("Bugs", DietaryRole.PREY).id, cage.id)
    with pytest.raises(CapacityExceededError):
        facility.service.allocate_animal(facility.animal("Flopsy", DietaryRole.PREY).id, cage.id)


def test_prey_cage_fills_exactly_to_capacity(facility: Facility) -> None:
    cage = facility.cage(3)
    herd = [facility.animal(name, DietaryRole.PREY) for name in ("Marty", "Stripe", "Daisy")]
    for animal in herd:
        facility.service.allocate_animal(animal.id, cage.id)
    assert cage.occupant_ids == tuple(a.id for a in herd)
    assert cage.is_full

    extra = facility.animal("Bugs", DietaryRole.PREY)
    with pytest.raises(CapacityExceededError):
        facility.service.allocate_animal(extra.id, cage.id)
    assert cage.occupancy == 3
    assert extra.is_allocated is False


def test_rules_follow_provider_updates(facility: Facility) -> None:
    cage = facility.cage(2)
    facility.service.allocate_animal(facility.animal("Leo", DietaryRole.PREDATOR).id, cage.id)
    facility.provider.update_animal_rules(AnimalRules(predator_shareable=True))

    facility.service.allocate_animal(facility.animal("Tigress", DietaryRole.PREDATOR).id, cage.id)
    assert cage.occupancy == 2


def test_repeat_allocation_is_idempotent(facility: Facility) -> None:
    animal = facility.animal("Marty", DietaryRole.PREY)
    cage = facility.cage(2)
    facility.service.allocate_animal(animal.id, cage.id)
    facility.service.allocate_animal(animal.id, cage.id)
    assert cage.occupant_ids == (animal.id,)


def test_allocation_to_second_cage_is_duplicate(facility: Facility) -> None:
    animal = facility.animal("Marty", DietaryRole.PREY)
    home = facility.cage(2)
    other = facility.cage(2)
    facility.service.allocate_animal(animal.id, home.id)

    with pytest.raises(DuplicateAssignmentError):
        facility.service.allocate_animal(animal.id, other.id)
    assert animal.cage_id == home.id
    assert other.is_empty


def test_deallocate_unallocated_animal(facility: Facility) -> None:
    animal = facility.animal("Marty", DietaryRole.PREY)
    with pytest.raises(NotAllocatedError):
        facility.service.deallocate_animal(animal.id)


@pytest.mark.parametrize(
    "call",
    [
        lambda s: s.allocate_animal(999, 1),
        lambda s: s.allocate_animal(1, 999),
        lambda s: s.deallocate_animal(999),
        lambda s: s.assign_keeper(999, 1),
        lambda s: s.assign_keeper(1, 999),
        lambda s: s.unassign_keeper(1, 999),
    ],
)
def test_unknown_ids_raise_not_found(facility: Facility, call) -> None:
    facility.animal("Marty", DietaryRole.PREY)
    facility.cage(1)
    facility.keeper()
    with pytest.raises(EntityNotFoundError):
        call(facility.service)


# --- Keeper assignment ---

def test_fifth_cage_rejected(facility: Facility) -> None:
    keeper = facility.keeper()
    cages = [facility.cage(1) for _ in range(5)]
    for cage in cages[:4]:
        facility.service.assign_keeper(keeper.id, cage.id)

    with pytest.raises(MaxCagesExceededError):
        facility.service.assign_keeper(keeper.id, cages[4].id)

    assert keeper.allocated_cage_ids == tuple(c.id for c in cages[:4])
    assert cages[4].assigned_keeper_id is None
    assert_consistent(facility)


def test_reassign_held_cage_at_max_is_idempotent(facility: Facility) -> None:
    keeper = facility.keeper()
    cages = [facility.cage(1) for _ in range(4)]
    for cage in cages:
        facility.service.assign_keeper(keeper.id, cage.id)

    facility.service.assign_keeper(keeper.id, cages[0].id)
    assert keeper.allocated_cage_count == 4


def test_assigning_held_cage_hands_it_over(facility: Facility) -> None:
    previous = facility.keeper()
    successor = facility.keeper()
    cage = facility.cage(1)
    facility.service.assign_keeper(previous.id, cage.id)

    facility.service.assign_keeper(successor.id, cage.id)

    assert cage.assigned_keeper_id == successor.id
    assert previous.has_cage(cage.id) is False
    assert successor.has_cage(cage.id) is True
    assert_consistent(facility)


def test_unassign_keeper(facility: Facility) -> None:
    keeper = facility.keeper()
    cage = facility.cage(1)
    facility.service.assign_keeper(keeper.id, cage.id)

    facility.service.unassign_keeper(keeper.id, cage.id)
    assert keeper.allocated_cage_ids == ()
    assert cage.assigned_keeper_id is None


def test_unassign_unheld_cage(facility: Facility) -> None:
    keeper = facility.keeper()
    cage = facility.cage(1)
    with pytest.raises(NotAllocatedError):
        facility.service.unassign_keeper(keeper.id, cage.id)


def test_unassign_below_minimum(facility: Facility) -> None:
    facility.provider.update_keeper_constraints(KeeperConstraints(min_cages=2, max_cages=4))
    keeper = facility.keeper()
    first, second = facility.cage(1), facility.cage(1)
    facility.service.assign_keeper(keeper.id, first.id)
    facility.service.assign_keeper(keeper.id, second.id)

    with pytest.raises(KeeperUnderloadError):
        facility.service.unassign_keeper(keeper.id, second.id)
    assert keeper.allocated_cage_count == 2

    facility.service.unassign_keeper(keeper.id, second.id, allow_underload=True)
    assert keeper.allocated_cage_ids == (first.id,)


# --- Mixed sequence ---

def test_consistency_holds_across_mixed_sequence(facility: Facility) -> None:
    predators = [facility.animal(f"P{i}", DietaryRole.PREDATOR) for i in range(3)]
    prey = [facility.animal(f"Q{i}", DietaryRole.PREY) for i in range(6)]
    cages = [facility.cage(capacity) for capacity in (1, 2, 3, 5)]
    keepers = [facility.keeper() for _ in range(2)]

    attempts = [(a.id, c.id) for a in predators + prey for c in cages]
    for animal_id, cage_id in attempts:
        try:
            facility.service.allocate_animal(animal_id, cage_id)
        except (CapacityExceededError, IncompatibleOccupantsError, DuplicateAssignmentError):
            pass
        assert_consistent(facility)

    for keeper in keepers:
        for cage in cages:
            facility.service.assign_keeper(keeper.id, cage.id)
            assert_consistent(facility)

    for animal in predators + prey:
        if animal.is_allocated:
            facility.service.deallocate_animal(animal.id)
    assert_consistent(facility)
    assert all(cage.is_empty for cage in cages)
