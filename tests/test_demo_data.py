"""Tests for demo data seeding into empty registries."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from conservation.domain.models import Cage, DietaryRole, KeeperRole
from conservation.services.conservation_service import ConservationService
from conservation.services.demo_data_service import DemoDataService
from conservation.services.settings_service import SettingsProvider
from conservation.utils.config import get_settings


def _build(path: Path) -> tuple[ConservationService, DemoDataService, SettingsProvider]:
    provider = SettingsProvider(replace(get_settings(), settings_file_path=path))
    service = ConservationService(settings_provider=provider)
    return service, DemoDataService(service, provider), provider


def test_empty_registries_are_seeded(tmp_path: Path) -> None:
    service, demo, provider = _build(tmp_path / "settings.json")

    assert demo.seed_if_empty() is True

    cages = service.list_cages()
    assert len(cages) == 15
    assert [c.capacity for c in cages].count(10) == 5
    assert [c.capacity for c in cages].count(5) == 3
    assert [c.capacity for c in cages].count(1) == 7
    assert cages[0].cage_number == "Large-01"

    keepers = service.list_keepers()
    assert sum(k.role is KeeperRole.HEAD_KEEPER for k in keepers) == 2
    assert sum(k.role is KeeperRole.ASSISTANT_KEEPER for k in keepers) == 3

    animals = service.list_animals()
    assert len(animals) == 11
    assert sum(a.dietary_role is DietaryRole.PREDATOR for a in animals) == 3
    assert all(not a.is_allocated for a in animals)
    assert provider.is_first_run() is False


def test_restart_with_empty_registries_is_seeded_again(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    _, demo, _ = _build(path)
    demo.seed_if_empty()

    service, demo_again, provider = _build(path)
    assert provider.is_first_run() is False
    assert demo_again.seed_if_empty() is True
    assert len(service.list_cages()) == 15
    assert len(service.list_animals()) == 11


def test_populated_registries_are_left_alone(tmp_path: Path) -> None:
    service, demo, _ = _build(tmp_path / "settings.json")
    service.add_cage(Cage("Custom-01", "Custom cage", 2))

    assert demo.seed_if_empty() is False
    assert [c.cage_number for c in service.list_cages()] == ["Custom-01"]
    assert service.list_animals() == []


def test_seeding_twice_in_one_process_is_a_no_op(tmp_path: Path) -> None:
    service, demo, _ = _build(tmp_path / "settings.json")
    demo.seed_if_empty()

    assert demo.seed_if_empty() is False
    assert len(service.list_cages()) == 15
