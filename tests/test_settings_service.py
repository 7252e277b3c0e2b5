"""Tests for the JSON-backed configuration provider."""

from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path

import pytest

from conservation.domain.constraints import AnimalRules, KeeperConstraints
from conservation.services.settings_service import SettingsProvider
from conservation.utils.config import get_settings


def _provider(path: Path) -> SettingsProvider:
    return SettingsProvider(replace(get_settings(), settings_file_path=path))


def test_missing_file_yields_defaults_without_writing(tmp_path: Path) -> None:
    path = tmp_path / "config" / "settings.json"
    provider = _provider(path)

    assert provider.get_keeper_constraints() == KeeperConstraints()
    assert provider.get_animal_rules() == AnimalRules()
    assert provider.is_first_run() is True
    assert not path.exists()


def test_corrupt_file_falls_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    assert _provider(path).get_keeper_constraints() == KeeperConstraints()


def test_inconsistent_constraints_fall_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps({"keeper_constraints": {"min_cages": 5, "max_cages": 2}}),
        encoding="utf-8",
    )
    assert _provider(path).get_keeper_constraints() == KeeperConstraints()


def test_reads_existing_document(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps(
            {
                "first_run": False,
                "keeper_constraints": {"min_cages": 0, "max_cages": 6},
                "animal_rules": {"predator_shareable": True, "prey_shareable": False},
            }
        ),
        encoding="utf-8",
    )
    provider = _provider(path)

    assert provider.is_first_run() is False
    assert provider.get_keeper_constraints() == KeeperConstraints(min_cages=0, max_cages=6)
    assert provider.get_animal_rules() == AnimalRules(predator_shareable=True, prey_shareable=False)


def test_updates_persist_and_reload(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "settings.json"
    provider = _provider(path)
    provider.update_keeper_constraints(KeeperConstraints(min_cages=2, max_cages=3))
    provider.update_animal_rules(AnimalRules(predator_shareable=True, prey_shareable=True))
    provider.mark_initialized()

    reloaded = _provider(path)
    assert reloaded.get_keeper_constraints() == KeeperConstraints(min_cages=2, max_cages=3)
    assert reloaded.get_animal_rules().predator_shareable is True
    assert reloaded.is_first_run() is False


def test_invalid_update_rejected_and_not_saved(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    provider = _provider(path)
    with pytest.raises(ValueError):
        provider.update_keeper_constraints(KeeperConstraints(min_cages=3, max_cages=1))
    assert provider.get_keeper_constraints() == KeeperConstraints()
    assert not path.exists()


def test_reload_picks_up_external_edits(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    provider = _provider(path)
    path.write_text(json.dumps({"keeper_constraints": {"min_cages": 1, "max_cages": 2}}), encoding="utf-8")

    provider.reload()
    assert provider.get_keeper_constraints().max_cages == 2
