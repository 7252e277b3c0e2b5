"""Configuration provider backed by a JSON settings document."""

from __future__ import annotations

import json
from pathlib import Path
from threading import RLock
from typing import Optional

from pydantic import BaseModel, Field, ValidationError as SchemaValidationError

from conservation.domain.constraints import (
    AnimalRules,
    DEFAULT_MAX_CAGES,
    DEFAULT_MIN_CAGES,
    KeeperConstraints,
    validate_animal_rules,
    validate_keeper_constraints,
)
from conservation.utils.config import Settings, get_settings
from conservation.utils.logger import get_logger


logger = get_logger(__name__)


class KeeperConstraintsDocument(BaseModel):
    min_cages: int = Field(default=DEFAULT_MIN_CAGES, ge=0)
    max_cages: int = Field(default=DEFAULT_MAX_CAGES, gt=0)


class AnimalRulesDocument(BaseModel):
    predator_shareable: bool = False
    prey_shareable: bool = True


class SettingsDocument(BaseModel):
    """On-disk shape of ``config/settings.json``."""

    first_run: bool = True
    keeper_constraints: KeeperConstraintsDocument = Field(
        default_factory=KeeperConstraintsDocument
    )
    animal_rules: AnimalRulesDocument = Field(default_factory=AnimalRulesDocument)


class SettingsProvider:
    """Supplies keeper constraints and animal rules to the allocation core.

    Values are re-read from the in-memory document on every call, so an
    update through this provider is visible to the next allocation.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._path = Path(self._settings.settings_file_path)
        self._lock = RLock()
        self._document = self._load()

    @property
    def settings_path(self) -> Path:
        return self._path

    def _load(self) -> SettingsDocument:
        if not self._path.exists():
            logger.info("Settings file not found, using defaults | path=%s", self._path)
            return SettingsDocument()
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            document = SettingsDocument.model_validate(raw)
            validate_keeper_constraints(_to_keeper_constraints(document))
        except (OSError, json.JSONDecodeError, SchemaValidationError, ValueError) as exc:
            logger.error(
                "Settings file unreadable, using defaults | path=%s | error=%s",
                self._path,
                exc,
            )
            return SettingsDocument()
        logger.info("Settings loaded | path=%s", self._path)
        return document

    def reload(self) -> None:
        with self._lock:
            self._document = self._load()

    def _save(self, document: SettingsDocument) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(document.model_dump_json(indent=2), encoding="utf-8")
        self._document = document
        logger.info("Settings saved | path=%s", self._path)

    def get_keeper_constraints(self) -> KeeperConstraints:
        with self._lock:
            return _to_keeper_constraints(self._document)

    def get_animal_rules(self) -> AnimalRules:
        with self._lock:
            rules = self._document.animal_rules
            return AnimalRules(
                predator_shareable=rules.predator_shareable,
                prey_shareable=rules.prey_shareable,
            )

    def is_first_run(self) -> bool:
        with self._lock:
            return self._document.first_run

    def update_keeper_constraints(self, constraints: KeeperConstraints) -> None:
        validate_keeper_constraints(constraints)
        with self._lock:
            document = self._document.model_copy(
                update={
                    "keeper_constraints": KeeperConstraintsDocument(
                        min_cages=constraints.min_cages,
                        max_cages=constraints.max_cages,
                    )
                }
            )
            self._save(document)

    def update_animal_rules(self, rules: AnimalRules) -> None:
        validate_animal_rules(rules)
        with self._lock:
            document = self._document.model_copy(
                update={
                    "animal_rules": AnimalRulesDocument(
                        predator_shareable=rules.predator_shareable,
                        prey_shareable=rules.prey_shareable,
                    )
                }
            )
            self._save(document)

    def mark_initialized(self) -> None:
        with self._lock:
            self._save(self._document.model_copy(update={"first_run": False}))


def _to_keeper_constraints(document: SettingsDocument) -> KeeperConstraints:
    return KeeperConstraints(
        min_cages=document.keeper_constraints.min_cages,
        max_cages=document.keeper_constraints.max_cages,
    )
