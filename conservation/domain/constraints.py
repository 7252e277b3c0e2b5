"""Tunable business constraints consumed by the allocation validators."""

from __future__ import annotations

from dataclasses import dataclass


DEFAULT_MIN_CAGES = 1
DEFAULT_MAX_CAGES = 4


@dataclass(frozen=True)
class KeeperConstraints:
    min_cages: int = DEFAULT_MIN_CAGES
    max_cages: int = DEFAULT_MAX_CAGES


@dataclass(frozen=True)
class AnimalRules:
    predator_shareable: bool = False
    prey_shareable: bool = True


def validate_keeper_constraints(constraints: KeeperConstraints) -> None:
    if constraints.min_cages < 0:
        raise ValueError("min_cages must be >= 0")
    if constraints.max_cages <= 0:
        raise ValueError("max_cages must be > 0")
    if constraints.min_cages > constraints.max_cages:
        raise ValueError("min_cages must not exceed max_cages")


def validate_animal_rules(rules: AnimalRules) -> None:
    if not isinstance(rules.predator_shareable, bool):
        raise ValueError("predator_shareable must be a boolean")
    if not isinstance(rules.prey_shareable, bool):
        raise ValueError("prey_shareable must be a boolean")
