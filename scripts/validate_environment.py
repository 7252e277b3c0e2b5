#!/usr/bin/env python3
"""Validate local conservation service environment readiness."""

from __future__ import annotations

import importlib
import shutil
import sys
import tempfile
from dataclasses import replace
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from conservation.domain.errors import IncompatibleOccupantsError
from conservation.repository.registries import AnimalRegistry, CageRegistry, KeeperRegistry
from conservation.services.allocation_service import AllocationService
from conservation.services.conservation_service import ConservationService
from conservation.services.demo_data_service import DemoDataService
from conservation.services.settings_service import SettingsProvider
from conservation.utils.config import get_settings

SEPARATOR_LINE = "=" * 44


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True
    temp_dir = tempfile.mkdtemp(prefix="conservation-env-")

    # CHECK 1: Python version >= 3.11
    if sys.version_info >= (3, 11):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.11",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2: Required packages importable
    package_names = ["fastapi", "uvicorn", "pydantic", "httpx", "pytest"]
    import_errors: list[str] = []
    for module_name in package_names:
        try:
            importlib.import_module(module_name)
        except ImportError as exc:
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    try:
        validation_settings = replace(
            get_settings(),
            settings_file_path=Path(temp_dir) / "settings.json",
        )
        provider = SettingsProvider(validation_settings)
        animals, keepers, cages = AnimalRegistry(), KeeperRegistry(), CageRegistry()
        conservation_service = ConservationService(
            animals=animals, keepers=keepers, cages=cages, settings_provider=provider
        )
        allocation_service = AllocationService(
            animals=animals, keepers=keepers, cages=cages, settings_provider=provider
        )

        # CHECK 3: Demo data seeding (15 cages, 5 keepers)
        try:
            DemoDataService(conservation_service, provider).seed_if_empty()
            stats = conservation_service.get_statistics()
            if stats.total_cages != 15 or stats.total_keepers != 5:
                raise RuntimeError(
                    f"expected 15 cages and 5 keepers, got {stats.total_cages}/{stats.total_keepers}"
                )
            if provider.is_first_run():
                raise RuntimeError("first_run flag was not cleared")
            ok, line = _print_result(
                "Demo data seeding",
                True,
                f": {stats.total_animals} animals",
            )
        except Exception as exc:
            ok, line = _print_result("Demo data seeding", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 4: Predator isolation rule enforced
        try:
            leo = animals.find_by_name("Leo")
            marty = animals.find_by_name("Marty")
            large = cages.find_by_cage_number("Large-01")
            if leo is None or marty is None or large is None:
                raise RuntimeError("demo entities missing")
            allocation_service.allocate_animal(leo.id, large.id)
            try:
                allocation_service.allocate_animal(marty.id, large.id)
            except IncompatibleOccupantsError:
                pass
            else:
                raise RuntimeError("prey was placed with a predator")
            allocation_service.deallocate_animal(leo.id)
            ok, line = _print_result("Allocation rules", True)
        except Exception as exc:
            ok, line = _print_result("Allocation rules", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    print(SEPARATOR_LINE)
    print(" Conservation Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
