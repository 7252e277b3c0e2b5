"""Demo data for a facility that starts with empty registries."""

from __future__ import annotations

from datetime import date
from typing import Optional

from conservation.domain.models import Animal, Cage, DietaryRole, Keeper, Sex
from conservation.services.conservation_service import ConservationService
from conservation.services.settings_service import SettingsProvider
from conservation.utils.logger import get_logger


logger = get_logger(__name__)

# (label prefix, description, capacity, how many)
DEMO_CAGE_TIERS = (
    ("Large", "Large cage for multiple animals", 10, 5),
    ("Medium", "Medium cage for small groups", 5, 3),
    ("Small", "Small cage for single animal", 1, 7),
)

DEMO_HEAD_KEEPERS = (
    ("John", "Smith", "123 Main Street, Glasgow", "07123456789"),
    ("Sarah", "Johnson", "45 High Street, Glasgow", "07234567890"),
)

DEMO_ASSISTANT_KEEPERS = (
    ("Michael", "Brown", "78 Queen Street, Glasgow", "07345678901"),
    ("Emma", "Davis", "12 King Street, Glasgow", "07456789012"),
    ("James", "Wilson", "90 Bridge Street, Glasgow", "07567890123"),
)

DEMO_ANIMALS = (
    ("Leo", "Tiger", DietaryRole.PREDATOR, Sex.MALE, date(2019, 5, 15), date(2020, 1, 10)),
    ("Tigress", "Tiger", DietaryRole.PREDATOR, Sex.FEMALE, date(2020, 3, 22), date(2021, 2, 15)),
    ("Shadow", "Wolf", DietaryRole.PREDATOR, Sex.MALE, date(2018, 11, 2), date(2019, 4, 18)),
    ("Marty", "Zebra", DietaryRole.PREY, Sex.MALE, date(2018, 7, 10), date(2019, 5, 20)),
    ("Stripe", "Zebra", DietaryRole.PREY, Sex.FEMALE, date(2019, 8, 5), date(2020, 6, 15)),
    ("Daisy", "Zebra", DietaryRole.PREY, Sex.FEMALE, date(2020, 4, 12), date(2021, 3, 8)),
    ("Bugs", "Rabbit", DietaryRole.PREY, Sex.MALE, date(2021, 1, 8), date(2021, 6, 20)),
    ("Flopsy", "Rabbit", DietaryRole.PREY, Sex.FEMALE, date(2021, 2, 14), date(2021, 7, 1)),
    ("Peter", "Rabbit", DietaryRole.PREY, Sex.MALE, date(2021, 3, 20), date(2021, 8, 15)),
    ("Ginger", "Guinea Pig", DietaryRole.PREY, Sex.FEMALE, date(2022, 1, 5), date(2022, 5, 10)),
    ("Squeaky", "Guinea Pig", DietaryRole.PREY, Sex.MALE, date(2022, 2, 18), date(2022, 6, 22)),
)


class DemoDataService:
    """Seeds cages, keepers and animals into empty registries at startup."""

    def __init__(
        self,
        conservation_service: ConservationService,
        settings_provider: Optional[SettingsProvider] = None,
    ) -> None:
        self._conservation_service = conservation_service
        self._settings_provider = settings_provider or SettingsProvider()

    def seed_if_empty(self) -> bool:
        """Seed demo data when the registries hold no entities yet.

        Registries live in memory only, so every process start begins empty and
        is seeded again. The settings document is marked initialised after the
        first seeding. Returns True when data was created.
        """
        stats = self._conservation_service.get_statistics()
        if stats.total_animals or stats.total_keepers or stats.total_cages:
            logger.info(
                "Demo data skipped | animals=%s | keepers=%s | cages=%s",
                stats.total_animals,
                stats.total_keepers,
                stats.total_cages,
            )
            return False

        cage_count = self._seed_cages()
        keeper_count = self._seed_keepers()
        animal_count = self._seed_animals()
        if self._settings_provider.is_first_run():
            self._settings_provider.mark_initialized()
        logger.info(
            "Demo data seeded | cages=%s | keepers=%s | animals=%s",
            cage_count,
            keeper_count,
            animal_count,
        )
        return True

    def _seed_cages(self) -> int:
        created = 0
        for prefix, description, capacity, count in DEMO_CAGE_TIERS:
            for index in range(1, count + 1):
                self._conservation_service.add_cage(
                    Cage(f"{prefix}-{index:02d}", description, capacity)
                )
                created += 1
        return created

    def _seed_keepers(self) -> int:
        for details in DEMO_HEAD_KEEPERS:
            self._conservation_service.add_keeper(Keeper.head_keeper(*details))
        for details in DEMO_ASSISTANT_KEEPERS:
            self._conservation_service.add_keeper(Keeper.assistant_keeper(*details))
        return len(DEMO_HEAD_KEEPERS) + len(DEMO_ASSISTANT_KEEPERS)

    def _seed_animals(self) -> int:
        for name, species, role, sex, born, acquired in DEMO_ANIMALS:
            self._conservation_service.add_animal(
                Animal(name, species, role, sex, born, acquired)
            )
        return len(DEMO_ANIMALS)
