"""
app.py: FastAPI application factory and startup lifecycle.

This is the ASGI application object imported by uvicorn.
It wires the registries and services, registers routers, and runs startup
initialization (first-run demo data).

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from threading import RLock
from typing import Optional

from fastapi import FastAPI

from conservation.controllers.allocation_controller import router as allocation_router
from conservation.controllers.registry_controller import router as registry_router
from conservation.controllers.settings_controller import router as settings_router
from conservation.repository.registries import AnimalRegistry, CageRegistry, KeeperRegistry
from conservation.services.allocation_service import AllocationService
from conservation.services.conservation_service import ConservationService
from conservation.services.demo_data_service import DemoDataService
from conservation.services.settings_service import SettingsProvider
from conservation.utils.config import Settings, get_settings
from conservation.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build and wire the FastAPI application.

    All services share the same registries and one allocation lock, and are
    exposed through app.state so every dependency is traceable from here.
    """
    settings = settings or get_settings()

    # --- Registries (pure in-memory storage) ---
    animals = AnimalRegistry()
    keepers = KeeperRegistry()
    cages = CageRegistry()

    # --- Configuration provider ---
    settings_provider = SettingsProvider(settings)

    # --- Services (one lock guards every allocation transaction) ---
    allocation_lock = RLock()
    allocation_service = AllocationService(
        animals=animals,
        keepers=keepers,
        cages=cages,
        settings_provider=settings_provider,
        lock=allocation_lock,
    )
    conservation_service = ConservationService(
        animals=animals,
        keepers=keepers,
        cages=cages,
        settings_provider=settings_provider,
        lock=allocation_lock,
    )
    demo_data_service = DemoDataService(
        conservation_service=conservation_service,
        settings_provider=settings_provider,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Run startup initialization before accepting requests."""
        _startup(app, settings)
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # --- Routers ---
    app.include_router(registry_router)
    app.include_router(allocation_router)
    app.include_router(settings_router)

    # --- Inject services into app.state for dependency resolution ---
    app.state.settings_provider = settings_provider
    app.state.allocation_service = allocation_service
    app.state.conservation_service = conservation_service
    app.state.demo_data_service = demo_data_service

    return app


def _startup(app: FastAPI, settings: Settings) -> None:
    """Seed demo data into the empty in-memory registries unless disabled."""
    if not settings.seed_demo_data:
        logger.info("Startup: demo data seeding disabled")
        return

    demo_data_service: DemoDataService = app.state.demo_data_service
    logger.info("Startup: checking demo data")
    demo_data_service.seed_if_empty()
    logger.info("Startup complete | system ready")


# Module-level app object for uvicorn
app = create_app()
