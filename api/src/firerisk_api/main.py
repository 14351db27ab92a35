"""FastAPI application factory.

Creates the FastAPI app with all routers, middleware, and shared services.

Usage:
    uvicorn firerisk_api.main:app --reload
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from firerisk import __version__
from firerisk.providers import OpenMeteoProvider
from firerisk.providers.base import Provider
from firerisk_api.config import ApiSettings
from firerisk_api.routers import fire, health, simulations, units
from firerisk_api.services.world import WorldState

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


def create_app(
    provider: Provider | None = None,
    settings: ApiSettings | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        provider: Weather and elevation source; an OpenMeteoProvider is
            created (and closed on shutdown) if None
        settings: Runtime settings; read from the environment if None
    """
    settings = settings or ApiSettings.from_env()
    owned = provider is None
    active: Provider = provider or OpenMeteoProvider(timeout=settings.provider_timeout)
    world = WorldState(jitter_seed=settings.unit_jitter_seed, max_step=settings.unit_max_step)

    @asynccontextmanager
    async def lifespan(application: FastAPI) -> AsyncIterator[None]:
        logger.info("FireRisk API started")
        yield
        if owned and isinstance(active, OpenMeteoProvider):
            await active.aclose()

    application = FastAPI(
        title="FireRisk API",
        description="Fire danger, spread forecast and response planning API",
        version=__version__,
        lifespan=lifespan,
    )

    # CORS: allow frontend dev server
    application.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Inject services into routers
    simulations.provider = active
    simulations.world = world
    fire.world = world
    units.world = world

    # Register routers
    application.include_router(health.router)
    application.include_router(fire.router)
    application.include_router(simulations.router)
    application.include_router(units.router)

    return application


app = create_app()
