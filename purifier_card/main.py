"""FastAPI application entry point."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import AsyncGenerator

from fastapi import FastAPI

from purifier_card.api import routes
from purifier_card.core.config import get_settings
from purifier_card.logic.processor import CardProcessor
from purifier_card.services.ha_api import HomeAssistantAPI
from purifier_card.services.registry import RegistryService

settings = get_settings()

logger = logging.getLogger("purifier_card")
logging.basicConfig(level=settings.log_level)

ha_api = HomeAssistantAPI(
    settings.ha_url, settings.ha_token, timeout_seconds=settings.ha_timeout_seconds
)
registry = RegistryService(
    ha_api,
    manufacturers=settings.supported_manufacturers,
    models=settings.supported_models,
)
processor = CardProcessor(ha_api=ha_api, registry=registry)


def _build_app() -> FastAPI:
    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Starting purifier card backend (%s)", settings.environment)
        await registry.refresh()

        refresh_task = asyncio.create_task(_registry_refresh_loop())
        app.state.registry = registry
        app.state.processor = processor
        try:
            yield
        finally:
            refresh_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await refresh_task

    app = FastAPI(title=settings.app_name, version="1.0.0", lifespan=lifespan)
    app.include_router(routes.router, prefix="/api")
    return app


async def _registry_refresh_loop() -> None:
    delay = max(30, settings.registry_refresh_seconds)
    while True:
        await asyncio.sleep(delay)
        try:
            await registry.refresh()
        except Exception as exc:  # pragma: no cover
            logger.warning("Registry refresh failed: %s", exc)


app = _build_app()
