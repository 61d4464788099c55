from __future__ import annotations

from fastapi import FastAPI

from core.config import get_settings
from core.logging import get_logger

from api.routes.health import router as health_router
from api.routes.picks import router as picks_router

logger = get_logger("api.app")


def create_app() -> FastAPI:
    app = FastAPI(title="HapDaily Picks API", version="0.1.0")
    try:
        get_settings()
    except ValueError as exc:  # pragma: no cover
        logger.error("Impossibile caricare settings: %s", exc)

    app.include_router(health_router)
    app.include_router(picks_router)
    return app


app = create_app()
