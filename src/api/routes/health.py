from __future__ import annotations

from fastapi import APIRouter
from core.config import get_settings

router = APIRouter(tags=["health"])

@router.get("/health", summary="Health check")
def health():
    """
    Health endpoint minimale.
    """
    settings = get_settings()
    return {
        "status": "ok",
        "picks_engine": settings.picks_engine,
        "fallback_engine": settings.picks_fallback_engine,
        "odds_provider": settings.odds_provider,
        "prediction_mode": settings.prediction_mode,
    }
