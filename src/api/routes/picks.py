from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Query

from core.config import ENGINES
from core.exceptions import SourceUnavailableError
from core.logging import get_logger
from predictions.pipeline import generate_daily_slate

logger = get_logger("api.routes.picks")

router = APIRouter(prefix="/picks", tags=["picks"])


@router.get("", summary="Slate giornaliera di pick")
async def get_picks(
    engine: Optional[str] = Query(None, description="Motore: odds | statarea (default: PICKS_ENGINE)"),
) -> Dict[str, Any]:
    """
    Esegue un run completo e ritorna la slate.

    - status "ok": pick presenti
    - status "empty": dati recuperati ma nessuna pick confidente (non è un errore)
    - 503: una sorgente dati non è raggiungibile
    """
    if engine is not None and engine.strip().lower() not in ENGINES:
        raise HTTPException(status_code=400, detail=f"engine non supportato: {engine}")
    try:
        slate = await generate_daily_slate(engine)
    except SourceUnavailableError as exc:
        logger.error("Run fallito, sorgente non disponibile: %s", exc)
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except ValueError as exc:
        logger.error("Configurazione non valida: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    payload = slate.to_dict()
    payload["status"] = "empty" if slate.is_empty else "ok"
    return payload
