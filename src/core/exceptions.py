from __future__ import annotations

from typing import Optional


class SourceUnavailableError(Exception):
    """Sorgente esterna non raggiungibile o risposta non 2xx: fatale per lo stage che la richiede."""

    def __init__(self, message: str, *, source: Optional[str] = None, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.source = source
        self.status_code = status_code


class RateLimitError(SourceUnavailableError):
    """Sollevata quando viene superato il rate limit (HTTP 429) dopo tutti i tentativi di retry."""


class TransientAPIError(SourceUnavailableError):
    """Sollevata quando errori transitori (5xx / timeout / connessione) persistono oltre i tentativi massimi."""


class MalformedRecordError(ValueError):
    """Record esterno non valido (campo mancante, prezzo non numerico, riga illeggibile).

    Va sempre gestita localmente: il record viene scartato e loggato.
    """


__all__ = [
    "SourceUnavailableError",
    "RateLimitError",
    "TransientAPIError",
    "MalformedRecordError",
]
