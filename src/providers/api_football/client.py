from __future__ import annotations

import time
from typing import Any, Dict, Optional

import httpx

from core.config import get_settings
from core.exceptions import SourceUnavailableError
from core.logging import get_logger

logger = get_logger(__name__)


class ApiFootballAsyncClient:
    """
    Client HTTP asincrono minimale per l'API Football (api-sports), usato per
    le richieste in parallelo (quote per fixture).
    Gestisce header API key e logging basilare (debug/errore).
    """

    BASE_URL = "https://v3.football.api-sports.io"

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        settings = get_settings()
        self.api_key = api_key or settings.api_football_key or ""
        self._timeout = settings.http_timeout
        self._transport = transport
        self._headers = {
            "x-apisports-key": self.api_key,
            "Accept": "application/json",
        }
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "ApiFootballAsyncClient":
        self._client = httpx.AsyncClient(
            base_url=self.BASE_URL,
            headers=self._headers,
            timeout=self._timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        GET asincrona, ritorna il JSON decodificato.
        Errori di rete e status != 200 diventano SourceUnavailableError.
        """
        if self._client is None:
            raise RuntimeError("ApiFootballAsyncClient va usato come async context manager")
        params = params or {}
        logger.debug("GET %s params=%s", path, params)
        start = time.perf_counter()
        try:
            resp = await self._client.get(path, params=params)
        except httpx.RequestError as exc:
            elapsed = (time.perf_counter() - start) * 1000
            logger.error("Errore rete %s dopo %.1fms: %s", path, elapsed, exc)
            raise SourceUnavailableError(f"api_football: errore di rete {exc}", source="api_football") from exc
        elapsed = (time.perf_counter() - start) * 1000
        if resp.status_code != 200:
            logger.error(
                "Status %s %s (%.1fms) body=%s",
                resp.status_code,
                path,
                elapsed,
                resp.text[:300],
            )
            raise SourceUnavailableError(
                f"api_football: status {resp.status_code} per {path}",
                source="api_football",
                status_code=resp.status_code,
            )
        logger.debug("OK %s %s %.1fms", path, resp.status_code, elapsed)
        try:
            return resp.json()
        except ValueError as exc:
            raise SourceUnavailableError(f"api_football: risposta non JSON per {path}", source="api_football") from exc
