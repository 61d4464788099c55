from __future__ import annotations

import random
import time
from typing import Any, Dict, Optional

import requests

from core.config import get_settings
from core.exceptions import RateLimitError, SourceUnavailableError, TransientAPIError
from core.logging import get_logger

log = get_logger(__name__)

_TRANSIENT_STATUSES = (500, 502, 503, 504)


class RetryingHttpClient:
    """
    Client HTTP con retry e backoff (requests.Session) condiviso da tutti i provider.
    Gestisce rate limit (429, con Retry-After), errori transitori (5xx, network)
    e ritorna JSON o testo. Qualsiasi risposta non 2xx non recuperabile diventa
    SourceUnavailableError con lo status code allegato.

    Telemetria dell'ultima chiamata disponibile via get_stats():
      attempts, retries, latency_ms, last_status
    """

    def __init__(
        self,
        base_url: str,
        *,
        name: str,
        headers: Optional[Dict[str, str]] = None,
        verify: bool = True,
        session: Optional[requests.Session] = None,
    ) -> None:
        settings = get_settings()
        self.name = name
        self._base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        if headers:
            self._session.headers.update(headers)
        self._verify = verify
        self._max_attempts = settings.http_max_attempts
        self._base = settings.http_backoff_base
        self._factor = settings.http_backoff_factor
        self._jitter = settings.http_backoff_jitter
        self._timeout = settings.http_timeout

        self._last_attempts: int = 0
        self._last_retries: int = 0
        self._last_latency_ms: float = 0.0
        self._last_status: Optional[int] = None

    def _compute_delay(self, attempt: int) -> float:
        # attempt parte da 1
        delay = self._base * (self._factor ** (attempt - 1))
        if self._jitter > 0:
            delay *= random.uniform(1 - self._jitter, 1 + self._jitter)
        return delay

    def _finish(self, attempt: int, start: float) -> None:
        self._last_attempts = attempt
        self._last_retries = attempt - 1
        self._last_latency_ms = (time.perf_counter() - start) * 1000

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        if not path:
            return self._base_url
        return f"{self._base_url}/{path.lstrip('/')}"

    def _request(self, path: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        url = self._url(path)
        log.info("%s GET %s params=%s", self.name, url, params)
        start = time.perf_counter()

        self._last_attempts = 0
        self._last_retries = 0
        self._last_latency_ms = 0.0
        self._last_status = None

        for attempt in range(1, self._max_attempts + 1):
            try:
                resp = self._session.get(url, params=params, timeout=self._timeout, verify=self._verify)
            except (requests.Timeout, requests.ConnectionError) as e:
                if attempt == self._max_attempts:
                    self._finish(attempt, start)
                    raise TransientAPIError(
                        f"{self.name}: errore di rete persistente dopo {attempt} tentativi: {e}",
                        source=self.name,
                    ) from e
                wait = self._compute_delay(attempt)
                log.warning(
                    "retry source=%s attempt=%s wait=%.2fs reason=network:%s",
                    self.name,
                    attempt,
                    wait,
                    e.__class__.__name__,
                )
                time.sleep(wait)
                continue

            self._last_status = resp.status_code

            if 200 <= resp.status_code < 300:
                self._finish(attempt, start)
                return resp

            if resp.status_code == 429:
                if attempt == self._max_attempts:
                    self._finish(attempt, start)
                    raise RateLimitError(
                        f"{self.name}: rate limit dopo {attempt} tentativi (429).",
                        source=self.name,
                        status_code=429,
                    )
                wait = self._compute_delay(attempt)
                retry_after = resp.headers.get("Retry-After")
                if retry_after:
                    try:
                        wait = max(wait, float(retry_after))
                    except ValueError:
                        pass
                log.warning("retry source=%s attempt=%s wait=%.2fs reason=rate_limit", self.name, attempt, wait)
                time.sleep(wait)
                continue

            if resp.status_code in _TRANSIENT_STATUSES:
                if attempt == self._max_attempts:
                    self._finish(attempt, start)
                    raise TransientAPIError(
                        f"{self.name}: status {resp.status_code} persistente dopo {attempt} tentativi.",
                        source=self.name,
                        status_code=resp.status_code,
                    )
                wait = self._compute_delay(attempt)
                log.warning(
                    "retry source=%s attempt=%s wait=%.2fs reason=http_%s",
                    self.name,
                    attempt,
                    wait,
                    resp.status_code,
                )
                time.sleep(wait)
                continue

            # 4xx e altri codici: non recuperabili
            self._finish(attempt, start)
            raise SourceUnavailableError(
                f"{self.name}: richiesta fallita (status={resp.status_code}) non retriable: {resp.text[:200]}",
                source=self.name,
                status_code=resp.status_code,
            )

        # Non dovrebbe mai arrivare qui (max_attempts >= 1)
        self._finish(self._max_attempts, start)
        raise SourceUnavailableError(f"{self.name}: fallimento imprevisto path={path}", source=self.name)

    def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        resp = self._request(path, params)
        try:
            return resp.json()
        except ValueError as e:
            raise SourceUnavailableError(
                f"{self.name}: risposta non valida (non JSON) status={resp.status_code}",
                source=self.name,
                status_code=resp.status_code,
            ) from e

    def get_text(self, path: str, params: Optional[Dict[str, Any]] = None) -> str:
        return self._request(path, params).text

    def get_stats(self) -> Dict[str, Any]:
        return {
            "attempts": self._last_attempts,
            "retries": self._last_retries,
            "latency_ms": round(self._last_latency_ms, 2),
            "last_status": self._last_status,
        }


__all__ = ["RetryingHttpClient"]
