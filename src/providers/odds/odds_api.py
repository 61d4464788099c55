from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence

from core.batching import gather_in_batches
from core.config import get_settings
from core.exceptions import MalformedRecordError
from core.http_client import RetryingHttpClient
from core.logging import get_logger
from core.models import Fixture, OddsEvent
from core.normalization import normalize_odds_api_event

logger = get_logger("providers.odds.odds_api")

ODDS_API_BASE_URL = "https://api.the-odds-api.com/v4"
RAPIDAPI_HOST = "odds.p.rapidapi.com"
RAPIDAPI_BASE_URL = f"https://{RAPIDAPI_HOST}/v4"


class OddsApiProvider:
    """
    Quote h2h per sport key dal formato The Odds API v4.

    Due trasporti:
      - "oddsapi": host diretto, chiave nel parametro apiKey
      - "rapidapi": stesso formato via RapidAPI (header x-rapidapi-key/host)

    Gli sport vengono richiesti a batch; uno sport fallito vale lista vuota.
    Si tengono solo eventi con data di inizio in [oggi, oggi + ODDS_DAYS_AHEAD] (UTC).
    """

    def __init__(
        self,
        transport: str = "rapidapi",
        *,
        client: Optional[RetryingHttpClient] = None,
        sports: Optional[Sequence[str]] = None,
    ) -> None:
        if transport not in ("rapidapi", "oddsapi"):
            raise ValueError(f"transport non supportato: {transport}")
        self._settings = get_settings()
        self.name = transport
        self._api_key: Optional[str] = None
        if transport == "rapidapi":
            self._client = client or RetryingHttpClient(
                RAPIDAPI_BASE_URL,
                name="rapidapi_odds",
                headers={"x-rapidapi-key": self._settings.rapidapi_key or "", "x-rapidapi-host": RAPIDAPI_HOST},
            )
        else:
            self._api_key = self._settings.odds_api_key
            self._client = client or RetryingHttpClient(ODDS_API_BASE_URL, name="odds_api")
        self.sports = list(sports if sports is not None else self._settings.odds_sports)

    def _params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "regions": self._settings.odds_regions,
            "markets": "h2h",
            "oddsFormat": "decimal",
            "dateFormat": "iso",
        }
        if self._api_key:
            params["apiKey"] = self._api_key
        return params

    def _in_window(self, event: OddsEvent, today: datetime) -> bool:
        if event.commence_time is None:
            return False
        first = today.date()
        last = first + timedelta(days=self._settings.odds_days_ahead)
        return first <= event.commence_time.date() <= last

    def fetch_sport(self, sport_key: str, now: Optional[datetime] = None) -> List[OddsEvent]:
        data = self._client.get_json(f"/sports/{sport_key}/odds", params=self._params())
        if not isinstance(data, list):
            logger.warning("Risposta inattesa per %s: non è una lista", sport_key)
            return []
        today = now or datetime.now(timezone.utc)
        events: List[OddsEvent] = []
        for raw in data:
            try:
                event = normalize_odds_api_event(raw)
            except MalformedRecordError as exc:
                logger.warning("Evento scartato sport=%s: %s", sport_key, exc)
                continue
            if self._in_window(event, today):
                events.append(event)
        logger.info("odds sport=%s total=%s upcoming=%s", sport_key, len(data), len(events))
        return events

    async def fetch_events(self, fixtures: Sequence[Fixture] = ()) -> List[OddsEvent]:
        now = datetime.now(timezone.utc)

        async def _one(sport_key: str) -> List[OddsEvent]:
            return await asyncio.to_thread(self.fetch_sport, sport_key, now)

        per_sport = await gather_in_batches(
            self.sports,
            _one,
            batch_size=self._settings.odds_batch_size,
            delay=self._settings.odds_batch_delay,
            default=[],
            label=f"{self.name}_sports",
        )
        events: List[OddsEvent] = []
        for sport_events in per_sport.values():
            events.extend(sport_events)
        return events


__all__ = ["OddsApiProvider", "ODDS_API_BASE_URL", "RAPIDAPI_BASE_URL"]
