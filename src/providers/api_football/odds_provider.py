from __future__ import annotations

from typing import Callable, List, Optional, Sequence

from core.batching import gather_in_batches
from core.config import get_settings
from core.logging import get_logger
from core.models import Fixture, OddsEvent
from core.normalization import normalize_api_football_odds
from .client import ApiFootballAsyncClient

log = get_logger(__name__)


class ApiFootballOddsProvider:
    """
    Quote 1X2 ('Match Winner') per singola fixture API-Football.
    Le richieste partono in batch paralleli; una fixture fallita resta senza quote.
    """

    name = "api_football"

    def __init__(self, client_factory: Optional[Callable[[], ApiFootballAsyncClient]] = None) -> None:
        self._settings = get_settings()
        self._client_factory = client_factory or ApiFootballAsyncClient

    async def fetch_events(self, fixtures: Sequence[Fixture]) -> List[OddsEvent]:
        targets = [f for f in fixtures if f.source == "api_football"]
        if not targets:
            return []
        by_id = {f.external_id: f for f in targets}
        empty = OddsEvent(event_id="", home_team_name="", away_team_name="", commence_time=None)

        async with self._client_factory() as client:

            async def _one(fixture_id: str) -> OddsEvent:
                data = await client.get(
                    "/odds",
                    params={"fixture": fixture_id, "bookmaker": self._settings.api_football_bookmaker_id},
                )
                return normalize_api_football_odds(data.get("response") or [], by_id[fixture_id])

            results = await gather_in_batches(
                list(by_id),
                _one,
                batch_size=self._settings.api_football_odds_batch_size,
                delay=self._settings.api_football_odds_batch_delay,
                default=empty,
                label="api_football_odds",
            )

        events = [ev for ev in results.values() if ev.quotes]
        log.info("api_football odds fixtures=%s with_quotes=%s", len(targets), len(events))
        return events


__all__ = ["ApiFootballOddsProvider"]
