from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from core.config import get_settings
from core.exceptions import MalformedRecordError, SourceUnavailableError
from core.logging import get_logger
from core.models import FinishedMatch, Fixture, StandingsRow
from core.normalization import (
    normalize_finished_match,
    normalize_football_data_match,
    normalize_standings,
)
from providers.base import FixturesProviderBase
from .http_client import FootballDataClient

log = get_logger(__name__)


class FootballDataFixturesProvider(FixturesProviderBase):
    """
    Sorgente primaria: fixtures di oggi/domani, classifiche e risultati recenti
    da football-data.org v4.
    """

    name = "football-data"

    def __init__(self, client: Optional[FootballDataClient] = None) -> None:
        self._settings = get_settings()
        self.client = client or FootballDataClient()

    @property
    def competitions(self) -> List[str]:
        return list(self._settings.football_data_competitions)

    def fetch_todays_fixtures(self) -> List[Fixture]:
        now = datetime.now(timezone.utc)
        params = {
            "dateFrom": now.date().isoformat(),
            "dateTo": (now + timedelta(days=1)).date().isoformat(),
        }
        data = self.client.get_json("/matches", params=params)
        matches = (data.get("matches") or []) if isinstance(data, dict) else []

        allowed = set(self.competitions)
        fixtures: List[Fixture] = []
        skipped = 0
        for raw in matches:
            try:
                fixture = normalize_football_data_match(raw)
            except MalformedRecordError as exc:
                skipped += 1
                log.warning("Match football-data scartato id=%s: %s", (raw or {}).get("id"), exc)
                continue
            if fixture.competition_code not in allowed or not fixture.is_eligible:
                continue
            fixtures.append(fixture)

        log.info(
            "football-data fixtures total=%s kept=%s skipped=%s",
            len(matches),
            len(fixtures),
            skipped,
            extra={"fetch_stats": self.client.get_stats()},
        )
        return fixtures

    def get_standings(self, competition_code: str) -> Optional[List[StandingsRow]]:
        """Classifica della competizione; None se non disponibile (404 o errore di fetch)."""
        try:
            data = self.client.get_json(f"/competitions/{competition_code}/standings")
        except SourceUnavailableError as exc:
            if exc.status_code == 404:
                log.info("Classifica non disponibile per %s (404)", competition_code)
            else:
                log.warning("Classifica %s non recuperata: %s", competition_code, exc)
            return None
        if not isinstance(data, dict):
            return None
        return normalize_standings(data)

    def get_team_matches(self, team_id: int, limit: int = 10) -> List[FinishedMatch]:
        data: Dict[str, Any] = self.client.get_json(
            f"/teams/{team_id}/matches",
            params={"status": "FINISHED", "limit": limit},
        )
        out: List[FinishedMatch] = []
        for raw in (data or {}).get("matches") or []:
            try:
                out.append(normalize_finished_match(raw))
            except MalformedRecordError as exc:
                log.warning("Risultato scartato team=%s: %s", team_id, exc)
        return out


__all__ = ["FootballDataFixturesProvider"]
