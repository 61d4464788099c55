from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from core.config import get_settings
from core.exceptions import MalformedRecordError
from core.logging import get_logger
from core.models import Fixture
from core.normalization import normalize_api_football_fixture
from providers.base import FixturesProviderBase
from .http_client import APIFootballHttpClient, get_http_client

log = get_logger(__name__)


class ApiFootballFixturesProvider(FixturesProviderBase):
    """
    Sorgente secondaria di fixtures (default League One, id 41).
    - Usa APIFootballHttpClient
    - Normalizza i record e tiene solo quelli pre-partita
    """

    name = "api_football"

    def __init__(self, client: Optional[APIFootballHttpClient] = None) -> None:
        self._settings = get_settings()
        self._client = client or get_http_client()

    def fetch_fixtures(self, *, date: str, league_id: int) -> List[Fixture]:
        raw: Dict[str, Any] = self._client.get_json("/fixtures", params={"league": league_id, "date": date})
        response = raw.get("response", []) if isinstance(raw, dict) else []
        if not isinstance(response, list):
            log.warning("Formato inatteso: 'response' non è una lista")
            return []
        out: List[Fixture] = []
        for item in response:
            try:
                fixture = normalize_api_football_fixture(item)
            except MalformedRecordError as exc:
                log.warning("Fixture api_football scartata league=%s: %s", league_id, exc)
                continue
            if fixture.is_eligible:
                out.append(fixture)
        return out

    def fetch_todays_fixtures(self) -> List[Fixture]:
        today = datetime.now(timezone.utc).date().isoformat()
        fixtures: List[Fixture] = []
        for league_id in self._settings.api_football_league_ids:
            fixtures.extend(self.fetch_fixtures(date=today, league_id=league_id))
        log.info("api_football fixtures kept=%s", len(fixtures), extra={"fetch_stats": self.get_last_stats()})
        return fixtures

    def get_last_stats(self) -> Dict[str, Any]:
        return self._client.get_stats()


__all__ = ["ApiFootballFixturesProvider"]
