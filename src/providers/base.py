from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Protocol, Sequence

from core.models import Fixture, OddsEvent


class FixturesProviderBase(ABC):
    """
    Interfaccia astratta per un provider di fixtures.

    Le implementazioni restituiscono solo Fixture validate e pre-partita
    (SCHEDULED/TIMED); i record malformati vengono loggati e scartati.
    Un errore di rete o una risposta non 2xx solleva SourceUnavailableError.
    """

    name: str = "fixtures"

    @abstractmethod
    def fetch_todays_fixtures(self) -> List[Fixture]:
        raise NotImplementedError


class OddsProviderProtocol(Protocol):
    name: str

    async def fetch_events(self, fixtures: Sequence[Fixture]) -> List[OddsEvent]:
        ...


def fixture_key(fixture: Fixture) -> str:
    return f"{fixture.home_team_name}-{fixture.away_team_name}"


def merge_fixtures(*sources: Iterable[Fixture]) -> List[Fixture]:
    """Unisce più liste deduplicando per 'casa-trasferta': vince la prima sorgente."""
    seen: Dict[str, Fixture] = {}
    for source in sources:
        for fixture in source:
            seen.setdefault(fixture_key(fixture), fixture)
    return list(seen.values())


__all__ = ["FixturesProviderBase", "OddsProviderProtocol", "fixture_key", "merge_fixtures"]
