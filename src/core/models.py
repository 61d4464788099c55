from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class FixtureStatus(str, Enum):
    SCHEDULED = "scheduled"
    TIMED = "timed"
    LIVE = "live"
    FINISHED = "finished"
    POSTPONED = "postponed"
    CANCELLED = "cancelled"
    OTHER = "other"

    @property
    def is_pre_match(self) -> bool:
        return self in (FixtureStatus.SCHEDULED, FixtureStatus.TIMED)


class FormResult(str, Enum):
    WIN = "W"
    DRAW = "D"
    LOSS = "L"
    NO_DATA = "N"


class PredictedOutcome(str, Enum):
    HOME = "HOME"
    AWAY = "AWAY"


class ConfidenceTier(str, Enum):
    HIGH = "High"
    VERY_HIGH = "Very High"
    EXTREME = "Extreme"


class SlateOutcome(str, Enum):
    PICKS = "picks"
    NO_QUALIFYING_CANDIDATES = "no_qualifying_candidates"
    BELOW_MINIMUM = "below_minimum"


Form = Tuple[FormResult, ...]
EMPTY_FORM: Form = (FormResult.NO_DATA,) * 5


def _iso(dt: Optional[datetime]) -> Optional[str]:
    return dt.isoformat() if dt is not None else None


@dataclass(frozen=True)
class Fixture:
    external_id: str
    home_team_name: str
    away_team_name: str
    league_name: str
    kickoff_time: datetime
    status: FixtureStatus
    home_team_id: Optional[int] = None
    away_team_id: Optional[int] = None
    competition_code: Optional[str] = None
    source: str = "football-data"

    @property
    def is_eligible(self) -> bool:
        return self.status.is_pre_match

    def to_dict(self) -> Dict[str, Any]:
        return {
            "external_id": self.external_id,
            "home_team": self.home_team_name,
            "away_team": self.away_team_name,
            "league": self.league_name,
            "kickoff_time": _iso(self.kickoff_time),
            "status": self.status.value,
            "competition_code": self.competition_code,
            "source": self.source,
        }


@dataclass(frozen=True)
class OddsQuote:
    bookmaker_name: str
    home_price: float
    draw_price: float
    away_price: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bookmaker": self.bookmaker_name,
            "home": self.home_price,
            "draw": self.draw_price,
            "away": self.away_price,
        }


@dataclass(frozen=True)
class OddsEvent:
    event_id: str
    home_team_name: str
    away_team_name: str
    commence_time: Optional[datetime]
    quotes: Tuple[OddsQuote, ...] = ()


@dataclass(frozen=True)
class NormalizedOdds:
    home_probability: float
    draw_probability: float
    away_probability: float
    source_bookmaker: str
    quote: Optional[OddsQuote] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "home_probability": self.home_probability,
            "draw_probability": self.draw_probability,
            "away_probability": self.away_probability,
            "bookmaker": self.source_bookmaker,
        }
        if self.quote is not None:
            out["prices"] = self.quote.to_dict()
        return out


@dataclass(frozen=True)
class StandingsRow:
    position: int
    team_name: str
    team_id: Optional[int] = None


@dataclass(frozen=True)
class FinishedMatch:
    home_team_id: Optional[int]
    away_team_id: Optional[int]
    home_team_name: str
    away_team_name: str
    home_goals: Optional[int]
    away_goals: Optional[int]
    utc_date: Optional[datetime]


@dataclass(frozen=True)
class MatchCandidate:
    fixture: Fixture
    odds: NormalizedOdds
    standings_gap: int
    home_form: Form
    away_form: Form
    predicted_outcome: PredictedOutcome
    win_probability: float
    confidence_tier: ConfidenceTier

    # Protocollo di ranking condiviso con ScrapedFixture
    @property
    def qualifying_metric(self) -> float:
        return self.win_probability

    @property
    def predicted_side_wins(self) -> int:
        form = self.home_form if self.predicted_outcome is PredictedOutcome.HOME else self.away_form
        return sum(1 for r in form if r is FormResult.WIN)

    def to_dict(self) -> Dict[str, Any]:
        out = self.fixture.to_dict()
        out.update(
            {
                "odds": self.odds.to_dict(),
                "standings_gap": self.standings_gap,
                "home_form": "".join(r.value for r in self.home_form),
                "away_form": "".join(r.value for r in self.away_form),
                "predicted_outcome": self.predicted_outcome.value,
                "win_probability": self.win_probability,
                "confidence": self.confidence_tier.value,
            }
        )
        return out


@dataclass(frozen=True)
class ScrapedFixture:
    id: str
    home_team_name: str
    away_team_name: str
    league_name: str
    kickoff_time: datetime
    home_winning_percentage: float
    away_winning_percentage: float
    kickoff_time_approximate: bool = False

    @property
    def selected_team(self) -> PredictedOutcome:
        # a parità vince la squadra di casa
        if self.home_winning_percentage >= self.away_winning_percentage:
            return PredictedOutcome.HOME
        return PredictedOutcome.AWAY

    @property
    def winning_percentage(self) -> float:
        return max(self.home_winning_percentage, self.away_winning_percentage)

    @property
    def qualifying_metric(self) -> float:
        return self.winning_percentage

    @property
    def standings_gap(self) -> int:
        return 0

    @property
    def predicted_side_wins(self) -> int:
        return 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "home_team": self.home_team_name,
            "away_team": self.away_team_name,
            "league": self.league_name,
            "kickoff_time": _iso(self.kickoff_time),
            "kickoff_time_approximate": self.kickoff_time_approximate,
            "home_winning_percentage": self.home_winning_percentage,
            "away_winning_percentage": self.away_winning_percentage,
            "selected_team": self.selected_team.value,
            "winning_percentage": self.winning_percentage,
        }


@dataclass(frozen=True)
class SlateStats:
    total_candidates: int
    candidates_with_odds: int
    qualifying_candidates: int
    selected_picks: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "total_candidates": self.total_candidates,
            "candidates_with_odds": self.candidates_with_odds,
            "qualifying_candidates": self.qualifying_candidates,
            "selected_picks": self.selected_picks,
        }


@dataclass(frozen=True)
class PickSlate:
    picks: Tuple[Any, ...]
    stats: SlateStats
    outcome: SlateOutcome
    threshold: float
    engine: str = "odds"
    generated_at: Optional[datetime] = None

    @property
    def is_empty(self) -> bool:
        return not self.picks

    def to_dict(self) -> Dict[str, Any]:
        return {
            "engine": self.engine,
            "outcome": self.outcome.value,
            "threshold": self.threshold,
            "generated_at": _iso(self.generated_at),
            "stats": self.stats.to_dict(),
            "picks": [p.to_dict() for p in self.picks],
        }


@dataclass
class ScrapingResult:
    fixtures: List[ScrapedFixture] = field(default_factory=list)
    stats: Dict[str, int] = field(default_factory=dict)


__all__ = [
    "FixtureStatus",
    "FormResult",
    "PredictedOutcome",
    "ConfidenceTier",
    "SlateOutcome",
    "Form",
    "EMPTY_FORM",
    "Fixture",
    "OddsQuote",
    "OddsEvent",
    "NormalizedOdds",
    "StandingsRow",
    "FinishedMatch",
    "MatchCandidate",
    "ScrapedFixture",
    "SlateStats",
    "PickSlate",
    "ScrapingResult",
]
