from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Protocol, Sequence, TypeVar

from core.config import Settings
from core.logging import get_logger
from core.models import (
    ConfidenceTier,
    MatchCandidate,
    PickSlate,
    PredictedOutcome,
    SlateOutcome,
    SlateStats,
)

logger = get_logger("selection.engine")


class Rankable(Protocol):
    @property
    def qualifying_metric(self) -> float: ...

    @property
    def standings_gap(self) -> int: ...

    @property
    def predicted_side_wins(self) -> int: ...


R = TypeVar("R", bound=Rankable)


@dataclass(frozen=True)
class SelectionConfig:
    threshold: float
    min_count: int
    max_count: int

    def __post_init__(self) -> None:
        if self.min_count < 1 or self.max_count < self.min_count:
            raise ValueError(
                f"limiti non validi: min_count={self.min_count} max_count={self.max_count} "
                "(richiesto 1 <= min_count <= max_count)"
            )

    @classmethod
    def for_odds(cls, settings: Settings) -> "SelectionConfig":
        return cls(settings.pick_threshold, settings.pick_min_count, settings.pick_max_count)

    @classmethod
    def for_statarea(cls, settings: Settings) -> "SelectionConfig":
        return cls(settings.statarea_min_percentage, settings.statarea_min_picks, settings.statarea_max_picks)


def confidence_tier(win_probability: float) -> ConfidenceTier:
    if win_probability >= 0.90:
        return ConfidenceTier.EXTREME
    if win_probability >= 0.85:
        return ConfidenceTier.VERY_HIGH
    return ConfidenceTier.HIGH


def validate_candidate(candidate: MatchCandidate) -> bool:
    fixture = candidate.fixture
    if not fixture.home_team_name or not fixture.away_team_name:
        return False
    if not fixture.league_name or fixture.kickoff_time is None:
        return False
    odds = candidate.odds
    for p in (odds.home_probability, odds.away_probability, candidate.win_probability):
        if p < 0 or p > 1:
            return False
    quote = odds.quote
    if quote is not None and (quote.home_price <= 1 or quote.draw_price <= 1 or quote.away_price <= 1):
        return False
    return candidate.predicted_outcome in (PredictedOutcome.HOME, PredictedOutcome.AWAY)


def rank(candidates: Sequence[R]) -> List[R]:
    """Ordinamento stabile: metrica, poi gap in classifica, poi vittorie del lato scelto (tutti decrescenti)."""
    return sorted(
        candidates,
        key=lambda c: (-c.qualifying_metric, -c.standings_gap, -c.predicted_side_wins),
    )


def select(
    candidates: Sequence[R],
    threshold: float,
    min_count: int,
    max_count: int,
    *,
    total_considered: Optional[int] = None,
    candidates_with_odds: Optional[int] = None,
    engine: str = "odds",
) -> PickSlate:
    """
    Filtra per soglia, ordina e prende i primi max_count.
    Se i qualificati sono meno di min_count la slate è vuota (mai parziale).
    """
    config = SelectionConfig(threshold, min_count, max_count)
    qualifying = [c for c in candidates if c.qualifying_metric >= config.threshold]
    ranked = rank(qualifying)

    if not ranked:
        outcome = SlateOutcome.NO_QUALIFYING_CANDIDATES
        picks: List[R] = []
    elif len(ranked) < config.min_count:
        outcome = SlateOutcome.BELOW_MINIMUM
        picks = []
    else:
        outcome = SlateOutcome.PICKS
        picks = ranked[: config.max_count]

    stats = SlateStats(
        total_candidates=total_considered if total_considered is not None else len(candidates),
        candidates_with_odds=candidates_with_odds if candidates_with_odds is not None else len(candidates),
        qualifying_candidates=len(qualifying),
        selected_picks=len(picks),
    )
    slate = PickSlate(
        picks=tuple(picks),
        stats=stats,
        outcome=outcome,
        threshold=config.threshold,
        engine=engine,
        generated_at=datetime.now(timezone.utc),
    )

    if outcome is SlateOutcome.NO_QUALIFYING_CANDIDATES:
        logger.info("Nessun candidato sopra soglia %s (engine=%s)", config.threshold, engine, extra={"slate": stats.to_dict()})
    elif outcome is SlateOutcome.BELOW_MINIMUM:
        logger.info(
            "Solo %s candidati sopra soglia, minimo %s: slate vuota (engine=%s)",
            len(ranked),
            config.min_count,
            engine,
            extra={"slate": stats.to_dict()},
        )
    else:
        logger.info("slate_selected engine=%s picks=%s", engine, len(picks), extra={"slate": stats.to_dict()})
    return slate


__all__ = ["SelectionConfig", "confidence_tier", "validate_candidate", "rank", "select"]
