from __future__ import annotations

from typing import Optional, Sequence

from core.logging import get_logger
from core.models import Fixture, NormalizedOdds, OddsEvent
from matching.team_names import NameNormalizer
from odds.normalizer import is_valid_quote, normalize_quote

logger = get_logger("matching.fixture_matcher")


def match_fixture_to_odds(
    fixture: Fixture,
    events: Sequence[OddsEvent],
    normalizer: Optional[NameNormalizer] = None,
) -> Optional[OddsEvent]:
    """
    Primo evento in cui sia la casa che la trasferta combaciano
    (ciascuna contro il rispettivo campo dell'evento). None se nessuno.
    """
    normalizer = normalizer or NameNormalizer()
    for event in events:
        home_ok = normalizer.match(fixture.home_team_name, [event.home_team_name])
        if home_ok is None:
            continue
        away_ok = normalizer.match(fixture.away_team_name, [event.away_team_name])
        if away_ok is not None:
            return event
    return None


def best_quote(event: OddsEvent) -> Optional[NormalizedOdds]:
    """
    Tra le quote valide dell'evento sceglie quella con homeProbability
    strettamente più alta (a parità resta la prima incontrata).
    """
    best: Optional[NormalizedOdds] = None
    for quote in event.quotes:
        if not is_valid_quote(quote):
            logger.warning(
                "Quota scartata event=%s bookmaker=%s prezzi=%s/%s/%s",
                event.event_id,
                quote.bookmaker_name,
                quote.home_price,
                quote.draw_price,
                quote.away_price,
            )
            continue
        norm = normalize_quote(quote)
        if best is None or norm.home_probability > best.home_probability:
            best = norm
    return best


__all__ = ["match_fixture_to_odds", "best_quote"]
