from __future__ import annotations

from typing import Optional

from core.models import NormalizedOdds, OddsQuote


def is_valid_quote(quote: Optional[OddsQuote]) -> bool:
    """Una quota è utilizzabile solo se tutti e tre i prezzi sono > 1.0."""
    if quote is None:
        return False
    return quote.home_price > 1.0 and quote.draw_price > 1.0 and quote.away_price > 1.0


def overround(home: float, draw: float, away: float) -> float:
    """Somma delle probabilità implicite (1/prezzo): il margine del bookmaker."""
    return 1 / home + 1 / draw + 1 / away


def normalize_odds(home: float, draw: float, away: float, bookmaker: str = "") -> NormalizedOdds:
    """
    Converte quote decimali 1X2 in probabilità senza margine.
    Ogni probabilità = (1/prezzo) / overround, arrotondata a 4 decimali
    (la somma può scostarsi da 1 di qualche decimillesimo).
    """
    if home <= 1.0 or draw <= 1.0 or away <= 1.0:
        raise ValueError(f"quote non valide (tutte devono essere > 1.0): {home}, {draw}, {away}")
    total = overround(home, draw, away)
    return NormalizedOdds(
        home_probability=round((1 / home) / total, 4),
        draw_probability=round((1 / draw) / total, 4),
        away_probability=round((1 / away) / total, 4),
        source_bookmaker=bookmaker,
    )


def normalize_quote(quote: OddsQuote) -> NormalizedOdds:
    norm = normalize_odds(quote.home_price, quote.draw_price, quote.away_price, quote.bookmaker_name)
    return NormalizedOdds(
        home_probability=norm.home_probability,
        draw_probability=norm.draw_probability,
        away_probability=norm.away_probability,
        source_bookmaker=norm.source_bookmaker,
        quote=quote,
    )


__all__ = ["is_valid_quote", "overround", "normalize_odds", "normalize_quote"]
