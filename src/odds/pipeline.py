from __future__ import annotations

from typing import List, Optional, Sequence

from core.config import ODDS_PROVIDERS, get_settings
from core.logging import get_logger
from core.models import Fixture, OddsEvent
from providers.base import OddsProviderProtocol
from providers.api_football.odds_provider import ApiFootballOddsProvider
from providers.odds.odds_api import OddsApiProvider

logger = get_logger("odds.pipeline")


def get_odds_provider(provider_name: Optional[str] = None) -> OddsProviderProtocol:
    # Selezione provider: param > settings > default "rapidapi"
    p_name = (provider_name or get_settings().odds_provider or "rapidapi").strip().lower()
    if p_name not in ODDS_PROVIDERS:
        logger.warning("Provider odds '%s' non supportato, fallback 'rapidapi'.", p_name)
        p_name = "rapidapi"
    if p_name == "api_football":
        return ApiFootballOddsProvider()
    return OddsApiProvider(transport=p_name)


async def collect_odds_events(
    fixtures: Sequence[Fixture],
    provider: Optional[OddsProviderProtocol] = None,
) -> List[OddsEvent]:
    provider = provider or get_odds_provider()
    events = await provider.fetch_events(fixtures)
    logger.info(
        "odds_events_collected",
        extra={"fetch_stats": {"provider": getattr(provider, "name", "?"), "events": len(events)}},
    )
    return events


__all__ = ["get_odds_provider", "collect_odds_events"]
