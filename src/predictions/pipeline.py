from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from core.batching import gather_in_batches
from core.config import Settings, get_settings
from core.exceptions import SourceUnavailableError
from core.logging import get_logger
from core.metrics import write_run_snapshot
from core.models import (
    EMPTY_FORM,
    Fixture,
    Form,
    MatchCandidate,
    NormalizedOdds,
    PickSlate,
    PredictedOutcome,
    StandingsRow,
)
from enrichment.form import TeamFormService
from enrichment.standings import standings_gap
from matching.fixture_matcher import best_quote, match_fixture_to_odds
from matching.team_names import NameNormalizer
from odds.pipeline import collect_odds_events, get_odds_provider
from providers.api_football.fixtures_provider import ApiFootballFixturesProvider
from providers.base import FixturesProviderBase, OddsProviderProtocol, merge_fixtures
from providers.football_data.fixtures_provider import FootballDataFixturesProvider
from providers.statarea.scraper import StatareaScraper
from selection.engine import SelectionConfig, confidence_tier, select, validate_candidate

logger = get_logger("predictions.pipeline")

StandingsSource = Callable[[str], Optional[List[StandingsRow]]]

_ENGINE_DEPS = {
    "odds": {"fixture_providers", "odds_provider", "standings_source", "form_service", "normalizer"},
    "statarea": {"scraper"},
}


def _default_fixture_providers(settings: Settings, primary: FootballDataFixturesProvider) -> List[FixturesProviderBase]:
    providers: List[FixturesProviderBase] = [primary]
    if settings.odds_provider == "api_football":
        providers.append(ApiFootballFixturesProvider())
    return providers


def _predict(odds: NormalizedOdds, mode: str) -> Tuple[PredictedOutcome, float]:
    if mode == "home_only":
        return PredictedOutcome.HOME, odds.home_probability
    if odds.home_probability >= odds.away_probability:
        return PredictedOutcome.HOME, odds.home_probability
    return PredictedOutcome.AWAY, odds.away_probability


async def _fetch_fixtures(providers: Sequence[FixturesProviderBase]) -> List[Fixture]:
    # un errore di qualsiasi sorgente fixtures è fatale per il run
    per_source = await asyncio.gather(*(asyncio.to_thread(p.fetch_todays_fixtures) for p in providers))
    return merge_fixtures(*per_source)


async def run_odds_engine(
    settings: Optional[Settings] = None,
    *,
    fixture_providers: Optional[Sequence[FixturesProviderBase]] = None,
    odds_provider: Optional[OddsProviderProtocol] = None,
    standings_source: Optional[StandingsSource] = None,
    form_service: Optional[TeamFormService] = None,
    normalizer: Optional[NameNormalizer] = None,
) -> PickSlate:
    """
    Motore basato sulle quote:
    fixtures -> quote -> matching -> miglior quota -> classifica/forma -> selezione.
    """
    settings = settings or get_settings()
    normalizer = normalizer or NameNormalizer()
    if fixture_providers is None or standings_source is None or form_service is None:
        fd = FootballDataFixturesProvider()
        fixture_providers = fixture_providers or _default_fixture_providers(settings, fd)
        standings_source = standings_source or fd.get_standings
        form_service = form_service or TeamFormService(fd.get_team_matches)
    odds_provider = odds_provider or get_odds_provider(settings.odds_provider)

    fixtures = await _fetch_fixtures(fixture_providers)
    logger.info("fixtures_fetched count=%s", len(fixtures))
    events = await collect_odds_events(fixtures, odds_provider)

    matched: List[Tuple[Fixture, NormalizedOdds]] = []
    for fixture in fixtures:
        event = match_fixture_to_odds(fixture, events, normalizer)
        if event is None:
            logger.debug("Nessuna quota per %s vs %s", fixture.home_team_name, fixture.away_team_name)
            continue
        odds = best_quote(event)
        if odds is None:
            logger.debug("Nessuna quota valida per %s vs %s", fixture.home_team_name, fixture.away_team_name)
            continue
        matched.append((fixture, odds))

    codes = [f.competition_code for f, _ in matched if f.competition_code and f.source == "football-data"]

    async def _standings(code: str) -> Optional[List[StandingsRow]]:
        return await asyncio.to_thread(standings_source, code)

    tables: Dict[str, Optional[List[StandingsRow]]] = await gather_in_batches(
        codes,
        _standings,
        batch_size=settings.form_batch_size,
        delay=settings.form_batch_delay,
        default=None,
        label="standings",
    )

    form_keys = []
    for fixture, _ in matched:
        form_keys.append((fixture.home_team_id, True))
        form_keys.append((fixture.away_team_id, False))

    async def _form(key: Tuple[Optional[int], bool]) -> Form:
        return await asyncio.to_thread(form_service.team_form, key[0], key[1])

    forms: Dict[Tuple[Optional[int], bool], Form] = await gather_in_batches(
        form_keys,
        _form,
        batch_size=settings.form_batch_size,
        delay=settings.form_batch_delay,
        default=EMPTY_FORM,
        label="team_form",
    )

    candidates: List[MatchCandidate] = []
    for fixture, odds in matched:
        outcome, win_probability = _predict(odds, settings.prediction_mode)
        candidate = MatchCandidate(
            fixture=fixture,
            odds=odds,
            standings_gap=standings_gap(
                fixture.home_team_name,
                fixture.away_team_name,
                tables.get(fixture.competition_code or ""),
                normalizer,
            ),
            home_form=forms.get((fixture.home_team_id, True), EMPTY_FORM),
            away_form=forms.get((fixture.away_team_id, False), EMPTY_FORM),
            predicted_outcome=outcome,
            win_probability=win_probability,
            confidence_tier=confidence_tier(win_probability),
        )
        if not validate_candidate(candidate):
            logger.warning("Candidato scartato (dati non validi): %s", fixture.external_id)
            continue
        candidates.append(candidate)

    config = SelectionConfig.for_odds(settings)
    slate = select(
        candidates,
        config.threshold,
        config.min_count,
        config.max_count,
        total_considered=len(fixtures),
        candidates_with_odds=len(matched),
        engine="odds",
    )
    write_run_snapshot({"engine": "odds", "mode": settings.prediction_mode, **slate.to_dict()})
    return slate


async def run_statarea_engine(
    settings: Optional[Settings] = None,
    *,
    scraper: Optional[StatareaScraper] = None,
) -> PickSlate:
    settings = settings or get_settings()
    scraper = scraper or StatareaScraper()
    result = await asyncio.to_thread(scraper.scrape)
    config = SelectionConfig.for_statarea(settings)
    slate = select(
        result.fixtures,
        config.threshold,
        config.min_count,
        config.max_count,
        total_considered=result.stats.get("rows_seen", len(result.fixtures)),
        candidates_with_odds=result.stats.get("rows_seen", 0) - result.stats.get("rows_skipped", 0),
        engine="statarea",
    )
    write_run_snapshot({"engine": "statarea", "scrape": result.stats, **slate.to_dict()})
    return slate


_ENGINES = {
    "odds": run_odds_engine,
    "statarea": run_statarea_engine,
}


async def _run_engine(name: str, settings: Settings, deps: Dict[str, Any]) -> PickSlate:
    runner = _ENGINES[name]
    kwargs = {k: v for k, v in deps.items() if k in _ENGINE_DEPS[name]}
    return await runner(settings, **kwargs)


async def generate_daily_slate(
    engine: Optional[str] = None,
    settings: Optional[Settings] = None,
    **deps: Any,
) -> PickSlate:
    """
    Esegue il motore configurato (PICKS_ENGINE). Se fallisce per una sorgente
    non disponibile e PICKS_FALLBACK_ENGINE indica un altro motore, usa quello;
    altrimenti l'errore viene propagato al chiamante.
    """
    settings = settings or get_settings()
    name = (engine or settings.picks_engine).strip().lower()
    if name not in _ENGINES:
        raise ValueError(f"engine non supportato: {name}")
    try:
        return await _run_engine(name, settings, deps)
    except SourceUnavailableError as exc:
        fallback = settings.picks_fallback_engine
        if not fallback or fallback == name:
            raise
        logger.warning("Engine %s non disponibile (%s): fallback su %s", name, exc, fallback)
        return await _run_engine(fallback, settings, deps)


def run_daily_slate(engine: Optional[str] = None) -> PickSlate:
    """Entry point sincrono per script/cron."""
    return asyncio.run(generate_daily_slate(engine))


__all__ = [
    "run_odds_engine",
    "run_statarea_engine",
    "generate_daily_slate",
    "run_daily_slate",
]
