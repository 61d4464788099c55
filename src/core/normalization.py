from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from core.exceptions import MalformedRecordError
from core.logging import get_logger
from core.models import (
    FinishedMatch,
    Fixture,
    FixtureStatus,
    OddsEvent,
    OddsQuote,
    StandingsRow,
)

logger = get_logger("core.normalization")

# Pattern ISO 8601 semplice: YYYY-MM-DDTHH:MM(:SS) (accetta suffisso Z o offset)
_ISO_DATETIME_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?(?:Z|[+-]\d{2}:?\d{2})?$"
)

FD_STATUS_MAP = {
    "SCHEDULED": FixtureStatus.SCHEDULED,
    "TIMED": FixtureStatus.TIMED,
    "IN_PLAY": FixtureStatus.LIVE,
    "PAUSED": FixtureStatus.LIVE,
    "LIVE": FixtureStatus.LIVE,
    "FINISHED": FixtureStatus.FINISHED,
    "AWARDED": FixtureStatus.FINISHED,
    "POSTPONED": FixtureStatus.POSTPONED,
    "SUSPENDED": FixtureStatus.POSTPONED,
    "CANCELLED": FixtureStatus.CANCELLED,
    "CANCELED": FixtureStatus.CANCELLED,
}

AF_STATUS_MAP = {
    "TBD": FixtureStatus.SCHEDULED,
    "NS": FixtureStatus.SCHEDULED,
    "1H": FixtureStatus.LIVE,
    "HT": FixtureStatus.LIVE,
    "2H": FixtureStatus.LIVE,
    "ET": FixtureStatus.LIVE,
    "BT": FixtureStatus.LIVE,
    "P": FixtureStatus.LIVE,
    "INT": FixtureStatus.LIVE,
    "LIVE": FixtureStatus.LIVE,
    "FT": FixtureStatus.FINISHED,
    "AET": FixtureStatus.FINISHED,
    "PEN": FixtureStatus.FINISHED,
    "AWD": FixtureStatus.FINISHED,
    "WO": FixtureStatus.FINISHED,
    "PST": FixtureStatus.POSTPONED,
    "SUSP": FixtureStatus.POSTPONED,
    "CANC": FixtureStatus.CANCELLED,
    "ABD": FixtureStatus.CANCELLED,
}


def parse_iso_datetime(value: Any) -> Optional[datetime]:
    """Parse ISO 8601 -> datetime aware in UTC. None se assente o non conforme."""
    if not isinstance(value, str) or not _ISO_DATETIME_RE.match(value.strip()):
        return None
    try:
        dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _as_int(v: Any) -> Optional[int]:
    try:
        return int(v) if v is not None else None
    except (ValueError, TypeError):
        return None


def _as_price(v: Any) -> float:
    try:
        return float(v)
    except (ValueError, TypeError) as e:
        raise MalformedRecordError(f"prezzo non numerico: {v!r}") from e


def _require_str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise MalformedRecordError(f"campo obbligatorio mancante: {field_name}")
    return value.strip()


def map_football_data_status(raw: Optional[str]) -> FixtureStatus:
    if not raw:
        return FixtureStatus.OTHER
    return FD_STATUS_MAP.get(raw.upper(), FixtureStatus.OTHER)


def map_api_football_status(raw: Optional[str]) -> FixtureStatus:
    if not raw:
        return FixtureStatus.OTHER
    return AF_STATUS_MAP.get(raw.upper(), FixtureStatus.OTHER)


def normalize_football_data_match(item: Dict[str, Any]) -> Fixture:
    """
    Valida un match grezzo di football-data.org (v4) e lo converte in Fixture.
    Solleva MalformedRecordError se mancano id, squadre o utcDate.
    """
    if not isinstance(item, dict):
        raise MalformedRecordError("match non è un oggetto")
    match_id = _as_int(item.get("id"))
    if match_id is None:
        raise MalformedRecordError("campo obbligatorio mancante: id")
    home = item.get("homeTeam") or {}
    away = item.get("awayTeam") or {}
    comp = item.get("competition") or {}
    kickoff = parse_iso_datetime(item.get("utcDate"))
    if kickoff is None:
        raise MalformedRecordError(f"utcDate mancante o non ISO8601: {item.get('utcDate')!r}")
    return Fixture(
        external_id=str(match_id),
        home_team_name=_require_str(home.get("name"), "homeTeam.name"),
        away_team_name=_require_str(away.get("name"), "awayTeam.name"),
        league_name=str(comp.get("name") or ""),
        kickoff_time=kickoff,
        status=map_football_data_status(item.get("status")),
        home_team_id=_as_int(home.get("id")),
        away_team_id=_as_int(away.get("id")),
        competition_code=comp.get("code") or None,
        source="football-data",
    )


def normalize_api_football_fixture(item: Dict[str, Any]) -> Fixture:
    """
    Normalizza record grezzo dell'API-Football (fixture, league, teams).
    """
    if not isinstance(item, dict):
        raise MalformedRecordError("fixture non è un oggetto")
    fixture = item.get("fixture") or {}
    league = item.get("league") or {}
    teams = item.get("teams") or {}
    home = teams.get("home") or {}
    away = teams.get("away") or {}

    fixture_id = _as_int(fixture.get("id"))
    if fixture_id is None:
        raise MalformedRecordError("campo obbligatorio mancante: fixture.id")
    kickoff = parse_iso_datetime(fixture.get("date"))
    if kickoff is None:
        raise MalformedRecordError(f"fixture.date mancante o non ISO8601: {fixture.get('date')!r}")
    return Fixture(
        external_id=str(fixture_id),
        home_team_name=_require_str(home.get("name"), "teams.home.name"),
        away_team_name=_require_str(away.get("name"), "teams.away.name"),
        league_name=str(league.get("name") or ""),
        kickoff_time=kickoff,
        status=map_api_football_status((fixture.get("status") or {}).get("short")),
        home_team_id=_as_int(home.get("id")),
        away_team_id=_as_int(away.get("id")),
        competition_code=str(league.get("id")) if league.get("id") is not None else None,
        source="api_football",
    )


def _odds_api_quote(bookmaker: Dict[str, Any], home_team: str, away_team: str) -> Optional[OddsQuote]:
    name = bookmaker.get("title") or bookmaker.get("key") or ""
    markets = bookmaker.get("markets") or []
    h2h = next((m for m in markets if isinstance(m, dict) and m.get("key") == "h2h"), None)
    if not h2h:
        return None
    outcomes = h2h.get("outcomes") or []
    if len(outcomes) != 3:
        return None
    by_name = {str(o.get("name")): o.get("price") for o in outcomes if isinstance(o, dict)}
    if home_team not in by_name or away_team not in by_name or "Draw" not in by_name:
        return None
    return OddsQuote(
        bookmaker_name=str(name),
        home_price=_as_price(by_name[home_team]),
        draw_price=_as_price(by_name["Draw"]),
        away_price=_as_price(by_name[away_team]),
    )


def normalize_odds_api_event(item: Dict[str, Any]) -> OddsEvent:
    """
    Evento The Odds API v4 (anche via host RapidAPI):
    {id, commence_time, home_team, away_team, bookmakers:[{title, markets:[{key:'h2h', outcomes}]}]}
    I bookmaker con quote non numeriche vengono scartati singolarmente.
    """
    if not isinstance(item, dict):
        raise MalformedRecordError("evento non è un oggetto")
    event_id = _require_str(str(item.get("id") or ""), "id")
    home_team = _require_str(item.get("home_team"), "home_team")
    away_team = _require_str(item.get("away_team"), "away_team")
    quotes: List[OddsQuote] = []
    for bk in item.get("bookmakers") or []:
        if not isinstance(bk, dict):
            continue
        try:
            quote = _odds_api_quote(bk, home_team, away_team)
        except MalformedRecordError as exc:
            logger.warning("Quote scartata event=%s bookmaker=%s: %s", event_id, bk.get("key"), exc)
            continue
        if quote is not None:
            quotes.append(quote)
    return OddsEvent(
        event_id=event_id,
        home_team_name=home_team,
        away_team_name=away_team,
        commence_time=parse_iso_datetime(item.get("commence_time")),
        quotes=tuple(quotes),
    )


def normalize_api_football_odds(items: Iterable[Dict[str, Any]], fixture: Fixture) -> OddsEvent:
    """
    Converte la 'response' di /odds?fixture=ID in un OddsEvent legato alla fixture.
    Usa la scommessa 'Match Winner' con valori Home/Draw/Away.
    """
    quotes: List[OddsQuote] = []
    for entry in items or []:
        if not isinstance(entry, dict):
            continue
        for bk in entry.get("bookmakers") or []:
            if not isinstance(bk, dict):
                continue
            bet = next(
                (b for b in bk.get("bets") or [] if isinstance(b, dict) and b.get("name") == "Match Winner"),
                None,
            )
            if not bet:
                continue
            values = bet.get("values") or []
            if len(values) != 3:
                continue
            by_name = {str(v.get("value")): v.get("odd") for v in values if isinstance(v, dict)}
            if not {"Home", "Draw", "Away"}.issubset(by_name):
                continue
            try:
                quotes.append(
                    OddsQuote(
                        bookmaker_name=str(bk.get("name") or ""),
                        home_price=_as_price(by_name["Home"]),
                        draw_price=_as_price(by_name["Draw"]),
                        away_price=_as_price(by_name["Away"]),
                    )
                )
            except MalformedRecordError as exc:
                logger.warning("Quote scartata fixture=%s bookmaker=%s: %s", fixture.external_id, bk.get("name"), exc)
    return OddsEvent(
        event_id=fixture.external_id,
        home_team_name=fixture.home_team_name,
        away_team_name=fixture.away_team_name,
        commence_time=fixture.kickoff_time,
        quotes=tuple(quotes),
    )


def normalize_standings(data: Dict[str, Any]) -> List[StandingsRow]:
    """
    Estrae la classifica TOTAL (o la prima disponibile) da /competitions/{code}/standings.
    Righe senza posizione o nome squadra vengono ignorate.
    """
    standings = data.get("standings") or []
    if not standings:
        return []
    block = next((s for s in standings if isinstance(s, dict) and s.get("type") == "TOTAL"), standings[0])
    rows: List[StandingsRow] = []
    for row in (block or {}).get("table") or []:
        team = row.get("team") or {}
        position = _as_int(row.get("position"))
        name = team.get("name")
        if position is None or not name:
            continue
        rows.append(StandingsRow(position=position, team_name=str(name), team_id=_as_int(team.get("id"))))
    return rows


def normalize_finished_match(item: Dict[str, Any]) -> FinishedMatch:
    if not isinstance(item, dict):
        raise MalformedRecordError("match non è un oggetto")
    home = item.get("homeTeam") or {}
    away = item.get("awayTeam") or {}
    full_time = ((item.get("score") or {}).get("fullTime")) or {}
    return FinishedMatch(
        home_team_id=_as_int(home.get("id")),
        away_team_id=_as_int(away.get("id")),
        home_team_name=str(home.get("name") or ""),
        away_team_name=str(away.get("name") or ""),
        home_goals=_as_int(full_time.get("home")),
        away_goals=_as_int(full_time.get("away")),
        utc_date=parse_iso_datetime(item.get("utcDate")),
    )


__all__ = [
    "parse_iso_datetime",
    "map_football_data_status",
    "map_api_football_status",
    "normalize_football_data_match",
    "normalize_api_football_fixture",
    "normalize_odds_api_event",
    "normalize_api_football_odds",
    "normalize_standings",
    "normalize_finished_match",
]
