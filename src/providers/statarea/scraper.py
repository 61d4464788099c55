from __future__ import annotations

import random
import re
import string
import time
from datetime import date, datetime, timezone, tzinfo
from typing import Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo

from bs4 import BeautifulSoup

from core.config import get_settings
from core.http_client import RetryingHttpClient
from core.logging import get_logger
from core.models import ScrapedFixture, ScrapingResult
from core.normalization import parse_iso_datetime

log = get_logger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)
ROW_SELECTOR = "table tbody tr"
MIN_CELLS = 8

_LEADING_NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)")
_NON_ALNUM_RE = re.compile(r"[^a-zA-Z0-9]")
_WS_RE = re.compile(r"\s+")


def parse_percentage(text: str) -> float:
    """'72,5%' -> 72.5; testo non numerico -> 0."""
    clean = (text or "").strip().replace("%", "").replace(",", ".").strip()
    m = _LEADING_NUMBER_RE.match(clean)
    if not m:
        return 0.0
    try:
        return float(m.group(0))
    except ValueError:
        return 0.0


def _split_time(clean: str) -> Optional[Tuple[int, int]]:
    if ":" in clean:
        parts = clean.split(":")
    elif "." in clean:
        parts = clean.split(".")
    elif len(clean) == 4 and clean.isdigit():
        parts = [clean[:2], clean[2:]]
    else:
        return None
    if len(parts) != 2 or not parts[0].isdigit() or not parts[1].isdigit():
        return None
    hours, minutes = int(parts[0]), int(parts[1])
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        return None
    return hours, minutes


def parse_kickoff_time(
    text: str,
    day: date,
    tz: tzinfo = timezone.utc,
    now: Optional[datetime] = None,
) -> Tuple[datetime, bool]:
    """
    Converte l'orario della riga ('15:30', '15.30', '1530' o ISO completo)
    in datetime UTC sul giorno indicato.

    Ritorna (kickoff, approssimato): se il testo non è interpretabile
    il kickoff è l'istante corrente e il flag vale True.
    """
    clean = _WS_RE.sub("", text or "")
    if "T" in clean:
        parsed = parse_iso_datetime(clean)
        if parsed is not None:
            return parsed, False
    hm = _split_time(clean)
    if hm is None:
        log.warning("Orario non interpretabile %r: uso l'ora corrente", text)
        return (now or datetime.now(timezone.utc)), True
    local = datetime(day.year, day.month, day.day, hm[0], hm[1], tzinfo=tz)
    return local.astimezone(timezone.utc), False


def make_fixture_id(home: str, away: str, time_text: str) -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=5))
    return "-".join(
        [
            _WS_RE.sub("-", home),
            _WS_RE.sub("-", away),
            _NON_ALNUM_RE.sub("", time_text),
            str(int(time.time() * 1000)),
            suffix,
        ]
    )


def validate_scraped_fixture(fixture: ScrapedFixture, min_percentage: float = 60.0) -> bool:
    if not fixture.home_team_name or not fixture.away_team_name or not fixture.league_name:
        return False
    return fixture.winning_percentage >= min_percentage


def validate_scraping_result(result: ScrapingResult, min_percentage: float = 60.0) -> bool:
    if not isinstance(result.fixtures, list) or not isinstance(result.stats, dict):
        return False
    return all(validate_scraped_fixture(f, min_percentage) for f in result.fixtures)


class StatareaScraper:
    """
    Scraper della pagina giornaliera di pronostici Statarea.

    Una riga valida ha almeno 8 celle: orario, casa, trasferta, tre quote
    (ignorate) e le percentuali di vittoria casa/trasferta. Righe incomplete
    vengono saltate senza interrompere lo scraping; una pagina non
    raggiungibile solleva SourceUnavailableError.
    """

    def __init__(self, client: Optional[RetryingHttpClient] = None) -> None:
        self._settings = get_settings()
        self.min_percentage = self._settings.statarea_min_percentage
        self.league_name = self._settings.statarea_league_name
        self.tz = ZoneInfo(self._settings.statarea_timezone)
        self._client = client or RetryingHttpClient(
            self._settings.statarea_base_url,
            name="statarea",
            headers={"User-Agent": USER_AGENT},
            verify=self._settings.statarea_verify_tls,
        )

    def scrape(self, day: Optional[date] = None) -> ScrapingResult:
        day = day or datetime.now(self.tz).date()
        html = self._client.get_text(day.isoformat())
        result = self.parse_html(html, day)
        log.info(
            "statarea scraping completato day=%s accepted=%s",
            day.isoformat(),
            result.stats.get("accepted", 0),
            extra={"fetch_stats": {**self._client.get_stats(), **result.stats}},
        )
        return result

    def parse_html(self, html: str, day: date) -> ScrapingResult:
        soup = BeautifulSoup(html, "html.parser")
        stats: Dict[str, int] = {"rows_seen": 0, "rows_skipped": 0, "rows_rejected": 0, "accepted": 0}
        fixtures: List[ScrapedFixture] = []
        for index, row in enumerate(soup.select(ROW_SELECTOR)):
            stats["rows_seen"] += 1
            try:
                fixture = self._parse_row(row, day)
            except (ValueError, TypeError, AttributeError) as exc:
                stats["rows_skipped"] += 1
                log.warning("Riga %s non interpretabile: %s", index, exc)
                continue
            if fixture is None:
                stats["rows_skipped"] += 1
                continue
            if fixture.winning_percentage < self.min_percentage:
                stats["rows_rejected"] += 1
                continue
            fixtures.append(fixture)

        fixtures.sort(key=lambda f: f.winning_percentage, reverse=True)
        stats["accepted"] = len(fixtures)
        return ScrapingResult(fixtures=fixtures, stats=stats)

    def _parse_row(self, row, day: date) -> Optional[ScrapedFixture]:
        cells = [td.get_text(strip=True) for td in row.find_all("td")]
        if len(cells) < MIN_CELLS:
            return None
        time_text, home, away = cells[0], cells[1], cells[2]
        if not time_text or not home or not away:
            return None
        kickoff, approximate = parse_kickoff_time(time_text, day, self.tz)
        return ScrapedFixture(
            id=make_fixture_id(home, away, time_text),
            home_team_name=home,
            away_team_name=away,
            league_name=self.league_name,
            kickoff_time=kickoff,
            home_winning_percentage=parse_percentage(cells[6]),
            away_winning_percentage=parse_percentage(cells[7]),
            kickoff_time_approximate=approximate,
        )


__all__ = [
    "StatareaScraper",
    "parse_percentage",
    "parse_kickoff_time",
    "make_fixture_id",
    "validate_scraped_fixture",
    "validate_scraping_result",
]
