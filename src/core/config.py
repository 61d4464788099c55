import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, List


DEFAULT_COMPETITIONS = "PL,ELC,PD,BL1,SA,FL1,DED,PPL,BSA,CL,EL"
DEFAULT_ODDS_SPORTS = (
    "soccer_epl,soccer_spain_la_liga,soccer_germany_bundesliga,soccer_italy_serie_a,"
    "soccer_france_ligue_one,soccer_netherlands_eredivisie,soccer_portugal_primeira_liga,"
    "soccer_uefa_champs_league"
)
ODDS_PROVIDERS = {"rapidapi", "oddsapi", "api_football"}
PREDICTION_MODES = {"two_outcome", "home_only"}
ENGINES = {"odds", "statarea"}


def _parse_bool(value: Optional[str], default: bool) -> bool:
    if value is None or value == "":
        return default
    v = value.strip().lower()
    if v in {"0", "false", "no"}:
        return False
    return True


def _parse_list(value: Optional[str]) -> Optional[List[str]]:
    if not value:
        return None
    parts = [p.strip() for p in value.split(",")]
    clean = [p for p in parts if p]
    return clean or None


@dataclass
class Settings:
    football_data_api_key: str
    odds_api_key: Optional[str]
    rapidapi_key: Optional[str]
    api_football_key: Optional[str]
    log_level: str

    http_max_attempts: int
    http_backoff_base: float
    http_backoff_factor: float
    http_backoff_jitter: float
    http_timeout: float

    football_data_competitions: List[str]

    odds_provider: str
    odds_sports: List[str]
    odds_regions: str
    odds_batch_size: int
    odds_batch_delay: float
    odds_days_ahead: int

    api_football_league_ids: List[int]
    api_football_bookmaker_id: int
    api_football_odds_batch_size: int
    api_football_odds_batch_delay: float

    prediction_mode: str
    pick_threshold: float
    pick_min_count: int
    pick_max_count: int

    statarea_base_url: str
    statarea_min_percentage: float
    statarea_min_picks: int
    statarea_max_picks: int
    statarea_timezone: str
    statarea_verify_tls: bool
    statarea_league_name: str

    form_batch_size: int
    form_batch_delay: float

    picks_engine: str
    picks_fallback_engine: Optional[str]

    bet_data_dir: str
    enable_metrics_file: bool
    metrics_dir: str

    @classmethod
    def from_env(cls) -> "Settings":
        key = os.getenv("FOOTBALL_DATA_API_KEY")
        if not key:
            raise ValueError("FOOTBALL_DATA_API_KEY non impostata. Aggiungi a .env: FOOTBALL_DATA_API_KEY=LA_TUA_CHIAVE")

        def _int(name: str, default: int) -> int:
            raw = os.getenv(name)
            if not raw:
                return default
            try:
                return int(raw)
            except ValueError as e:
                raise ValueError(f"Variabile {name} deve essere un intero (valore: {raw!r})") from e

        def _float(name: str, default: float) -> float:
            raw = os.getenv(name)
            if not raw:
                return default
            try:
                return float(raw)
            except ValueError as e:
                raise ValueError(f"Variabile {name} deve essere un numero (valore: {raw!r})") from e

        log_level = os.getenv("BET_LOG_LEVEL", "INFO").upper()

        http_max_attempts = max(1, _int("HTTP_MAX_ATTEMPTS", 5))
        http_backoff_base = _float("HTTP_BACKOFF_BASE", 0.5)
        http_backoff_factor = _float("HTTP_BACKOFF_FACTOR", 2.0)
        http_backoff_jitter = _float("HTTP_BACKOFF_JITTER", 0.2)
        http_timeout = _float("HTTP_TIMEOUT", 10.0)

        competitions = _parse_list(os.getenv("FOOTBALL_DATA_LEAGUES")) or _parse_list(DEFAULT_COMPETITIONS) or []

        odds_provider = os.getenv("ODDS_PROVIDER", "rapidapi").strip().lower()
        if odds_provider not in ODDS_PROVIDERS:
            odds_provider = "rapidapi"
        odds_sports = _parse_list(os.getenv("ODDS_SPORTS")) or _parse_list(DEFAULT_ODDS_SPORTS) or []
        odds_regions = os.getenv("ODDS_REGIONS", "us,eu,uk")
        odds_batch_size = max(1, _int("ODDS_BATCH_SIZE", 3))
        odds_batch_delay = max(0.0, _float("ODDS_BATCH_DELAY", 1.0))
        odds_days_ahead = max(0, _int("ODDS_DAYS_AHEAD", 1))

        league_ids: List[int] = []
        for token in (_parse_list(os.getenv("API_FOOTBALL_LEAGUE_IDS", "41")) or []):
            try:
                league_ids.append(int(token))
            except ValueError:
                continue
        api_football_bookmaker_id = _int("API_FOOTBALL_BOOKMAKER_ID", 8)
        api_football_odds_batch_size = max(1, _int("API_FOOTBALL_ODDS_BATCH_SIZE", 10))
        api_football_odds_batch_delay = max(0.0, _float("API_FOOTBALL_ODDS_BATCH_DELAY", 1.0))

        prediction_mode = os.getenv("PREDICTION_MODE", "two_outcome").strip().lower()
        if prediction_mode not in PREDICTION_MODES:
            prediction_mode = "two_outcome"
        # default 0.40 in modalità home_only
        pick_threshold = _float("PICK_THRESHOLD", 0.40 if prediction_mode == "home_only" else 0.80)
        pick_threshold = max(0.0, min(pick_threshold, 1.0))
        pick_min_count = max(1, _int("PICK_MIN_COUNT", 2))
        pick_max_count = max(pick_min_count, _int("PICK_MAX_COUNT", 4))

        statarea_base_url = os.getenv("STATAREA_BASE_URL", "https://old.statarea.com/predictions/")
        statarea_min_percentage = _float("STATAREA_MIN_PERCENTAGE", 60.0)
        statarea_min_picks = max(1, _int("STATAREA_MIN_PICKS", 3))
        statarea_max_picks = max(statarea_min_picks, _int("STATAREA_MAX_PICKS", 8))
        statarea_timezone = os.getenv("STATAREA_TIMEZONE", "UTC")
        statarea_verify_tls = _parse_bool(os.getenv("STATAREA_VERIFY_TLS"), True)
        statarea_league_name = os.getenv("STATAREA_LEAGUE_NAME", "Various Leagues")

        form_batch_size = max(1, _int("FORM_BATCH_SIZE", 5))
        form_batch_delay = max(0.0, _float("FORM_BATCH_DELAY", 0.2))

        picks_engine = os.getenv("PICKS_ENGINE", "odds").strip().lower()
        if picks_engine not in ENGINES:
            picks_engine = "odds"
        fallback_raw = (os.getenv("PICKS_FALLBACK_ENGINE") or "").strip().lower()
        picks_fallback_engine = fallback_raw if fallback_raw in ENGINES and fallback_raw != picks_engine else None

        bet_data_dir = os.getenv("BET_DATA_DIR", "data")
        enable_metrics_file = _parse_bool(os.getenv("ENABLE_METRICS_FILE"), False)
        metrics_dir = os.getenv("METRICS_DIR", "metrics")

        return cls(
            football_data_api_key=key,
            odds_api_key=os.getenv("ODDS_API_KEY") or None,
            rapidapi_key=os.getenv("RAPIDAPI_KEY") or None,
            api_football_key=os.getenv("API_FOOTBALL_KEY") or None,
            log_level=log_level,
            http_max_attempts=http_max_attempts,
            http_backoff_base=http_backoff_base,
            http_backoff_factor=http_backoff_factor,
            http_backoff_jitter=http_backoff_jitter,
            http_timeout=http_timeout,
            football_data_competitions=competitions,
            odds_provider=odds_provider,
            odds_sports=odds_sports,
            odds_regions=odds_regions,
            odds_batch_size=odds_batch_size,
            odds_batch_delay=odds_batch_delay,
            odds_days_ahead=odds_days_ahead,
            api_football_league_ids=league_ids,
            api_football_bookmaker_id=api_football_bookmaker_id,
            api_football_odds_batch_size=api_football_odds_batch_size,
            api_football_odds_batch_delay=api_football_odds_batch_delay,
            prediction_mode=prediction_mode,
            pick_threshold=pick_threshold,
            pick_min_count=pick_min_count,
            pick_max_count=pick_max_count,
            statarea_base_url=statarea_base_url,
            statarea_min_percentage=statarea_min_percentage,
            statarea_min_picks=statarea_min_picks,
            statarea_max_picks=statarea_max_picks,
            statarea_timezone=statarea_timezone,
            statarea_verify_tls=statarea_verify_tls,
            statarea_league_name=statarea_league_name,
            form_batch_size=form_batch_size,
            form_batch_delay=form_batch_delay,
            picks_engine=picks_engine,
            picks_fallback_engine=picks_fallback_engine,
            bet_data_dir=bet_data_dir,
            enable_metrics_file=enable_metrics_file,
            metrics_dir=metrics_dir,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


def _reset_settings_cache_for_tests() -> None:
    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "_reset_settings_cache_for_tests"]
