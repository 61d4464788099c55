#!/usr/bin/env python3
import argparse
import json
import sys

from dotenv import find_dotenv, load_dotenv

# Carica .env (override=True)
dotenv_path = find_dotenv(usecwd=True)
if dotenv_path:
    load_dotenv(dotenv_path, override=True)

from core.config import ENGINES, _reset_settings_cache_for_tests, get_settings  # noqa: E402
from core.exceptions import SourceUnavailableError  # noqa: E402
from core.logging import get_logger  # noqa: E402
from predictions.pipeline import run_daily_slate  # noqa: E402

log = get_logger("scripts.run_daily_picks")


def main() -> int:
    """
    Run giornaliero (da cron): genera la slate e la stampa in JSON su stdout.
    Exit code: 0 ok/vuota, 1 config non valida, 2 sorgente non disponibile.
    """
    ap = argparse.ArgumentParser(description="Genera la slate giornaliera di pick")
    ap.add_argument("--engine", choices=sorted(ENGINES), default=None, help="Override di PICKS_ENGINE")
    args = ap.parse_args()

    _reset_settings_cache_for_tests()
    try:
        get_settings()
    except ValueError as e:
        log.error("Config non valida: %s", e)
        return 1

    try:
        slate = run_daily_slate(args.engine)
    except SourceUnavailableError as e:
        log.error("Run fallito: sorgente non disponibile (%s)", e)
        return 2

    log.info("run_completed", extra={"run_stats": slate.stats.to_dict()})
    json.dump(slate.to_dict(), sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
