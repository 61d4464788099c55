"""
Predictions package.

Contiene:
- pipeline: orchestrazione dei motori (quote, statarea) e fallback

Espone generate_daily_slate e run_daily_slate.
"""
from .pipeline import generate_daily_slate, run_daily_slate  # noqa: F401

__all__ = ["generate_daily_slate", "run_daily_slate"]
