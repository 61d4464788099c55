from __future__ import annotations

from typing import Optional, Sequence

from core.models import StandingsRow
from matching.team_names import NameNormalizer


def _position(name: str, table: Sequence[StandingsRow], normalizer: NameNormalizer) -> Optional[int]:
    for row in table:
        if row.team_name == name:
            return row.position
    canonical = normalizer.normalize(name)
    for row in table:
        if normalizer.normalize(row.team_name) == canonical:
            return row.position
    return None


def standings_gap(
    home_team_name: str,
    away_team_name: str,
    table: Optional[Sequence[StandingsRow]],
    normalizer: Optional[NameNormalizer] = None,
) -> int:
    """
    awayPosition - homePosition (positivo = casa meglio piazzata).
    0 se manca la classifica o una delle due squadre.
    """
    if not table:
        return 0
    normalizer = normalizer or NameNormalizer()
    home = _position(home_team_name, table, normalizer)
    away = _position(away_team_name, table, normalizer)
    if home is None or away is None:
        return 0
    return away - home


__all__ = ["standings_gap"]
