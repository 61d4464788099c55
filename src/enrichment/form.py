from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

from core.exceptions import SourceUnavailableError
from core.logging import get_logger
from core.models import EMPTY_FORM, FinishedMatch, Form, FormResult

logger = get_logger("enrichment.form")

FORM_LENGTH = 5
FORM_POINTS = {
    FormResult.WIN: 3,
    FormResult.DRAW: 1,
    FormResult.LOSS: 0,
    FormResult.NO_DATA: 1,
}

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _result(match: FinishedMatch, is_home: bool) -> FormResult:
    if match.home_goals is None or match.away_goals is None:
        return FormResult.NO_DATA
    own, other = (match.home_goals, match.away_goals) if is_home else (match.away_goals, match.home_goals)
    if own > other:
        return FormResult.WIN
    if own < other:
        return FormResult.LOSS
    return FormResult.DRAW


def form_from_matches(matches: Sequence[FinishedMatch], team_id: int, is_home: bool) -> Form:
    """
    Ultimi 5 risultati della squadra nel ruolo indicato (casa/trasferta),
    dal più recente. Completato con NO_DATA se le partite sono meno di 5.
    """
    relevant = [
        m for m in matches
        if (m.home_team_id if is_home else m.away_team_id) == team_id
    ]
    relevant.sort(key=lambda m: m.utc_date or _EPOCH, reverse=True)
    results = [_result(m, is_home) for m in relevant[:FORM_LENGTH]]
    results.extend([FormResult.NO_DATA] * (FORM_LENGTH - len(results)))
    return tuple(results)


def form_string(form: Form) -> str:
    return "".join(r.value for r in form)


def form_score(form: Form) -> int:
    # NO_DATA vale come un pareggio: neutro, mai come vittoria
    return sum(FORM_POINTS[r] for r in form)


def form_quality(form: Form) -> str:
    score = form_score(form)
    if score >= 12:
        return "Excellent"
    if score >= 9:
        return "Good"
    if score >= 6:
        return "Average"
    return "Poor"


class TeamFormService:
    """Recupera lo storico di una squadra e ne calcola la forma; ogni errore -> NNNNN."""

    def __init__(self, fetch_matches: Callable[[int], List[FinishedMatch]]) -> None:
        self._fetch_matches = fetch_matches

    def team_form(self, team_id: Optional[int], is_home: bool) -> Form:
        if team_id is None:
            return EMPTY_FORM
        try:
            matches = self._fetch_matches(team_id)
        except SourceUnavailableError as exc:
            logger.warning("Forma non disponibile per team=%s: %s", team_id, exc)
            return EMPTY_FORM
        return form_from_matches(matches, team_id, is_home)


__all__ = [
    "FORM_LENGTH",
    "form_from_matches",
    "form_string",
    "form_score",
    "form_quality",
    "TeamFormService",
]
