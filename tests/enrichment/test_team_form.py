from datetime import datetime, timedelta, timezone

from core.exceptions import SourceUnavailableError
from core.models import EMPTY_FORM, FinishedMatch, FormResult
from enrichment.form import TeamFormService, form_from_matches, form_quality, form_score, form_string

W, D, L, N = FormResult.WIN, FormResult.DRAW, FormResult.LOSS, FormResult.NO_DATA
BASE = datetime(2025, 2, 1, tzinfo=timezone.utc)


def _m(days_ago, home_id, away_id, hg, ag):
    return FinishedMatch(home_id, away_id, "H", "A", hg, ag, BASE - timedelta(days=days_ago))


def test_home_form_filters_role_and_orders_recent_first():
    matches = [
        _m(30, 1, 9, 0, 2),  # casa, sconfitta (più vecchia)
        _m(1, 1, 8, 2, 0),  # casa, vittoria (più recente)
        _m(5, 7, 1, 3, 0),  # trasferta: esclusa
        _m(10, 1, 6, 1, 1),  # casa, pareggio
    ]
    assert form_from_matches(matches, 1, is_home=True) == (W, D, L, N, N)


def test_away_form_uses_away_perspective():
    matches = [_m(1, 5, 2, 0, 1), _m(2, 6, 2, 3, 1), _m(3, 2, 9, 4, 0)]
    assert form_from_matches(matches, 2, is_home=False) == (W, L, N, N, N)


def test_only_five_most_recent():
    matches = [_m(i, 1, 100 + i, 1, 0) for i in range(8)]
    matches.append(_m(-1, 1, 99, 0, 1))
    assert form_from_matches(matches, 1, True) == (L, W, W, W, W)


def test_missing_score_is_no_data_but_zero_is_valid():
    matches = [_m(1, 1, 2, None, 1), _m(2, 1, 3, 0, 0)]
    assert form_from_matches(matches, 1, True) == (N, D, N, N, N)


def test_form_score_and_quality():
    assert form_score((W, W, W, W, D)) == 13
    assert form_quality((W, W, W, W, D)) == "Excellent"
    assert form_quality((W, W, W, L, L)) == "Good"
    assert form_quality(EMPTY_FORM) == "Poor"
    assert form_score(EMPTY_FORM) == 5
    assert form_quality((W, D, L, N, L)) == "Poor"
    assert form_quality((W, W, L, L, L)) == "Average"
    assert form_string((W, D, L, N, N)) == "WDLNN"


def test_service_failure_yields_empty_form():
    def failing(team_id):
        raise SourceUnavailableError("down", source="football-data", status_code=500)

    assert TeamFormService(failing).team_form(1, True) == EMPTY_FORM


def test_service_without_team_id():
    def never(team_id):  # pragma: no cover
        raise AssertionError("non deve essere chiamata")

    assert TeamFormService(never).team_form(None, False) == EMPTY_FORM


def test_service_computes_form():
    svc = TeamFormService(lambda team_id: [_m(1, team_id, 2, 2, 1)])
    assert svc.team_form(4, True) == (W, N, N, N, N)
