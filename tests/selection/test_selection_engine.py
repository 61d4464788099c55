from datetime import datetime, timezone

import pytest

from core.models import (
    ConfidenceTier,
    EMPTY_FORM,
    Fixture,
    FixtureStatus,
    FormResult,
    MatchCandidate,
    NormalizedOdds,
    OddsQuote,
    PredictedOutcome,
    ScrapedFixture,
    SlateOutcome,
)
from selection.engine import SelectionConfig, confidence_tier, rank, select, validate_candidate

KICKOFF = datetime(2025, 3, 1, 15, tzinfo=timezone.utc)
W, D, L, N = FormResult.WIN, FormResult.DRAW, FormResult.LOSS, FormResult.NO_DATA


def _candidate(p, gap=0, home_form=EMPTY_FORM, away_form=EMPTY_FORM, outcome=PredictedOutcome.HOME, cid="x"):
    fixture = Fixture(cid, "Home " + cid, "Away " + cid, "League", KICKOFF, FixtureStatus.TIMED)
    quote = OddsQuote("b", 1.2, 6.0, 11.0)
    odds = NormalizedOdds(p, 0.05, max(0.0, 1 - p - 0.05), "b", quote)
    return MatchCandidate(fixture, odds, gap, home_form, away_form, outcome, p, confidence_tier(p))


def test_scenario_threshold_limits_result():
    cands = [_candidate(p, cid=str(i)) for i, p in enumerate([0.95, 0.82, 0.81, 0.79, 0.60])]
    slate = select(cands, 0.80, 2, 4)
    assert [c.win_probability for c in slate.picks] == [0.95, 0.82, 0.81]
    assert slate.outcome is SlateOutcome.PICKS
    assert slate.stats.total_candidates == 5
    assert slate.stats.qualifying_candidates == 3
    assert slate.stats.selected_picks == 3


def test_scenario_below_minimum_is_empty():
    cands = [_candidate(0.9, cid="a"), _candidate(0.5, cid="b")]
    slate = select(cands, 0.80, 2, 4)
    assert slate.picks == ()
    assert slate.is_empty
    assert slate.outcome is SlateOutcome.BELOW_MINIMUM
    assert slate.stats.qualifying_candidates == 1
    assert slate.stats.selected_picks == 0


def test_no_qualifying_candidates_outcome():
    slate = select([_candidate(0.5)], 0.80, 2, 4)
    assert slate.outcome is SlateOutcome.NO_QUALIFYING_CANDIDATES
    assert select([], 0.80, 2, 4).outcome is SlateOutcome.NO_QUALIFYING_CANDIDATES


def test_more_than_max_returns_exactly_max_sorted():
    probs = [0.81, 0.97, 0.85, 0.90, 0.88, 0.83]
    cands = [_candidate(p, cid=str(i)) for i, p in enumerate(probs)]
    slate = select(cands, 0.80, 2, 4)
    assert len(slate.picks) == 4
    assert [c.win_probability for c in slate.picks] == [0.97, 0.90, 0.88, 0.85]


def test_tie_breakers_gap_then_form():
    a = _candidate(0.85, gap=2, cid="a")
    b = _candidate(0.85, gap=5, cid="b")
    c = _candidate(0.85, gap=5, home_form=(W, W, D, L, N), cid="c")
    d = _candidate(0.85, gap=5, away_form=(W, W, W, W, W), outcome=PredictedOutcome.AWAY, cid="d")
    assert [x.fixture.external_id for x in rank([a, b, c, d])] == ["d", "c", "b", "a"]


def test_no_data_never_counts_as_win():
    padded = _candidate(0.85, home_form=(W, N, N, N, N), cid="padded")
    real = _candidate(0.85, home_form=(W, W, L, L, L), cid="real")
    assert [x.fixture.external_id for x in rank([padded, real])] == ["real", "padded"]


def test_full_ties_keep_input_order():
    cands = [_candidate(0.9, cid=str(i)) for i in range(5)]
    assert [c.fixture.external_id for c in rank(cands)] == ["0", "1", "2", "3", "4"]


def test_statarea_fixtures_rank_by_percentage():
    def sf(i, h, a):
        return ScrapedFixture(str(i), "H", "A", "Various Leagues", KICKOFF, h, a)

    fixtures = [sf(1, 61, 10), sf(2, 20, 75), sf(3, 90, 5), sf(4, 30, 30)]
    slate = select(fixtures, 60, 3, 8, engine="statarea")
    assert [f.id for f in slate.picks] == ["3", "2", "1"]
    assert slate.picks[1].selected_team is PredictedOutcome.AWAY
    assert slate.engine == "statarea"


@pytest.mark.parametrize("mn,mx", [(0, 4), (3, 2), (-1, 1)])
def test_invalid_bounds(mn, mx):
    with pytest.raises(ValueError):
        SelectionConfig(0.8, mn, mx)


@pytest.mark.parametrize(
    "p,tier",
    [(0.95, ConfidenceTier.EXTREME), (0.90, ConfidenceTier.EXTREME), (0.89, ConfidenceTier.VERY_HIGH),
     (0.85, ConfidenceTier.VERY_HIGH), (0.84, ConfidenceTier.HIGH), (0.41, ConfidenceTier.HIGH)],
)
def test_confidence_tier(p, tier):
    assert confidence_tier(p) is tier


def test_validate_candidate():
    assert validate_candidate(_candidate(0.9))
    bad = _candidate(0.9)
    object.__setattr__(bad, "win_probability", 1.3)
    assert not validate_candidate(bad)
    no_league = _candidate(0.9)
    object.__setattr__(no_league, "fixture", Fixture("1", "A", "B", "", KICKOFF, FixtureStatus.TIMED))
    assert not validate_candidate(no_league)


def test_slate_to_dict():
    slate = select([_candidate(0.95, cid="a"), _candidate(0.9, cid="b")], 0.8, 2, 4)
    d = slate.to_dict()
    assert d["outcome"] == "picks"
    assert d["stats"]["selected_picks"] == 2
    assert d["picks"][0]["confidence"] == "Extreme"
    assert d["picks"][0]["predicted_outcome"] == "HOME"
