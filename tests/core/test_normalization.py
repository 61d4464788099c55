from datetime import datetime, timezone

import pytest

from core.exceptions import MalformedRecordError
from core.models import FixtureStatus, OddsQuote
from core.normalization import (
    normalize_api_football_fixture,
    normalize_api_football_odds,
    normalize_finished_match,
    normalize_football_data_match,
    normalize_odds_api_event,
    normalize_standings,
    parse_iso_datetime,
)


def _fd_match(**over):
    m = {
        "id": 101,
        "utcDate": "2025-03-01T15:00:00Z",
        "status": "TIMED",
        "homeTeam": {"id": 57, "name": "Arsenal FC"},
        "awayTeam": {"id": 61, "name": "Chelsea FC"},
        "competition": {"name": "Premier League", "code": "PL"},
    }
    m.update(over)
    return m


def test_parse_iso_datetime():
    dt = parse_iso_datetime("2025-03-01T15:00:00Z")
    assert dt == datetime(2025, 3, 1, 15, 0, tzinfo=timezone.utc)
    assert parse_iso_datetime("2025-03-01T16:00:00+01:00") == dt
    assert parse_iso_datetime("01/03/2025") is None
    assert parse_iso_datetime(None) is None


def test_football_data_match_ok():
    f = normalize_football_data_match(_fd_match())
    assert f.external_id == "101"
    assert f.home_team_name == "Arsenal FC"
    assert f.competition_code == "PL"
    assert f.status is FixtureStatus.TIMED
    assert f.is_eligible
    assert f.home_team_id == 57


def test_football_data_status_mapping():
    assert normalize_football_data_match(_fd_match(status="IN_PLAY")).status is FixtureStatus.LIVE
    assert normalize_football_data_match(_fd_match(status="FINISHED")).is_eligible is False
    assert normalize_football_data_match(_fd_match(status="WEIRD")).status is FixtureStatus.OTHER


@pytest.mark.parametrize(
    "override",
    [
        {"id": None},
        {"utcDate": None},
        {"utcDate": "domani"},
        {"homeTeam": {"id": 1}},
        {"awayTeam": {"name": "  "}},
    ],
)
def test_football_data_match_malformed(override):
    with pytest.raises(MalformedRecordError):
        normalize_football_data_match(_fd_match(**override))


def test_api_football_fixture():
    raw = {
        "fixture": {"id": 9, "date": "2025-03-01T12:30:00+00:00", "status": {"short": "NS"}},
        "league": {"id": 41, "name": "League One"},
        "teams": {"home": {"id": 1, "name": "Bolton"}, "away": {"id": 2, "name": "Wigan"}},
    }
    f = normalize_api_football_fixture(raw)
    assert f.source == "api_football"
    assert f.status is FixtureStatus.SCHEDULED
    assert f.competition_code == "41"


def test_odds_api_event_quotes_by_team_name():
    raw = {
        "id": "ev1",
        "commence_time": "2025-03-01T15:00:00Z",
        "home_team": "Arsenal",
        "away_team": "Chelsea",
        "bookmakers": [
            {
                "key": "b1",
                "title": "Book One",
                "markets": [
                    {
                        "key": "h2h",
                        "outcomes": [
                            {"name": "Chelsea", "price": 4.0},
                            {"name": "Draw", "price": 3.5},
                            {"name": "Arsenal", "price": 2.0},
                        ],
                    }
                ],
            },
            {
                "key": "bad",
                "markets": [
                    {
                        "key": "h2h",
                        "outcomes": [
                            {"name": "Arsenal", "price": "n/a"},
                            {"name": "Draw", "price": 3.0},
                            {"name": "Chelsea", "price": 3.0},
                        ],
                    }
                ],
            },
            {"key": "no_h2h", "markets": [{"key": "totals", "outcomes": []}]},
        ],
    }
    ev = normalize_odds_api_event(raw)
    assert ev.quotes == (OddsQuote("Book One", 2.0, 3.5, 4.0),)
    assert ev.commence_time == datetime(2025, 3, 1, 15, tzinfo=timezone.utc)


def test_odds_api_event_missing_team():
    with pytest.raises(MalformedRecordError):
        normalize_odds_api_event({"id": "x", "home_team": "A"})


def test_api_football_odds_match_winner():
    fixture = normalize_api_football_fixture(
        {
            "fixture": {"id": 9, "date": "2025-03-01T12:30:00Z", "status": {"short": "NS"}},
            "league": {"id": 41, "name": "League One"},
            "teams": {"home": {"id": 1, "name": "Bolton"}, "away": {"id": 2, "name": "Wigan"}},
        }
    )
    response = [
        {
            "bookmakers": [
                {
                    "name": "Bet365",
                    "bets": [
                        {"name": "Goals Over/Under", "values": []},
                        {
                            "name": "Match Winner",
                            "values": [
                                {"value": "Home", "odd": "1.50"},
                                {"value": "Draw", "odd": "4.00"},
                                {"value": "Away", "odd": "6.50"},
                            ],
                        },
                    ],
                }
            ]
        }
    ]
    ev = normalize_api_football_odds(response, fixture)
    assert ev.event_id == "9"
    assert ev.home_team_name == "Bolton"
    assert ev.quotes == (OddsQuote("Bet365", 1.5, 4.0, 6.5),)


def test_standings_total_block():
    data = {
        "standings": [
            {"type": "HOME", "table": [{"position": 9, "team": {"id": 1, "name": "A"}}]},
            {
                "type": "TOTAL",
                "table": [
                    {"position": 1, "team": {"id": 1, "name": "A"}},
                    {"position": 2, "team": {"id": 2, "name": "B"}},
                    {"position": None, "team": {"id": 3, "name": "C"}},
                ],
            },
        ]
    }
    rows = normalize_standings(data)
    assert [(r.position, r.team_name) for r in rows] == [(1, "A"), (2, "B")]
    assert normalize_standings({}) == []


def test_finished_match_scores():
    m = normalize_finished_match(
        {
            "utcDate": "2025-02-01T15:00:00Z",
            "homeTeam": {"id": 1, "name": "A"},
            "awayTeam": {"id": 2, "name": "B"},
            "score": {"fullTime": {"home": 0, "away": None}},
        }
    )
    assert m.home_goals == 0
    assert m.away_goals is None
