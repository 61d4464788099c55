from dataclasses import replace
from datetime import datetime, timezone

from core.models import FixtureStatus
from providers.base import merge_fixtures
from providers.football_data.fixtures_provider import FootballDataFixturesProvider
from providers.football_data.http_client import FootballDataClient


def _match(mid, code="PL", status="TIMED", home="Arsenal FC", away="Chelsea FC"):
    return {
        "id": mid,
        "utcDate": "2025-03-01T15:00:00Z",
        "status": status,
        "homeTeam": {"id": mid * 10, "name": home},
        "awayTeam": {"id": mid * 10 + 1, "name": away},
        "competition": {"name": "Competition " + code, "code": code},
    }


def _provider(fake_session, responses):
    session = fake_session(responses)
    return FootballDataFixturesProvider(client=FootballDataClient(session=session)), session


def test_fetch_todays_fixtures_filters(fake_session, fake_response):
    payload = {
        "matches": [
            _match(1),
            _match(2, status="FINISHED"),
            _match(3, code="XYZ"),
            {"id": 4, "homeTeam": {"name": "A"}},  # malformato
            _match(5, code="SA", status="SCHEDULED", home="AS Roma", away="SS Lazio"),
        ]
    }
    provider, session = _provider(fake_session, [fake_response(200, payload)])
    fixtures = provider.fetch_todays_fixtures()

    assert [f.external_id for f in fixtures] == ["1", "5"]
    assert fixtures[1].status is FixtureStatus.SCHEDULED
    params = session.calls[0]["params"]
    today = datetime.now(timezone.utc).date()
    assert params["dateFrom"] == today.isoformat()
    assert params["dateFrom"] < params["dateTo"]
    assert session.calls[0]["url"].endswith("/v4/matches")


def test_standings_ok(fake_session, fake_response):
    payload = {"standings": [{"type": "TOTAL", "table": [{"position": 1, "team": {"id": 57, "name": "Arsenal FC"}}]}]}
    provider, session = _provider(fake_session, [fake_response(200, payload)])
    rows = provider.get_standings("PL")
    assert rows[0].team_name == "Arsenal FC"
    assert session.calls[0]["url"].endswith("/competitions/PL/standings")


def test_standings_404_is_none(fake_session, fake_response, no_sleep):
    provider, _ = _provider(fake_session, [fake_response(404, {"message": "nope"})])
    assert provider.get_standings("CL") is None


def test_standings_persistent_5xx_is_none(monkeypatch, fake_session, fake_response, no_sleep):
    monkeypatch.setenv("HTTP_MAX_ATTEMPTS", "1")
    provider, _ = _provider(fake_session, [fake_response(503, {"e": 1})])
    assert provider.get_standings("PL") is None


def test_team_matches(fake_session, fake_response):
    payload = {
        "matches": [
            {
                "utcDate": "2025-02-01T15:00:00Z",
                "homeTeam": {"id": 57, "name": "Arsenal FC"},
                "awayTeam": {"id": 61, "name": "Chelsea FC"},
                "score": {"fullTime": {"home": 2, "away": 1}},
            }
        ]
    }
    provider, session = _provider(fake_session, [fake_response(200, payload)])
    matches = provider.get_team_matches(57)
    assert matches[0].home_goals == 2
    assert session.calls[0]["params"] == {"status": "FINISHED", "limit": 10}
    assert session.calls[0]["url"].endswith("/teams/57/matches")


def test_merge_fixtures_first_source_wins(fake_session, fake_response):
    provider, _ = _provider(fake_session, [fake_response(200, {"matches": [_match(1)]})])
    primary = provider.fetch_todays_fixtures()
    dup = [replace(f, external_id="999", source="api_football") for f in primary]
    merged = merge_fixtures(primary, dup)
    assert len(merged) == 1
    assert merged[0].external_id == "1"
