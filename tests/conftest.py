import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest  # noqa: E402
from core.config import _reset_settings_cache_for_tests  # noqa: E402


@pytest.fixture(autouse=True)
def reset_settings_cache(monkeypatch, tmp_path):
    monkeypatch.setenv("FOOTBALL_DATA_API_KEY", "DUMMY_FD")
    monkeypatch.setenv("BET_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("HTTP_BACKOFF_BASE", "0")
    monkeypatch.delenv("ENABLE_METRICS_FILE", raising=False)
    _reset_settings_cache_for_tests()
    yield
    _reset_settings_cache_for_tests()


class FakeResponse:
    def __init__(self, status_code=200, json_data=None, headers=None, text=""):
        self.status_code = status_code
        self._json_data = json_data
        self.headers = headers or {}
        self.text = text or (json.dumps(json_data) if isinstance(json_data, (dict, list)) else "")

    def json(self):
        if self._json_data is None:
            raise ValueError("Invalid JSON")
        return self._json_data


class FakeSession:
    """Session requests finta: restituisce in sequenza risposte o solleva eccezioni."""

    def __init__(self, responses):
        self._responses = list(responses)
        self.headers = {}
        self.calls = []

    def get(self, url, params=None, timeout=None, verify=True):
        self.calls.append({"url": url, "params": params, "timeout": timeout, "verify": verify})
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def no_sleep(monkeypatch):
    calls = []

    def fake_sleep(seconds):
        calls.append(seconds)

    monkeypatch.setattr("core.http_client.time.sleep", fake_sleep)
    return calls


@pytest.fixture
def fixed_jitter(monkeypatch):
    # Jitter deterministico = 1.0 (nessuna variazione)
    monkeypatch.setattr("core.http_client.random.uniform", lambda a, b: 1.0)
