from __future__ import annotations

from typing import Optional

import requests

from core.config import get_settings
from core.http_client import RetryingHttpClient

BASE_URL = "https://v3.football.api-sports.io"


class APIFootballHttpClient(RetryingHttpClient):
    """Client sincrono (requests + retry) per API-Football v3."""

    def __init__(self, api_key: Optional[str] = None, session: Optional[requests.Session] = None) -> None:
        key = api_key or get_settings().api_football_key or ""
        super().__init__(
            BASE_URL,
            name="api_football",
            headers={"x-apisports-key": key, "Accept": "application/json"},
            session=session,
        )


def get_http_client() -> APIFootballHttpClient:
    """
    Restituisce sempre una nuova istanza per far sì che i test che
    modificano le variabili d'ambiente abbiano effetto immediato.
    """
    return APIFootballHttpClient()
