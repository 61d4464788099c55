from typing import Optional

import requests

from core.config import get_settings
from core.http_client import RetryingHttpClient


class FootballDataClient(RetryingHttpClient):
    BASE_URL = "https://api.football-data.org/v4"

    def __init__(self, api_key: Optional[str] = None, session: Optional[requests.Session] = None) -> None:
        self.api_key = api_key or get_settings().football_data_api_key
        if not self.api_key:
            raise ValueError("FOOTBALL_DATA_API_KEY non impostata.")
        super().__init__(
            self.BASE_URL,
            name="football-data",
            headers={"X-Auth-Token": self.api_key, "Accept": "application/json"},
            session=session,
        )
