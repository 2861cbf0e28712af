"""Remote profile sync against a Grosbeak server.

Wire format (both directions)::

    GET/PUT <url>/stand-strategist?username=<name>
    Authorization: <token>
    {"teamData": {...}, "timData": {...}}

Only team data and TIM data travel; the schedule is derived locally by
whoever merges the downloaded profile into their own.
"""

from __future__ import annotations

import logging
from typing import Any

from standstrategist.config import settings
from standstrategist.core import http_client
from standstrategist.errors import ConfigurationMissingError, DecodeError
from standstrategist.profiles.codec import (
    team_data_from_json,
    team_data_to_json,
    tim_data_from_json,
    tim_data_to_json,
)
from standstrategist.profiles.profile import Profile

__all__ = ["RemoteClient"]

log = logging.getLogger(__name__)


class RemoteClient:
    def __init__(self, url: str | None = None, auth: str | None = None) -> None:
        self.url = (settings.GROSBEAK_URL if url is None else url).rstrip("/")
        self.auth = settings.GROSBEAK_AUTH if auth is None else auth

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.auth)

    def _endpoint(self) -> str:
        if not self.url:
            raise ConfigurationMissingError("Grosbeak URL not set")
        if not self.auth:
            raise ConfigurationMissingError("Grosbeak auth not set")
        return f"{self.url}/{settings.GROSBEAK_PATH}"

    def _headers(self) -> dict[str, str]:
        return {"Authorization": self.auth}

    def fetch(self, username: str) -> Profile:
        """Download ``username``'s team and TIM data as a fresh profile."""
        endpoint = self._endpoint()
        body: Any = http_client.request_json(
            "GET", endpoint, params={"username": username}, headers=self._headers()
        )
        if not isinstance(body, dict):
            raise DecodeError("Remote response is not a JSON object", context={"user": username})
        profile = Profile(
            team_data=team_data_from_json(body.get("teamData", {})),
            tim_data=tim_data_from_json(body.get("timData", {})),
        )
        log.info("Fetched remote profile for %s", username)
        return profile

    def push(self, username: str, profile: Profile) -> None:
        endpoint = self._endpoint()
        payload = {
            "teamData": team_data_to_json(profile.team_data.get()),
            "timData": tim_data_to_json(profile.tim_data.get()),
        }
        http_client.request_json(
            "PUT",
            endpoint,
            params={"username": username},
            headers=self._headers(),
            payload=payload,
        )
        log.info("Pushed profile data for %s", username)
