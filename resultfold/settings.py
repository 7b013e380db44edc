from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

import requests

if TYPE_CHECKING:
    from resultfold.clients.search import SearchEndpointClient


@dataclass(slots=True)
class EndpointSettings:
    """Configuration for the HTTP search endpoint."""

    base_url: Optional[str] = None
    access_token: Optional[str] = field(default=None, repr=False)
    timeout: float = 10.0
    user_agent: str = "resultfold"
    session: Optional[requests.Session] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self._apply_env_overrides()

    def _apply_env_overrides(self) -> None:
        env_url = self._get_env_value("FOLDING_ENDPOINT_URL")
        if env_url and self.base_url is None:
            self.base_url = env_url

        env_token = self._get_env_value("FOLDING_ACCESS_TOKEN")
        if env_token and self.access_token is None:
            self.access_token = env_token

        env_timeout = self._get_env_value("FOLDING_REQUEST_TIMEOUT_S")
        if env_timeout and self.timeout == 10.0:
            self.timeout = float(env_timeout)

    def _get_env_value(self, name: str) -> Optional[str]:
        value = os.environ.get(name)
        if value is None:
            return None
        value = value.strip()
        return value or None

    def build_session(self) -> requests.Session:
        """Return a configured :class:`requests.Session` using the settings."""

        session = self.session if self.session is not None else requests.Session()
        if self.user_agent:
            session.headers["User-Agent"] = self.user_agent
        return session

    def build_client(self) -> "SearchEndpointClient":
        """Return a :class:`SearchEndpointClient` bound to these settings."""

        from resultfold.clients.search import SearchEndpointClient

        return SearchEndpointClient(
            session=self.build_session(),
            base_url=self.base_url,
            timeout=self.timeout,
            access_token=self.access_token,
        )
