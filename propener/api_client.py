"""Minimal REST API client shared by the GitHub and GitLab lookups."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlencode

import requests

from propener import __version__
from propener.errors import ProError

Json = Any

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = f"pro/{__version__}"
DEFAULT_TIMEOUT_S = 30.0


class ApiError(ProError):
    """Base exception for provider API errors."""


@dataclass
class ApiHTTPError(ApiError):
    """Raised for unexpected HTTP status codes."""

    status_code: int
    url: str
    response_text: str | None = None
    headers: dict[str, str] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"API error {self.status_code} for {self.url}: {self.response_text[:200] if self.response_text else 'No response body'}"

    def json(self) -> Json:
        """Decode the error body, returning None when it is not JSON."""
        if not self.response_text:
            return None
        try:
            return json.loads(self.response_text)
        except json.JSONDecodeError:
            return None


@dataclass
class ResponseData:
    """Response from an API request."""

    url: str
    text: str

    def json(self) -> Json:
        try:
            return json.loads(self.text)
        except json.JSONDecodeError as e:
            raise ApiError(f"Malformed JSON response from {self.url}: {e}") from e


class ApiClient:
    """Issues single authenticated requests against a REST API.

    No retries and no caching: every failure surfaces to the caller.
    """

    default_headers: dict[str, str] = {}

    def __init__(
        self,
        token: str,
        *,
        base_url: str,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout_s = timeout_s
        self._token = token
        self._session = session if session is not None else requests.Session()

    def _build_url(self, path: str, params: dict[str, Any] | None = None) -> str:
        """Build full URL from path and parameters."""
        url = f"{self.base_url}/{path.lstrip('/')}"

        if params:
            sorted_params = sorted(params.items())
            url = f"{url}?{urlencode(sorted_params)}"

        return url

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._token}"}

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
    ) -> ResponseData:
        """Make a single request to the API."""
        url = self._build_url(path, params)

        req_headers = {"User-Agent": self.user_agent, **self.default_headers}
        req_headers.update(self._auth_headers())

        logger.debug("%s %s", method.upper(), url)
        try:
            response = self._session.request(
                method,
                url,
                headers=req_headers,
                timeout=self.timeout_s,
            )
        except requests.RequestException as e:
            raise ApiError(f"Request failed: {e}") from e

        logger.debug("%s %s -> %s", method.upper(), url, response.status_code)

        if response.status_code != 200:
            raise ApiHTTPError(
                status_code=response.status_code,
                url=url,
                response_text=response.text,
                headers=dict(response.headers),
            )

        return ResponseData(url=url, text=response.text)

    def get_json(self, path: str, *, params: dict[str, Any] | None = None) -> Json:
        """Make a GET request and return JSON response."""
        response = self.request("GET", path, params=params)
        return response.json()

    def close(self) -> None:
        """Close the session."""
        self._session.close()

    def __enter__(self) -> ApiClient:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()
