"""HTTP access to the Travis CI v2 API."""

from __future__ import annotations

import logging
import platform
import re
from collections.abc import Mapping
from typing import Any

import httpx

from .constants import ACCEPT_HEADER, ORG_URI, VERSION
from .errors import ApiError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    f"python-travis-status/{VERSION} httpx/{httpx.__version__} "
    f"Python/{platform.python_version()}"
)

# RFC 7235 token68 characters; anything else is sent as a quoted-string.
_TOKEN68_RE = re.compile(r"^[A-Za-z0-9._~+/-]+$")


def trim_slash(value: str | None) -> str | None:
    """Drop a single trailing slash."""
    if value and value.endswith("/"):
        return value[:-1]
    return value


def format_token(token: str) -> str:
    if _TOKEN68_RE.match(token):
        return token
    escaped = re.sub(r'(["\\])', r"\\\1", token)
    return f'"{escaped}"'


class TravisHttp:
    """Issues GET requests against a Travis CI API endpoint.

    Args:
        client: Client used for every request. Its lifetime belongs to the
            caller.
        endpoint: API base URL (default: ORG_URI).
        headers: Extra request headers. ``Accept`` and ``User-Agent`` get
            defaults unless present here (names are case-insensitive).
        token: Access token sent as ``Authorization: token <token>``.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        endpoint: str | None = None,
        headers: Mapping[str, str] | None = None,
        token: str | None = None,
    ) -> None:
        self._client = client
        self.endpoint = trim_slash(endpoint) or ORG_URI
        self._headers = httpx.Headers(headers or {})
        if "Accept" not in self._headers:
            self._headers["Accept"] = ACCEPT_HEADER
        if "User-Agent" not in self._headers:
            self._headers["User-Agent"] = DEFAULT_USER_AGENT
        self._token = token

    def set_access_token(self, token: str | None) -> None:
        self._token = token

    def request_headers(self) -> httpx.Headers:
        headers = httpx.Headers(self._headers)
        if self._token:
            headers["Authorization"] = f"token {format_token(self._token)}"
        return headers

    async def get(self, path: str) -> Any:
        """GET ``path`` and return the decoded JSON body.

        Raises ApiError for HTTP status >= 400 (in preference to any JSON
        problem) and for bodies that are not JSON.
        """
        url = self.endpoint + path
        logger.debug("GET %s", url)
        response = await self._client.get(url, headers=self.request_headers())
        logger.debug("GET %s -> %d", url, response.status_code)

        body: Any = response.text
        json_error: ValueError | None = None
        try:
            body = response.json()
        except ValueError as exc:
            json_error = exc

        if response.status_code >= 400:
            raise ApiError(
                response.reason_phrase or f"HTTP {response.status_code}",
                status_code=response.status_code,
                reason=response.reason_phrase,
                headers=response.headers,
                body=body,
            )
        if json_error is not None:
            raise ApiError(
                f"Invalid JSON in response from {url}: {json_error}",
                status_code=response.status_code,
                reason=response.reason_phrase,
                headers=response.headers,
                body=body,
            ) from json_error
        return body
