"""Queries for Travis CI repository, branch and build status."""

from __future__ import annotations

from urllib.parse import quote

import httpx

from .constants import ORG_URI, PRO_URI
from .models import QueryOptions, StatusResult
from .poller import Clock, query_with_wait
from .states import branch_is_pending, build_is_pending, repo_is_pending
from .travis_http import TravisHttp


class TravisStatusChecker:
    """Fetches status resources, waiting while they are pending.

    Args:
        client: HTTP client used for all requests.
        api_endpoint: Travis API server (default: ORG_URI).
        token: Access token for the API.
        headers: Extra request headers.
        clock: Time source for the poll backoff.
    """

    ORG_URI = f"{ORG_URI}/"
    PRO_URI = f"{PRO_URI}/"

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_endpoint: str | None = None,
        token: str | None = None,
        headers: dict[str, str] | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.http = TravisHttp(client, api_endpoint, headers=headers, token=token)
        self._clock = clock

    async def get_repo(self, slug: str, options: QueryOptions | None = None) -> StatusResult:
        async def _query() -> StatusResult:
            return await self.http.get(f"/repos/{quote(slug)}")

        return await query_with_wait(_query, repo_is_pending, options, self._clock)

    async def get_branch(
        self, slug: str, branch: str, options: QueryOptions | None = None
    ) -> StatusResult:
        async def _query() -> StatusResult:
            return await self.http.get(f"/repos/{quote(slug)}/branches/{quote(branch, safe='')}")

        return await query_with_wait(_query, branch_is_pending, options, self._clock)

    async def get_build(
        self, slug: str, build_id: int | str, options: QueryOptions | None = None
    ) -> StatusResult:
        # /repos/{slug}/builds/{id} is not exposed; builds are addressed by id alone.
        async def _query() -> StatusResult:
            return await self.http.get(f"/builds/{quote(str(build_id), safe='')}")

        return await query_with_wait(_query, build_is_pending, options, self._clock)
