"""Data models for travis_status."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TextIO

import httpx

if TYPE_CHECKING:
    from .ui import Prompter

StatusResult = dict[str, Any]


@dataclass(frozen=True)
class LocalCommit:
    """A commit resolved from the local repository."""

    sha: str
    name: str | None = None

    @classmethod
    def from_ref(cls, ref: str, sha: str) -> "LocalCommit":
        """Keep the reference as ``name`` only when it is not the hash itself."""
        return cls(sha=sha, name=ref if ref != sha else None)


@dataclass(frozen=True)
class QueryOptions:
    """Per-query options.

    ``wait`` is the number of seconds to keep polling while the result is
    pending. ``0`` disables polling.
    """

    wait: float = 0


@dataclass(frozen=True)
class StatusOptions:
    """Everything one status check needs to know."""

    repo: str | None = None
    store_repo: str | None = None
    branch: str | bool | None = None
    commit: str | None = None
    interactive: bool = False
    wait: float = 0
    api_endpoint: str | None = None
    token: str | None = None
    headers: Mapping[str, str] = field(default_factory=dict)
    verify_ssl: bool = True
    http_client: httpx.AsyncClient | None = None
    input: TextIO | None = None
    err: TextIO | None = None
    prompter: "Prompter | None" = None

    @property
    def query_options(self) -> QueryOptions:
        return QueryOptions(wait=self.wait)


def merge_repo_build(repo: StatusResult, build: StatusResult) -> StatusResult:
    """Combine a repository result with the result for its last build.

    Top-level keys from ``build`` override the same keys from ``repo``. In
    practice the two never collide: the repository lives under ``repo`` and
    the build under ``build``, ``commit`` and ``jobs``.
    """
    merged: StatusResult = {}
    for key, value in repo.items():
        merged[key] = value
    for key, value in build.items():
        merged[key] = value
    return merged


def result_state(result: StatusResult) -> str | None:
    """State of the build a result describes."""
    if "branch" in result:
        return result["branch"].get("state")
    if "repo" in result:
        return result["repo"].get("last_build_state")
    if "build" in result:
        return result["build"].get("state")
    return None


def result_number(result: StatusResult) -> str | None:
    """Number of the build a result describes."""
    if "branch" in result:
        return result["branch"].get("number")
    if "repo" in result:
        return result["repo"].get("last_build_number")
    if "build" in result:
        return result["build"].get("number")
    return None
