"""Top-level status check: resolve inputs locally, then query Travis CI."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import Any

import httpx

from .errors import CommitMismatchError
from .git_status import GitStatusChecker
from .models import LocalCommit, StatusOptions, StatusResult, merge_repo_build
from .poller import Clock
from .slug import check_slug_format
from .travis_checker import TravisStatusChecker

logger = logging.getLogger(__name__)


def check_build_commit(build: StatusResult, local_commit: LocalCommit) -> StatusResult:
    """Return ``build`` if it is for ``local_commit``, raise otherwise."""
    commit = build.get("commit") or {}
    actual = commit.get("sha")
    if actual != local_commit.sha:
        raise CommitMismatchError(local_commit.sha, actual, local_commit.name)
    return build


async def _gather_all(*aws: Awaitable[Any]) -> list[Any]:
    """Await everything concurrently; on the first failure cancel the rest."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def _none() -> None:
    return None


async def resolve_slug(options: StatusOptions, git_checker: GitStatusChecker) -> str:
    if options.store_repo:
        await git_checker.try_store_slug(options.store_repo)
        # With both set, store_repo is remembered and repo is queried.
        return options.repo or options.store_repo
    if options.repo:
        return options.repo

    slug = check_slug_format(await git_checker.find_slug())
    if options.interactive:
        return await git_checker.try_store_slug(slug)
    return slug


async def resolve_local_commit(commit: str, git_checker: GitStatusChecker) -> LocalCommit:
    sha = await git_checker.resolve_hash(commit)
    return LocalCommit.from_ref(commit, sha)


async def travis_status(
    options: StatusOptions | None = None,
    *,
    git_checker: GitStatusChecker | None = None,
    travis_checker: TravisStatusChecker | None = None,
    clock: Clock | None = None,
) -> StatusResult:
    """Get the current Travis CI status of a repository or branch.

    Local work (slug validation, slug lookup, commit and branch resolution)
    must all succeed before any API request is sent. When ``options.commit``
    is set the result is checked against that commit and, for repository
    queries, includes the ``build``, ``commit`` and ``jobs`` of the last build.

    Unless ``options.http_client`` is given, a keep-alive client is opened for
    this call and closed before returning.
    """
    options = options or StatusOptions()
    if options.repo:
        check_slug_format(options.repo)
    if options.store_repo:
        check_slug_format(options.store_repo)

    if git_checker is None:
        git_checker = GitStatusChecker(
            err=options.err,
            input=options.input,
            prompter=options.prompter,
            interactive=options.interactive,
        )

    if travis_checker is not None or options.http_client is not None:
        return await _check_status(options, git_checker, travis_checker, options.http_client, clock)

    async with httpx.AsyncClient(verify=options.verify_ssl) as client:
        return await _check_status(options, git_checker, None, client, clock)


async def _check_status(
    options: StatusOptions,
    git_checker: GitStatusChecker,
    travis_checker: TravisStatusChecker | None,
    client: httpx.AsyncClient | None,
    clock: Clock | None,
) -> StatusResult:
    if travis_checker is None:
        assert client is not None
        travis_checker = TravisStatusChecker(
            client,
            api_endpoint=options.api_endpoint,
            token=options.token,
            headers=dict(options.headers),
            clock=clock,
        )

    slug, local_commit, branch = await _gather_all(
        resolve_slug(options, git_checker),
        resolve_local_commit(options.commit, git_checker) if options.commit else _none(),
        git_checker.detect_branch() if options.branch is True else _none(),
    )
    if options.branch and options.branch is not True:
        branch = options.branch

    query_options = options.query_options
    if branch:
        logger.debug("Querying branch %s of %s", branch, slug)
        result = await travis_checker.get_branch(slug, branch, query_options)
    else:
        logger.debug("Querying repository %s", slug)
        result = await travis_checker.get_repo(slug, query_options)
        if local_commit is not None:
            build_id = result["repo"]["last_build_id"]
            build = await travis_checker.get_build(slug, build_id, query_options)
            result = merge_repo_build(result, build)

    if local_commit is not None:
        check_build_commit(result, local_commit)
    return result
