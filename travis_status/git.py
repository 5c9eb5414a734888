"""Git subprocess operations."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path

from .errors import GitError

logger = logging.getLogger(__name__)

GitRunner = Callable[[Sequence[str]], Awaitable[tuple[str, str]]]

# `git config --get` exits with 1 when the key is not set.
CONFIG_NOT_SET = 1


async def run_git(args: Sequence[str], cwd: Path | None = None) -> tuple[str, str]:
    """Run a git command and return (stdout, stderr)."""
    logger.debug("git %s", " ".join(args))
    proc = await asyncio.create_subprocess_exec(
        "git",
        *args,
        cwd=cwd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    out, err = await proc.communicate()
    stdout = out.decode("utf-8", errors="replace")
    stderr = err.decode("utf-8", errors="replace")
    if proc.returncode != 0:
        raise GitError(args, proc.returncode or 0, stderr, stdout)
    return stdout, stderr


def runner_for(cwd: Path) -> GitRunner:
    """Return a runner bound to a working directory."""

    async def _run(args: Sequence[str]) -> tuple[str, str]:
        return await run_git(args, cwd=cwd)

    return _run


async def rev_parse_verify(run: GitRunner, ref: str) -> str:
    out, _ = await run(["rev-parse", "--verify", ref])
    return out.rstrip()


async def current_branch(run: GitRunner) -> str:
    out, _ = await run(["symbolic-ref", "-q", "--short", "HEAD"])
    return out.rstrip()


async def config_get(run: GitRunner, name: str) -> str | None:
    """Read a git config value, returning None if it is not set."""
    try:
        out, _ = await run(["config", "--get", name])
    except GitError as exc:
        if exc.returncode == CONFIG_NOT_SET:
            return None
        raise
    return out.rstrip()


async def config_set(run: GitRunner, name: str, value: str) -> None:
    await run(["config", name, value])


async def remote_url(run: GitRunner, remote: str) -> str:
    out, _ = await run(["ls-remote", "--get-url", remote])
    return out.rstrip()
