"""Repository, branch and commit information from the local git clone."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

from rich.markup import escape

from . import git
from .constants import SLUG_CONFIG_NAME
from .errors import SLUG_INVALID, BranchDetectionError, GitError, SlugDetectionError
from .git import GitRunner, run_git
from .slug import SLUG_VALID_RE, check_slug_format, slug_from_url
from .ui import Prompter, default_prompter, make_console, styled

logger = logging.getLogger(__name__)


class GitStatusChecker:
    """Finds the repository slug and resolves commits for the current clone.

    Args:
        run_git: Coroutine running one git command, returning (stdout, stderr).
        err: Stream for notices and prompts.
        input: Stream answers are read from when prompting.
        prompter: Overrides the prompter built from ``input`` and ``err``.
        interactive: Confirm a detected slug instead of just reporting it.
    """

    def __init__(
        self,
        run_git: GitRunner = run_git,
        err: TextIO | None = None,
        input: TextIO | None = None,
        prompter: Prompter | None = None,
        interactive: bool = False,
    ) -> None:
        self._run = run_git
        self._err = err if err is not None else sys.stderr
        self._input = input if input is not None else sys.stdin
        self._prompter = prompter
        self._interactive = interactive
        self._console = make_console(self._err, interactive)

    @property
    def prompter(self) -> Prompter:
        if self._prompter is None:
            self._prompter = default_prompter(self._input, self._err)
        return self._prompter

    async def resolve_hash(self, commit_name: str) -> str:
        """Resolve a branch, tag or hash to the full commit hash."""
        return await git.rev_parse_verify(self._run, commit_name)

    async def store_slug(self, slug: str) -> str:
        check_slug_format(slug)
        await git.config_set(self._run, SLUG_CONFIG_NAME, slug)
        return slug

    async def try_store_slug(self, slug: str) -> str:
        """Store ``slug``, reporting (not raising) any failure."""
        try:
            await self.store_slug(slug)
        except Exception as exc:
            logger.debug("Unable to store %s", slug, exc_info=True)
            self._err.write(f"Error storing slug in git config: {exc}\n")
        return slug

    async def load_slug(self) -> str | None:
        return await git.config_get(self._run, SLUG_CONFIG_NAME)

    async def confirm_slug(self, slug: str) -> str:
        prompter = self.prompter
        shown = styled(slug, "yellow", self._interactive)
        question = f"Detected repository as {shown} is this correct? "
        if await prompter.agree(question):
            return slug
        # travis.rb stores whatever is entered here; re-ask until it is valid.
        return await prompter.ask(
            "Repository slug (owner/name): ",
            default=slug,
            validate=SLUG_VALID_RE,
            not_valid=SLUG_INVALID,
            trim=True,
        )

    async def detect_branch(self) -> str:
        try:
            return await git.current_branch(self._run)
        except GitError as exc:
            raise BranchDetectionError(exc.stderr.strip()) from exc

    async def _remote_name(self) -> str:
        try:
            branch = await self.detect_branch()
            remote = await git.config_get(self._run, f"branch.{branch}.remote")
        except (BranchDetectionError, GitError):
            logger.debug("Unable to get remote for current branch", exc_info=True)
            return "origin"
        return remote or "origin"

    async def detect_slug(self) -> str:
        """Work out the slug from the URL of the current branch's remote."""
        remote = await self._remote_name()
        try:
            url = await git.remote_url(self._run, remote)
        except GitError as exc:
            raise SlugDetectionError(f"Unable to get URL for '{remote}' remote: {exc}") from exc
        # ls-remote echoes its argument back when the remote has no URL.
        if url == remote:
            raise SlugDetectionError(f"No URL for '{remote}' remote")

        slug = slug_from_url(url)
        if slug is None:
            raise SlugDetectionError(f"Unable to extract slug from URL <{url}>")

        if self._interactive:
            return await self.confirm_slug(slug)

        self._console.print(f"detected repository as [bold]{escape(slug)}[/bold]")
        return slug

    async def find_slug(self) -> str:
        """Stored slug if there is one, detected slug otherwise."""
        slug = await self.load_slug()
        if slug:
            return slug
        return await self.detect_slug()
