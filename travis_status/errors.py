"""Error types raised by travis_status.

Every error carries a stable ``kind`` so callers can special-case one
(the CLI prints a hint for ``slug-detection``) and render the rest generically.
"""

from collections.abc import Mapping, Sequence
from typing import Any

SLUG_INVALID = "GitHub repo name is invalid, it should be on the form 'owner/repo'"
EOF_MESSAGE = "The input stream is exhausted."


class TravisStatusError(Exception):
    """Base class for travis_status errors."""

    kind = "error"


class InvalidSlugError(TravisStatusError):
    """Repository slug does not have the form owner/name."""

    kind = "invalid-slug"

    def __init__(self, slug: str, message: str = SLUG_INVALID) -> None:
        self.slug = slug
        super().__init__(message)


class SlugDetectionError(TravisStatusError):
    """Repository slug could not be detected from the local git clone."""

    kind = "slug-detection"


class BranchDetectionError(TravisStatusError):
    """Current branch could not be determined."""

    kind = "branch-detection"

    def __init__(self, stderr: str) -> None:
        self.stderr = stderr
        super().__init__(f"Unable to determine current branch: {stderr or 'detached HEAD'}")


class GitError(TravisStatusError):
    """Git command failed."""

    kind = "git"

    def __init__(
        self,
        cmd: Sequence[str],
        returncode: int,
        stderr: str,
        stdout: str = "",
    ) -> None:
        self.cmd = list(cmd)
        self.returncode = returncode
        self.stderr = stderr
        self.stdout = stdout
        super().__init__(f"git {' '.join(self.cmd)}: {stderr.strip() or f'exit status {returncode}'}")


class ApiError(TravisStatusError):
    """Travis CI API request failed or returned an unusable body."""

    kind = "api"

    def __init__(
        self,
        message: str,
        status_code: int,
        reason: str = "",
        headers: Mapping[str, str] | None = None,
        body: Any = None,
    ) -> None:
        self.status_code = status_code
        self.reason = reason
        self.headers = dict(headers or {})
        self.body = body
        super().__init__(message)


class CommitMismatchError(TravisStatusError):
    """Fetched build is for a different commit than the one requested."""

    kind = "commit-mismatch"

    def __init__(self, expected: str, actual: str | None, name: str | None = None) -> None:
        self.expected = expected
        self.actual = actual
        self.name = name
        message = f"Build commit {actual or '(none)'} does not match {expected}"
        if name:
            message += f" ({name})"
        super().__init__(message)


class InputExhaustedError(TravisStatusError):
    """Input ended while a prompt was waiting for an answer."""

    kind = "input-exhausted"

    def __init__(self, message: str = EOF_MESSAGE) -> None:
        super().__init__(message)
