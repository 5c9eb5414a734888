from __future__ import annotations

import subprocess
from collections.abc import Sequence
from pathlib import Path

import pytest

from travis_status.errors import GitError

GIT_AVAILABLE = subprocess.run(["git", "--version"], capture_output=True).returncode == 0

HEAD_SHA = "a" * 40
OTHER_SHA = "b" * 40


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeGit:
    """Answers git commands from a table; unknown commands fail like git does."""

    def __init__(self, responses: dict[tuple[str, ...], str | GitError] | None = None) -> None:
        self.responses = dict(responses or {})
        self.calls: list[tuple[str, ...]] = []

    async def __call__(self, args: Sequence[str]) -> tuple[str, str]:
        key = tuple(args)
        self.calls.append(key)
        response = self.responses.get(key)
        if response is None:
            raise GitError(args, 128, f"fatal: unexpected {' '.join(args)}")
        if isinstance(response, GitError):
            raise response
        return response + "\n", ""


def run(cmd: list[str], cwd: Path | None = None) -> str:
    result = subprocess.run(
        cmd, cwd=str(cwd) if cwd else None, check=True, capture_output=True, text=True
    )
    return result.stdout.strip()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """Repository with one commit on master and branches tracking several remotes."""
    if not GIT_AVAILABLE:
        pytest.skip("git missing")
    root = tmp_path / "repo"
    root.mkdir()
    run(["git", "init", "-q", "-b", "master"], cwd=root)
    run(["git", "config", "user.email", "test@example.com"], cwd=root)
    run(["git", "config", "user.name", "Test"], cwd=root)
    (root / "README.md").write_text("hello")
    run(["git", "add", "."], cwd=root)
    run(["git", "commit", "-q", "-m", "init"], cwd=root)
    (root / "README.md").write_text("hello again")
    run(["git", "commit", "-q", "-am", "second"], cwd=root)

    remotes = {
        "notslug": "foo",
        "origin": "https://github.com/owner/repo",
        "remote1": "git@github.com:owner1/repo1.git",
        "remote2": "https://github.com/owner2/repo2.git",
        "remote3": "https::https://github.com/owner3/repo3.git",
    }
    for name, url in remotes.items():
        run(["git", "remote", "add", name, url], cwd=root)

    branch_remotes = {
        "branch1": "remote1",
        "branch2": "remote2",
        "branch3": "remote3",
        "branchnourl": "nourl",
        "branchnotslug": "notslug",
    }
    for branch, remote in branch_remotes.items():
        run(["git", "branch", branch], cwd=root)
        run(["git", "config", f"branch.{branch}.remote", remote], cwd=root)
        run(["git", "config", f"branch.{branch}.merge", "refs/heads/master"], cwd=root)
    return root
