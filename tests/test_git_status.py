from __future__ import annotations

import io
from pathlib import Path

import pytest
from conftest import HEAD_SHA, FakeGit, run

from travis_status.errors import (
    BranchDetectionError,
    GitError,
    InputExhaustedError,
    InvalidSlugError,
    SlugDetectionError,
)
from travis_status.git import runner_for
from travis_status.git_status import GitStatusChecker
from travis_status.ui import LinePrompter


def _checker(repo: Path, answers: str = "", interactive: bool = False) -> tuple[GitStatusChecker, io.StringIO]:
    err = io.StringIO()
    checker = GitStatusChecker(
        runner_for(repo),
        err=err,
        prompter=LinePrompter(io.StringIO(answers), err),
        interactive=interactive,
    )
    return checker, err


@pytest.mark.asyncio
async def test_resolve_hash(git_repo: Path) -> None:
    checker, _ = _checker(git_repo)
    head = run(["git", "rev-parse", "HEAD"], cwd=git_repo)
    assert await checker.resolve_hash("HEAD") == head
    assert await checker.resolve_hash(head) == head
    with pytest.raises(GitError):
        await checker.resolve_hash("no-such-ref")


@pytest.mark.asyncio
async def test_store_and_load_slug(git_repo: Path) -> None:
    checker, _ = _checker(git_repo)
    assert await checker.load_slug() is None
    assert await checker.store_slug("foo/bar") == "foo/bar"
    assert await checker.load_slug() == "foo/bar"
    assert run(["git", "config", "--get", "travis.slug"], cwd=git_repo) == "foo/bar"


@pytest.mark.asyncio
async def test_store_slug_rejects_invalid(git_repo: Path) -> None:
    checker, _ = _checker(git_repo)
    with pytest.raises(InvalidSlugError):
        await checker.store_slug("foobar")
    assert await checker.load_slug() is None


@pytest.mark.asyncio
async def test_try_store_slug_reports_error(git_repo: Path) -> None:
    checker, err = _checker(git_repo)
    assert await checker.try_store_slug("foobar") == "foobar"
    assert "Error storing slug" in err.getvalue()
    assert await checker.load_slug() is None


@pytest.mark.asyncio
async def test_detect_branch(git_repo: Path) -> None:
    checker, _ = _checker(git_repo)
    assert await checker.detect_branch() == "master"
    run(["git", "checkout", "-q", "branch1"], cwd=git_repo)
    assert await checker.detect_branch() == "branch1"


@pytest.mark.asyncio
async def test_detect_branch_detached(git_repo: Path) -> None:
    run(["git", "checkout", "-q", "HEAD^"], cwd=git_repo)
    checker, _ = _checker(git_repo)
    with pytest.raises(BranchDetectionError) as excinfo:
        await checker.detect_branch()
    assert excinfo.value.kind == "branch-detection"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("branch", "slug"),
    [
        ("master", "owner/repo"),
        ("branch1", "owner1/repo1"),
        ("branch2", "owner2/repo2"),
        ("branch3", "owner3/repo3"),
    ],
)
async def test_detect_slug_from_branch_remote(git_repo: Path, branch: str, slug: str) -> None:
    run(["git", "checkout", "-q", branch], cwd=git_repo)
    checker, err = _checker(git_repo)
    assert await checker.detect_slug() == slug
    assert slug in err.getvalue()


@pytest.mark.asyncio
async def test_detect_slug_defaults_to_origin_when_detached(git_repo: Path) -> None:
    run(["git", "checkout", "-q", "branch1^"], cwd=git_repo)
    checker, _ = _checker(git_repo)
    assert await checker.detect_slug() == "owner/repo"


@pytest.mark.asyncio
async def test_detect_slug_remote_without_url(git_repo: Path) -> None:
    run(["git", "checkout", "-q", "branchnourl"], cwd=git_repo)
    checker, _ = _checker(git_repo)
    with pytest.raises(SlugDetectionError, match="remote"):
        await checker.detect_slug()


@pytest.mark.asyncio
async def test_detect_slug_url_without_slug(git_repo: Path) -> None:
    run(["git", "checkout", "-q", "branchnotslug"], cwd=git_repo)
    checker, _ = _checker(git_repo)
    with pytest.raises(SlugDetectionError, match="URL"):
        await checker.detect_slug()


@pytest.mark.asyncio
async def test_detect_slug_interactive_confirms(git_repo: Path) -> None:
    checker, err = _checker(git_repo, answers="y\n", interactive=True)
    assert await checker.detect_slug() == "owner/repo"
    assert "is this correct?" in err.getvalue()


@pytest.mark.asyncio
async def test_find_slug_prefers_stored(git_repo: Path) -> None:
    checker, err = _checker(git_repo)
    await checker.store_slug("stored/slug")
    assert await checker.find_slug() == "stored/slug"
    assert err.getvalue() == ""


@pytest.mark.asyncio
async def test_find_slug_detects_when_not_stored(git_repo: Path) -> None:
    checker, _ = _checker(git_repo)
    assert await checker.find_slug() == "owner/repo"


@pytest.mark.asyncio
async def test_confirm_slug_accepted() -> None:
    checker, err = _checker(Path("."), answers="y\n")
    assert await checker.confirm_slug("foo/bar") == "foo/bar"
    assert "foo/bar" in err.getvalue()


@pytest.mark.asyncio
async def test_confirm_slug_asks_again_until_valid() -> None:
    checker, err = _checker(Path("."), answers="n\nfred\nbaz/quux\n")
    assert await checker.confirm_slug("foo/bar") == "baz/quux"
    output = err.getvalue()
    assert output.count("Repository slug (owner/name): |foo/bar| ") == 2
    assert "invalid" in output


@pytest.mark.asyncio
async def test_confirm_slug_input_exhausted() -> None:
    checker, _ = _checker(Path("."), answers="y")
    with pytest.raises(InputExhaustedError, match="The input stream is exhausted."):
        await checker.confirm_slug("foo/bar")


@pytest.mark.asyncio
async def test_remote_url_failure_is_detection_error() -> None:
    git = FakeGit(
        {
            ("symbolic-ref", "-q", "--short", "HEAD"): "master",
            ("config", "--get", "branch.master.remote"): "upstream",
        }
    )
    checker = GitStatusChecker(git, err=io.StringIO())
    with pytest.raises(SlugDetectionError, match="upstream"):
        await checker.detect_slug()


@pytest.mark.asyncio
async def test_resolve_hash_with_fake_runner() -> None:
    git = FakeGit({("rev-parse", "--verify", "v1.0.0"): HEAD_SHA})
    checker = GitStatusChecker(git, err=io.StringIO())
    assert await checker.resolve_hash("v1.0.0") == HEAD_SHA
    assert git.calls == [("rev-parse", "--verify", "v1.0.0")]


@pytest.mark.asyncio
async def test_confirm_slug_highlights_slug_when_colored() -> None:
    checker, err = _checker(Path("."), answers="y\n", interactive=True)
    assert await checker.confirm_slug("foo/bar") == "foo/bar"
    assert "Detected repository as \x1b[33mfoo/bar\x1b[0m is this correct? " in err.getvalue()


@pytest.mark.asyncio
async def test_confirm_slug_plain_when_not_colored() -> None:
    checker, err = _checker(Path("."), answers="y\n")
    await checker.confirm_slug("foo/bar")
    assert err.getvalue() == "Detected repository as foo/bar is this correct? "
