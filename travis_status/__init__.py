"""Check the Travis CI build status of a GitHub repository."""

from . import errors
from .constants import VERSION
from .git_status import GitStatusChecker
from .models import LocalCommit, QueryOptions, StatusOptions
from .status import check_build_commit, travis_status
from .travis_checker import TravisStatusChecker

ORG_URI = TravisStatusChecker.ORG_URI
PRO_URI = TravisStatusChecker.PRO_URI

__version__ = VERSION

__all__ = [
    "GitStatusChecker",
    "LocalCommit",
    "ORG_URI",
    "PRO_URI",
    "QueryOptions",
    "StatusOptions",
    "TravisStatusChecker",
    "check_build_commit",
    "errors",
    "travis_status",
]
