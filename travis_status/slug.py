"""Repository slug validation and extraction from git remote URLs."""

import re
from urllib.parse import urlsplit

from .errors import SLUG_INVALID, InvalidSlugError

# travis.rb only checks for a "/". GitHub only allows ASCII letters, digits,
# "." and "-". Reject what would change the URL or is likely a typo.
SLUG_VALID_RE = re.compile(r"^[^\s/]+/[^\s/]+\Z")

_TRANSPORT_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9+.-]*::")
_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:")
_SCP_RE = re.compile(r"^(?P<user>[^@/]+)@(?P<host>\[[^\]/]+\]|[^:/]+):(?P<path>.*)$")
_SLUG_IN_PATH_RE = re.compile(r"(?P<slug>[^/]+/[^/]+?)(?:/?\.git)?$")


def is_valid_slug(slug: str) -> bool:
    return SLUG_VALID_RE.match(slug) is not None


def check_slug_format(slug: str) -> str:
    """Return ``slug`` unchanged or raise InvalidSlugError."""
    if not isinstance(slug, str) or not is_valid_slug(slug):
        raise InvalidSlugError(slug, SLUG_INVALID)
    return slug


def git_url_pathname(git_url: str) -> str:
    """Return the path portion of a git remote URL.

    Handles ``<transport>::<address>`` remote-helper URLs, regular URLs,
    SCP-like ``user@host:path`` addresses and plain local paths.
    """
    git_url = _TRANSPORT_RE.sub("", git_url, count=1)

    if _SCHEME_RE.match(git_url):
        try:
            return urlsplit(git_url).path
        except ValueError:
            pass

    scp = _SCP_RE.match(git_url)
    if scp:
        return scp.group("path")

    return git_url


def slug_from_url(git_url: str) -> str | None:
    """Extract ``owner/repo`` from the end of a git remote URL."""
    match = _SLUG_IN_PATH_RE.search(git_url_pathname(git_url))
    if match is None:
        return None
    return match.group("slug")
