"""Travis CI build states."""

from .models import StatusResult

# Same classification as the travis.rb client (lib/travis/client/states.rb).
PENDING_STATES = frozenset({"created", "queued", "received", "started"})
UNSUCCESSFUL_STATES = frozenset({"canceled", "errored", "failed"})

STATE_COLORS = {
    "canceled": "red",
    "created": "yellow",
    "errored": "red",
    "failed": "red",
    "passed": "green",
    "queued": "yellow",
    "ready": "green",
    "received": "yellow",
    "started": "yellow",
}
DEFAULT_COLOR = "yellow"


def is_pending(state: str | None) -> bool:
    return state in PENDING_STATES


def is_unsuccessful(state: str | None) -> bool:
    return state in UNSUCCESSFUL_STATES


def state_color(state: str | None) -> str:
    return STATE_COLORS.get(state or "", DEFAULT_COLOR)


def repo_is_pending(repo: StatusResult) -> bool:
    return is_pending(repo["repo"]["last_build_state"])


def branch_is_pending(branch: StatusResult) -> bool:
    return is_pending(branch["branch"]["state"])


def build_is_pending(build: StatusResult) -> bool:
    return is_pending(build["build"]["state"])
