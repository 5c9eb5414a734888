import asyncio
import logging
import math
import sys

import click
from click.core import ParameterSource
from rich.markup import escape

from .constants import ORG_URI, PRO_URI, VERSION
from .errors import SlugDetectionError
from .models import StatusOptions, result_state
from .states import is_pending, is_unsuccessful
from .status import travis_status
from .ui import format_status, make_console

logger = logging.getLogger(__name__)

SLUG_DETECTION_HINT = (
    "Can't figure out GitHub repo name. Ensure you're in the repo directory, "
    "or specify the repo name via the -r option (e.g. travis-status -r <owner>/<repo>)"
)

# Value of a bare -b; an explicit branch name is never empty.
_CURRENT_BRANCH = ""
_ENDPOINT_KEY = "travis_status.api_endpoint"


def _parse_wait(value: str | None) -> float:
    if value is None:
        return 0
    wait = float(value)
    if math.isnan(wait) or wait < 0:
        raise ValueError(value)
    return wait


def _apply_endpoint(ctx: click.Context, param: click.Parameter, value: str | bool | None) -> None:
    """Apply -e, --pro, --org and --staging in the order they were given."""
    if not value:
        return
    endpoint = ctx.meta.get(_ENDPOINT_KEY)
    if param.name == "api_endpoint":
        # Options from the command line are processed first; a value from
        # TRAVIS_ENDPOINT only applies when none of them chose an endpoint.
        if endpoint is None or ctx.get_parameter_source(param.name) is ParameterSource.COMMANDLINE:
            endpoint = value
    elif param.name == "pro":
        endpoint = PRO_URI
    elif param.name == "org":
        endpoint = ORG_URI
    elif param.name == "staging":
        endpoint = (endpoint or ORG_URI).replace("api", "api-staging")
    ctx.meta[_ENDPOINT_KEY] = endpoint


def _configure_logging(debug: bool, debug_http: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug or debug_http else logging.WARNING,
        stream=sys.stderr,
        format="%(name)s: %(message)s",
    )
    if not debug_http:
        for name in ("httpx", "httpcore"):
            logging.getLogger(name).setLevel(logging.WARNING)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-i", "--interactive", is_flag=True, default=None, help="be interactive and colorful")
@click.option("-E", "--explode", is_flag=True, hidden=True, help="ignored for compatibility with travis.rb")
@click.option("--skip-version-check", is_flag=True, hidden=True)
@click.option("--skip-completion-check", is_flag=True, hidden=True)
@click.option("-I", "--insecure", is_flag=True, help="do not verify SSL certificate of API endpoint")
@click.option(
    "-e",
    "--api-endpoint",
    metavar="URL",
    envvar="TRAVIS_ENDPOINT",
    callback=_apply_endpoint,
    expose_value=False,
    help="Travis API server to talk to",
)
@click.option(
    "--pro",
    is_flag=True,
    callback=_apply_endpoint,
    expose_value=False,
    help=f"short-cut for --api-endpoint '{PRO_URI}/'",
)
@click.option(
    "--org",
    is_flag=True,
    callback=_apply_endpoint,
    expose_value=False,
    help=f"short-cut for --api-endpoint '{ORG_URI}/'",
)
@click.option("--staging", is_flag=True, callback=_apply_endpoint, expose_value=False, help="talks to staging system")
@click.option("-t", "--token", metavar="ACCESS_TOKEN", envvar="TRAVIS_TOKEN", help="access token to use")
@click.option("--debug", is_flag=True, help="show API requests")
@click.option("--debug-http", is_flag=True, help="show HTTP(S) exchange")
@click.option("-r", "--repo", metavar="SLUG", help="repository to use (will try to detect from current git clone)")
@click.option("-R", "--store-repo", metavar="SLUG", help="like --repo, but remembers value for current directory")
@click.option("-x", "--exit-code", is_flag=True, help="sets the exit code to 1 if the build failed")
@click.option("-q", "--quiet", is_flag=True, help="does not print anything")
@click.option("-p", "--fail-pending", is_flag=True, help="sets the status code to 1 if the build is pending")
@click.option(
    "-b",
    "--branch",
    metavar="[BRANCH]",
    is_flag=False,
    flag_value=_CURRENT_BRANCH,
    default=None,
    help="query latest build for a branch (default: current)",
)
@click.option(
    "-c",
    "--commit",
    metavar="[COMMIT]",
    is_flag=False,
    flag_value="HEAD",
    default=None,
    help="require build to be for a specific commit (default: HEAD)",
)
@click.option(
    "-w",
    "--wait",
    metavar="[TIMEOUT]",
    is_flag=False,
    flag_value="inf",
    default=None,
    help="wait if build is pending (timeout in seconds)",
)
@click.version_option(VERSION, prog_name="travis-status")
@click.pass_context
def main(
    ctx: click.Context,
    interactive: bool | None,
    explode: bool,
    skip_version_check: bool,
    skip_completion_check: bool,
    insecure: bool,
    token: str | None,
    debug: bool,
    debug_http: bool,
    repo: str | None,
    store_repo: str | None,
    exit_code: bool,
    quiet: bool,
    fail_pending: bool,
    branch: str | None,
    commit: str | None,
    wait: str | None,
) -> None:
    """Checks status of the latest build."""
    interactive = bool(interactive) or sys.stdout.isatty()
    out = make_console(sys.stdout, interactive)
    err = make_console(sys.stderr, interactive)
    _configure_logging(debug, debug_http)

    try:
        wait_seconds = _parse_wait(wait)
    except ValueError:
        err.print(f'[red]invalid wait time "{escape(str(wait))}"[/red]')
        raise SystemExit(1)

    options = StatusOptions(
        repo=repo or store_repo,
        store_repo=store_repo,
        branch=True if branch == _CURRENT_BRANCH else branch,
        commit=commit,
        interactive=interactive,
        wait=wait_seconds,
        api_endpoint=ctx.meta.get(_ENDPOINT_KEY),
        token=token,
        verify_ssl=not insecure,
        input=sys.stdin,
        err=sys.stderr,
    )

    try:
        result = asyncio.run(travis_status(options))
    except SlugDetectionError:
        logger.debug("Error detecting repo slug", exc_info=True)
        err.print(f"[red]{escape(SLUG_DETECTION_HINT)}[/red]")
        raise SystemExit(1)
    except Exception as exc:
        logger.debug("Status check failed", exc_info=True)
        err.print(f"[red]{escape(str(exc))}[/red]")
        raise SystemExit(1)

    if not quiet:
        out.print(format_status(result))

    state = result_state(result)
    if (exit_code and is_unsuccessful(state)) or (fail_pending and is_pending(state)):
        raise SystemExit(1)


if __name__ == "__main__":
    main()
