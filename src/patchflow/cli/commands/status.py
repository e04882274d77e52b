"""Status command implementation."""

import logging

import click

from patchflow.cli.ensure import Ensure, workflow_errors
from patchflow.cli.json_output import ForkChainInfo, StatusCommandResponse, emit_json
from patchflow.cli.output import user_output
from patchflow.core.context import PatchflowContext
from patchflow.core.errors import IdentityResolutionError, InvalidVersionError, PreconditionError
from patchflow.core.inspector import RepositoryInspector
from patchflow.core.semver import read_version_file

logger = logging.getLogger(__name__)


def collect_status(ctx: PatchflowContext) -> StatusCommandResponse:
    """Gather repository status without fetching or touching the hosting service's state."""
    inspector = RepositoryInspector(ctx)
    git = ctx.git
    root = ctx.repo_root

    branch = inspector.current_branch()

    classification: str | None = None
    try:
        classification = inspector.relationship(branch).classification.value
    except PreconditionError as e:
        logger.debug("No classification for %s: %s", branch, e)

    version: str | None = None
    try:
        version = str(read_version_file(root / ctx.config.version_file))
    except InvalidVersionError as e:
        logger.debug("Version unavailable: %s", e)

    fork_chain: ForkChainInfo | None = None
    try:
        chain = inspector.fork_chain()
    except IdentityResolutionError as e:
        logger.debug("Fork chain unavailable: %s", e)
    else:
        fork_chain = ForkChainInfo(
            current=chain.current.full_name,
            upstream=chain.upstream.full_name if chain.upstream is not None else None,
            root=chain.root.full_name if chain.root is not None else None,
        )

    return StatusCommandResponse(
        branch=branch,
        dirty=inspector.is_dirty(),
        remote=ctx.config.remote,
        base_branch=ctx.config.base_branch,
        classification=classification,
        conflict_files=git.find_conflict_markers(root),
        latest_tag=git.get_latest_tag(root),
        version=version,
        fork_chain=fork_chain,
    )


def _render(status: StatusCommandResponse) -> None:
    user_output(click.style(f"On branch {status.branch}", bold=True))
    if status.classification is None:
        user_output(f"  No {status.remote}/{status.branch} counterpart")
    else:
        user_output(f"  {status.classification} relative to {status.remote}/{status.branch}")

    if status.dirty:
        user_output(click.style("  Uncommitted changes present", fg="yellow"))
    else:
        user_output("  Working tree clean")

    for path in status.conflict_files:
        user_output(click.style(f"  Conflict markers: {path}", fg="red"))

    latest = status.latest_tag or "none"
    user_output(f"Version: {status.version or 'unknown'} (latest tag: {latest})")

    if status.fork_chain is not None:
        chain = status.fork_chain
        user_output(f"Repository: {chain.current}")
        if chain.upstream is not None:
            user_output(f"  upstream: {chain.upstream}")
        if chain.root is not None and chain.root != chain.upstream:
            user_output(f"  root: {chain.root}")


@click.command("status")
@click.option("--json", "as_json", is_flag=True, help="Output status as JSON.")
@click.pass_obj
def status_cmd(ctx: PatchflowContext, as_json: bool) -> None:
    """Show branch, working tree, version and fork information.

    Uses only already-fetched remote refs; run sync-branch to refresh them.
    """
    Ensure.in_repo(ctx)
    with workflow_errors(as_json=as_json):
        status = collect_status(ctx)

    if as_json:
        emit_json(status.model_dump(mode="json"))
        return
    _render(status)
