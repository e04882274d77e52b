"""Parsing of gh CLI output."""

import re
from typing import Any

from patchflow.core.github.types import (
    ForkChain,
    OpenPullRequest,
    PRReference,
    PRState,
    RepoRef,
    WorkflowRun,
)

_PR_URL_RE = re.compile(r"^https?://[^/\s]+/[^/\s]+/[^/\s]+/pull/(\d+)(?:[/?#]\S*)?$")
_PR_NUMBER_RE = re.compile(r"^#?(\d+)$")


def parse_pr_reference(text: str) -> PRReference:
    """Parse what a PR create call answered with.

    Accepts a full PR URL (`https://github.com/owner/repo/pull/123`) or a bare
    number (`123`, `#123`). When the output holds several lines (gh sometimes
    prints warnings first) the last non-empty line is used.

    Raises:
        ValueError: If the text is neither a PR URL nor a number
    """
    lines = [line.strip() for line in text.strip().splitlines() if line.strip()]
    candidate = lines[-1] if lines else ""

    url_match = _PR_URL_RE.match(candidate)
    if url_match is not None:
        return PRReference(number=int(url_match.group(1)), url=candidate)

    number_match = _PR_NUMBER_RE.match(candidate)
    if number_match is not None:
        return PRReference(number=int(number_match.group(1)), url=None)

    msg = f"Could not parse a pull request reference from: {text.strip()!r}"
    raise ValueError(msg)


def parse_issue_number(url: str) -> int:
    """Extract the issue number from `https://github.com/owner/repo/issues/123`."""
    return int(url.strip().rstrip("/").split("/")[-1])


def parse_fork_chain(data: dict[str, Any]) -> ForkChain:
    """Build a ForkChain from a `gh api repos/{owner}/{repo}` payload.

    The API reports the direct parent as `parent` and the root of the fork
    network as `source`; both are absent for a repository that is not a fork.
    """
    current = RepoRef.parse(data["full_name"])
    parent = data.get("parent")
    source = data.get("source")
    upstream = RepoRef.parse(parent["full_name"]) if parent else None
    root = RepoRef.parse(source["full_name"]) if source else upstream
    return ForkChain(current=current, upstream=upstream, root=root)


def parse_pr_state(data: dict[str, Any]) -> PRState:
    state = str(data.get("state", "")).upper()
    if state == "MERGED":
        return "MERGED"
    if state == "CLOSED":
        return "CLOSED"
    return "OPEN"


def parse_workflow_runs(data: list[dict[str, Any]]) -> list[WorkflowRun]:
    return [
        WorkflowRun(
            run_id=str(run["databaseId"]),
            status=run.get("status", ""),
            conclusion=run.get("conclusion") or None,
            branch=run.get("headBranch", ""),
            head_sha=run.get("headSha", ""),
            name=run.get("name", ""),
        )
        for run in data
    ]


def parse_open_prs(data: list[dict[str, Any]]) -> list[OpenPullRequest]:
    prs: list[OpenPullRequest] = []
    for pr in data:
        author = pr.get("author") or {}
        prs.append(
            OpenPullRequest(
                number=pr["number"],
                title=pr.get("title", ""),
                author=author.get("login", ""),
                head_branch=pr.get("headRefName", ""),
                base_branch=pr.get("baseRefName", ""),
                files=frozenset(f["path"] for f in pr.get("files") or []),
            )
        )
    return prs
