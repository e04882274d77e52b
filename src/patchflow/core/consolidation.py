"""Consolidation of open pull requests into a single reviewable PR.

Candidates are merged one by one into `consolidated/pr-<n>` cut from the
remote base branch; a candidate that conflicts is skipped, not fatal. The
merged source PRs are closed with a pointer to the consolidated PR.
"""

import logging
from collections.abc import Iterable

from patchflow.core.context import PatchflowContext
from patchflow.core.errors import PRCreationFailure, PushFailure
from patchflow.core.github.parsing import parse_pr_reference
from patchflow.core.github.types import OpenPullRequest
from patchflow.core.inspector import RepositoryInspector
from patchflow.core.workflow_types import ConsolidationOutcome, ConsolidationStrategy, PRResult

logger = logging.getLogger(__name__)


def select_candidates(
    new_pr_number: int,
    new_files: Iterable[str],
    open_prs: list[OpenPullRequest],
    strategy: ConsolidationStrategy,
) -> list[OpenPullRequest]:
    """Pick the open PRs that may be consolidated with the new one.

    COMPATIBLE keeps PRs whose files overlap neither the new PR nor any PR
    already selected. SAME_AUTHOR keeps PRs by the new PR's author. ALL keeps
    every other open PR.
    """
    others = [pr for pr in open_prs if pr.number != new_pr_number]

    if strategy is ConsolidationStrategy.ALL:
        return others

    if strategy is ConsolidationStrategy.SAME_AUTHOR:
        author = next((pr.author for pr in open_prs if pr.number == new_pr_number), None)
        if author is None:
            return []
        return [pr for pr in others if pr.author == author]

    claimed = set(new_files)
    selected: list[OpenPullRequest] = []
    for pr in others:
        if pr.files & claimed:
            continue
        selected.append(pr)
        claimed |= pr.files
    return selected


class PRConsolidator:
    def __init__(self, ctx: PatchflowContext, inspector: RepositoryInspector | None = None) -> None:
        self._ctx = ctx
        self._inspector = inspector if inspector is not None else RepositoryInspector(ctx)

    def consolidate(
        self,
        new_pr: PRResult,
        new_files: Iterable[str],
        strategy: ConsolidationStrategy,
    ) -> ConsolidationOutcome:
        """Merge compatible open PRs together with `new_pr` into one consolidated PR.

        Raises:
            RuntimeError, PatchflowError: Backend failures; callers treat
                consolidation as best effort
        """
        ctx = self._ctx
        git = ctx.git
        root = ctx.repo_root
        remote = ctx.config.remote
        base = new_pr.base_branch
        repo = new_pr.target_repo

        if repo != self._inspector.fork_chain().current:
            return ConsolidationOutcome.skip(
                f"PR targets {repo.full_name}; only PRs on the current repository are consolidated"
            )

        open_prs = ctx.github.list_open_prs(root, repo, base=base)
        candidates = select_candidates(new_pr.pr.number, new_files, open_prs, strategy)
        if not candidates:
            return ConsolidationOutcome.skip(f"no {strategy.value} open PRs to consolidate")

        original_branch = git.get_current_branch(root)
        branch = f"consolidated/pr-{new_pr.pr.number}"
        git.fetch(root, remote)
        git.create_branch(root, branch, f"{remote}/{base}")

        try:
            merged: list[int] = []
            conflicting: list[int] = []
            sources = [(new_pr.pr.number, new_pr.head_ref)]
            sources.extend((pr.number, pr.head_branch) for pr in candidates)
            for number, head in sources:
                ref = f"{remote}/{head}"
                if git.rev_parse(root, ref) is None:
                    logger.debug("Skipping PR #%d: %s not available locally", number, ref)
                    conflicting.append(number)
                    continue
                if git.merge_ref(root, ref, f"Consolidate #{number} ({head})"):
                    merged.append(number)
                else:
                    ctx.feedback.warning(f"PR #{number} conflicts; leaving it out")
                    conflicting.append(number)

            if len(merged) < 2:
                self._abandon(branch, original_branch)
                return ConsolidationOutcome(
                    skipped=True,
                    reason="no candidate merged cleanly",
                    conflicting_prs=tuple(conflicting),
                )

            try:
                git.push_branch(root, remote, branch, set_upstream=True)
            except RuntimeError as e:
                raise PushFailure(str(e)) from e

            listing = "\n".join(f"- #{n}" for n in merged)
            try:
                raw = ctx.github.create_pr(
                    root,
                    repo=repo,
                    head=branch,
                    base=base,
                    title=f"Consolidated: {len(merged)} patches",
                    body=f"Consolidates:\n{listing}",
                )
                consolidated = parse_pr_reference(raw)
            except (RuntimeError, ValueError) as e:
                raise PRCreationFailure(f"Could not create consolidated PR: {e}") from e

            for number in merged:
                ctx.github.close_pr(
                    root, repo, number, comment=f"Consolidated into #{consolidated.number}"
                )
        finally:
            if original_branch is not None and git.get_current_branch(root) != original_branch:
                git.checkout_branch(root, original_branch)

        return ConsolidationOutcome(
            skipped=False,
            consolidated_pr=consolidated,
            merged_prs=tuple(merged),
            conflicting_prs=tuple(conflicting),
        )

    def _abandon(self, branch: str, original_branch: str | None) -> None:
        git = self._ctx.git
        root = self._ctx.repo_root
        if original_branch is not None:
            git.checkout_branch(root, original_branch)
        git.delete_branch(root, branch, force=True)
