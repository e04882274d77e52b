"""Output utilities for CLI commands with clear intent.

For user_output and machine_output import from patchflow.core.output; this
module re-exports them and adds the rich summary panels.
"""

from rich.panel import Panel
from rich.text import Text

from patchflow.core.output import machine_output, user_output
from patchflow.core.workflow_types import PatchResult, ReleaseResult, SyncResult

__all__ = [
    "format_patch_summary",
    "format_release_summary",
    "format_sync_summary",
    "machine_output",
    "user_output",
]


_CLASSIFICATION_STYLES = {
    "in-sync": "green",
    "ahead": "cyan",
    "behind": "yellow",
    "diverged": "red",
}


def dry_run_prefix(dry_run: bool) -> str:
    return "[DRY RUN] " if dry_run else ""


def format_sync_summary(result: SyncResult) -> Panel:
    status = result.classification.value
    lines: list[Text] = [
        Text(f"Branch: {result.branch}"),
        Text(f"Status: {status}", style=_CLASSIFICATION_STYLES[status]),
    ]
    if result.force_reset:
        lines.append(Text(f"Reset to {result.relationship.remote_ref}", style="yellow"))
    if result.orphaned_branches_removed:
        removed = ", ".join(result.orphaned_branches_removed)
        lines.append(Text(f"Removed orphaned branches: {removed}"))
    if result.tag_report is not None:
        for group in result.tag_report.duplicate_tags:
            lines.append(Text(f"Duplicate tags: {', '.join(group)}", style="yellow"))
        if result.tag_report.local_only_tags:
            local_only = ", ".join(result.tag_report.local_only_tags)
            lines.append(Text(f"Tags missing upstream: {local_only}", style="yellow"))

    title = f"{dry_run_prefix(result.dry_run)}Sync {result.branch}"
    return Panel(Text("\n").join(lines), title=title, padding=(0, 1))


def format_patch_summary(result: PatchResult) -> Panel:
    """Format final summary box for a patch run."""
    lines: list[Text] = []

    if result.committed or result.dry_run:
        branch_line = f"✅ Branch: {result.branch} (base {result.base_branch})"
        lines.append(Text(branch_line, style="green"))
    else:
        lines.append(Text("⚠️  No changes committed", style="yellow"))

    if result.affected_files:
        lines.append(Text(f"📄 Files: {', '.join(result.affected_files)}"))

    for verification in result.verification:
        marker = "✓" if verification.success else "✗"
        style = "green" if verification.success else "yellow"
        lines.append(Text(f"{marker} {verification.command}", style=style))

    if result.issue is not None:
        lines.append(Text(f"📝 Issue: #{result.issue.number} {result.issue.url}", style="blue"))
    elif result.issue_error is not None:
        lines.append(Text(f"⚠️  Issue not created: {result.issue_error}", style="yellow"))

    if result.pr is not None:
        pr = result.pr.pr
        link = pr.url if pr.url is not None else f"#{pr.number}"
        lines.append(Text(f"🔗 PR: {link} -> {result.pr.target_repo.full_name}", style="blue"))

    if result.consolidation is not None:
        if result.consolidation.skipped:
            lines.append(Text(f"Consolidation skipped: {result.consolidation.reason}", style="dim"))
        elif result.consolidation.consolidated_pr is not None:
            merged = ", ".join(f"#{n}" for n in result.consolidation.merged_prs)
            lines.append(
                Text(f"Consolidated into #{result.consolidation.consolidated_pr.number}: {merged}")
            )

    if result.tree.stash_ref is not None:
        restored = "restored" if result.stash_restored else "NOT restored"
        lines.append(Text(f"Stash {result.tree.stash_ref} {restored}", style="dim"))

    title = f"{dry_run_prefix(result.dry_run)}Patch: {result.description}"
    return Panel(Text("\n").join(lines), title=title, border_style="green", padding=(1, 2))


def format_release_summary(result: ReleaseResult) -> Panel:
    """Format final summary box for a release run."""
    lines: list[Text] = [Text(f"Version: {result.current_version} -> {result.new_version}")]

    if result.pr is not None:
        pr = result.pr.pr
        lines.append(Text(f"🔗 PR: {pr.url or f'#{pr.number}'}", style="blue"))
    if result.auto_merge_error is not None:
        lines.append(Text(f"⚠️  Auto-merge failed: {result.auto_merge_error}", style="yellow"))

    if result.tag_created:
        lines.append(Text(f"🏷  Tag {result.tag_ref} pushed", style="green"))
    elif result.merge_timeout:
        lines.append(Text("⏱  Timed out waiting for merge; no tag created", style="yellow"))
    elif not result.dry_run:
        lines.append(Text("Release PR not merged; no tag created", style="yellow"))

    lines.append(Text(f"Pipeline: {result.pipeline_status.value}"))

    ok = result.tag_created or result.dry_run
    title = f"{dry_run_prefix(result.dry_run)}Release {result.tag_ref}"
    return Panel(
        Text("\n").join(lines),
        title=title,
        border_style="green" if ok else "yellow",
        padding=(1, 2),
    )
