"""JSON output for commands that support --json.

Response schemas are pydantic models so the emitted structure is validated;
data goes to stdout through machine_output, human messages stay on stderr.
"""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from patchflow.core.output import machine_output
from patchflow.core.workflow_types import SyncResult


class ErrorResponse(BaseModel):
    model_config = ConfigDict(strict=True)

    error: str
    error_type: str
    exit_code: int = Field(default=1, ge=0, le=255)


class TagReportInfo(BaseModel):
    model_config = ConfigDict(strict=True)

    duplicate_tags: list[list[str]]
    local_only_tags: list[str]
    has_issues: bool


class SyncCommandResponse(BaseModel):
    """JSON response schema for `patchflow sync-branch --json`."""

    model_config = ConfigDict(strict=True)

    branch: str
    classification: str = Field(..., pattern="^(in-sync|ahead|behind|diverged)$")
    local_ref: str
    remote_ref: str
    merge_base: str | None
    force_reset: bool
    orphaned_branches_removed: list[str]
    tags: TagReportInfo | None
    message: str
    dry_run: bool

    @staticmethod
    def from_result(result: SyncResult) -> "SyncCommandResponse":
        tags = None
        if result.tag_report is not None:
            tags = TagReportInfo(
                duplicate_tags=[list(group) for group in result.tag_report.duplicate_tags],
                local_only_tags=list(result.tag_report.local_only_tags),
                has_issues=result.tag_report.has_issues,
            )
        return SyncCommandResponse(
            branch=result.branch,
            classification=result.classification.value,
            local_ref=result.relationship.local_ref,
            remote_ref=result.relationship.remote_ref,
            merge_base=result.relationship.merge_base_ref,
            force_reset=result.force_reset,
            orphaned_branches_removed=list(result.orphaned_branches_removed),
            tags=tags,
            message=result.message,
            dry_run=result.dry_run,
        )


class ForkChainInfo(BaseModel):
    model_config = ConfigDict(strict=True)

    current: str
    upstream: str | None
    root: str | None


class StatusCommandResponse(BaseModel):
    """JSON response schema for `patchflow status --json`.

    Fields that could not be determined (no remote counterpart, no hosting
    access, unreadable version file) are null rather than errors.
    """

    model_config = ConfigDict(strict=True)

    branch: str
    dirty: bool
    remote: str
    base_branch: str
    classification: str | None
    conflict_files: list[str]
    latest_tag: str | None
    version: str | None
    fork_chain: ForkChainInfo | None


def emit_json(data: dict[str, Any]) -> None:
    """Output JSON data to stdout for machine consumption.

    For pydantic models, pass model.model_dump(mode="json").
    """
    machine_output(json.dumps(data, indent=2))


def emit_json_error(error: str, error_type: str, exit_code: int = 1) -> None:
    """Output error as JSON and exit.

    Raises:
        SystemExit: Always, with `exit_code`
    """
    response = ErrorResponse(error=error, error_type=error_type, exit_code=exit_code)
    emit_json(response.model_dump(mode="json"))
    raise SystemExit(exit_code)

