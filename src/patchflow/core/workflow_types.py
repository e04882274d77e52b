"""Value objects shared by the patchflow workflows.

All of these are single-invocation scoped: created by the workflow run that
needs them and never shared between runs.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from patchflow.core.errors import MissingParameterError
from patchflow.core.github.types import (
    CreateIssueResult,
    ForkChain,
    ForkTarget,
    PRReference,
    RepoRef,
)
from patchflow.core.semver import BumpType, Version

PatchOperation = Callable[[], None]


class Priority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class SyncClassification(Enum):
    IN_SYNC = "in-sync"
    AHEAD = "ahead"
    BEHIND = "behind"
    DIVERGED = "diverged"


class ConsolidationStrategy(Enum):
    COMPATIBLE = "compatible"
    SAME_AUTHOR = "same-author"
    ALL = "all"


class RollbackType(Enum):
    LAST_COMMIT = "last-commit"
    PREVIOUS_BRANCH = "previous-branch"
    SPECIFIC_COMMIT = "specific-commit"


class PipelineStatus(Enum):
    UNKNOWN = "unknown"
    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class WorkingTreeState:
    """Dirty flag observed at workflow entry plus the stash label, if any."""

    dirty: bool
    stash_ref: str | None = None


@dataclass(frozen=True)
class RepoIdentity:
    owner: str
    name: str
    remote: str
    fork_chain: ForkChain


@dataclass(frozen=True)
class BranchRelationship:
    local_ref: str
    remote_ref: str
    merge_base_ref: str | None
    classification: SyncClassification


@dataclass(frozen=True)
class TagReport:
    """Tag validation findings.

    duplicate_tags groups local tag names that differ only by case.
    """

    duplicate_tags: tuple[tuple[str, ...], ...] = ()
    local_only_tags: tuple[str, ...] = ()

    @property
    def has_issues(self) -> bool:
        return bool(self.duplicate_tags or self.local_only_tags)


@dataclass(frozen=True)
class SyncResult:
    branch: str
    relationship: BranchRelationship
    force_reset: bool
    orphaned_branches_removed: tuple[str, ...]
    tag_report: TagReport | None
    message: str
    dry_run: bool = False

    @property
    def classification(self) -> SyncClassification:
        return self.relationship.classification


@dataclass(frozen=True)
class PatchRequest:
    """Everything one patch workflow run needs to know up front.

    Frozen: issue and PR references produced during the run accumulate on the
    PatchResult instead.
    """

    description: str
    operation: PatchOperation | None = None
    priority: Priority = Priority.MEDIUM
    affected_files: frozenset[str] = frozenset()
    test_commands: tuple[str, ...] = ()
    base_branch: str | None = None
    branch_name: str | None = None
    dry_run: bool = False
    create_issue: bool = True
    issue_best_effort: bool = False
    create_pr: bool = False
    target_fork: ForkTarget = ForkTarget.CURRENT
    auto_consolidate: bool = False
    consolidation_strategy: ConsolidationStrategy = ConsolidationStrategy.COMPATIBLE
    force: bool = False
    draft: bool = False


@dataclass(frozen=True)
class VerificationResult:
    command: str
    success: bool
    exit_code: int
    output: str = ""


@dataclass(frozen=True)
class PRResult:
    pr: PRReference
    target_repo: RepoRef
    head_ref: str
    base_branch: str


@dataclass(frozen=True)
class ConsolidationOutcome:
    skipped: bool
    reason: str = ""
    consolidated_pr: PRReference | None = None
    merged_prs: tuple[int, ...] = ()
    conflicting_prs: tuple[int, ...] = ()

    @staticmethod
    def skip(reason: str) -> "ConsolidationOutcome":
        return ConsolidationOutcome(skipped=True, reason=reason)


@dataclass(frozen=True)
class PatchResult:
    description: str
    branch: str
    base_branch: str
    dry_run: bool
    tree: WorkingTreeState
    stash_restored: bool
    committed: bool
    affected_files: tuple[str, ...] = ()
    verification: tuple[VerificationResult, ...] = ()
    issue: CreateIssueResult | None = None
    issue_error: str | None = None
    pr: PRResult | None = None
    consolidation: ConsolidationOutcome | None = None

    @property
    def verification_passed(self) -> bool:
        return all(v.success for v in self.verification)


@dataclass(frozen=True)
class RollbackPlan:
    """What to roll back to.

    target_ref is required for SPECIFIC_COMMIT and ignored otherwise.
    """

    type: RollbackType
    target_ref: str | None = None
    backup_ref: str | None = None

    def __post_init__(self) -> None:
        if self.type is RollbackType.SPECIFIC_COMMIT and not self.target_ref:
            raise MissingParameterError(
                "commit_hash", "a specific-commit rollback needs a target commit"
            )


@dataclass(frozen=True)
class RollbackResult:
    plan: RollbackPlan
    dry_run: bool
    performed: bool
    previous_head: str | None
    new_head: str | None = None
    stash_ref: str | None = None
    backup_warning: str | None = None


@dataclass(frozen=True)
class ReleaseRequest:
    """Exactly one of bump_type / explicit_version must be set."""

    description: str
    bump_type: BumpType | None = None
    explicit_version: str | None = None
    wait_for_merge: bool = True
    auto_merge: bool = False
    max_wait_minutes: float = 30
    dry_run: bool = False
    force: bool = True

    def __post_init__(self) -> None:
        if (self.bump_type is None) == (self.explicit_version is None):
            raise MissingParameterError(
                "bump", "pass exactly one of a bump type or an explicit version"
            )


@dataclass(frozen=True)
class ReleaseResult:
    current_version: Version
    new_version: Version
    tag_ref: str
    dry_run: bool
    pr: PRResult | None = None
    pr_merged: bool = False
    merge_timeout: bool = False
    tag_created: bool = False
    auto_merge_error: str | None = None
    pipeline_status: PipelineStatus = PipelineStatus.UNKNOWN
    notes: tuple[str, ...] = field(default_factory=tuple)
