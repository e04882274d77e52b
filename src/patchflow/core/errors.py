"""Error taxonomy for patchflow workflows.

Every fatal condition a workflow can surface is a subclass of PatchflowError
tagged with an ErrorKind. The CLI boundary catches PatchflowError, prints a
styled message and exits non-zero.

Kinds:
- PRECONDITION: rejected before any mutation (no branch, bad commit hash, ...)
- BACKEND_FAILURE: a git command exited non-zero; the message is kept intact
- CONFLICT: unresolved merge markers block the whole workflow
- OPERATION: the caller-supplied patch operation raised
- REMOTE_COORDINATION: issue/PR creation or identity lookup on the host failed

There is no timeout error: a release PR that never merges is reported
through ReleaseResult.merge_timeout, not raised.
"""

from collections.abc import Iterable
from enum import Enum


class ErrorKind(Enum):
    PRECONDITION = "precondition"
    BACKEND_FAILURE = "backend_failure"
    CONFLICT = "conflict"
    OPERATION = "operation"
    REMOTE_COORDINATION = "remote_coordination"


class PatchflowError(Exception):
    """Base class for all workflow errors surfaced to callers."""

    kind: ErrorKind = ErrorKind.PRECONDITION


# ============================================================================
# Preconditions
# ============================================================================


class PreconditionError(PatchflowError):
    kind = ErrorKind.PRECONDITION


class NoCurrentBranchError(PreconditionError):
    def __init__(self) -> None:
        super().__init__("No current branch (detached HEAD or not a git repository)")


class MissingParameterError(PreconditionError):
    def __init__(self, parameter: str, reason: str) -> None:
        self.parameter = parameter
        super().__init__(f"Missing required parameter '{parameter}': {reason}")


class InvalidCommitHashError(PreconditionError):
    def __init__(self, ref: str) -> None:
        self.ref = ref
        super().__init__(f"'{ref}' does not resolve to a commit")


class InvalidVersionError(PreconditionError):
    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"'{value}' is not a semantic version (expected MAJOR.MINOR.PATCH)")


class UnknownRemoteBranchError(PreconditionError):
    def __init__(self, remote_ref: str) -> None:
        self.remote_ref = remote_ref
        super().__init__(f"Remote branch '{remote_ref}' does not exist")


class TargetForkUnavailableError(PreconditionError):
    def __init__(self, target: str, current: str) -> None:
        self.target = target
        super().__init__(f"Repository {current} has no {target} fork to target")


class TagExistsError(PreconditionError):
    def __init__(self, tag: str) -> None:
        self.tag = tag
        super().__init__(f"Tag '{tag}' already exists")


# ============================================================================
# Backend failures
# ============================================================================


class BackendFailure(PatchflowError):
    kind = ErrorKind.BACKEND_FAILURE


class FetchFailure(BackendFailure):
    pass


class PushFailure(BackendFailure):
    pass


# ============================================================================
# Conflicts
# ============================================================================


class ConflictDetected(PatchflowError):
    kind = ErrorKind.CONFLICT


class MergeConflictsDetected(ConflictDetected):
    def __init__(self, files: Iterable[str]) -> None:
        self.files = tuple(sorted(files))
        listing = "\n".join(f"  - {f}" for f in self.files)
        super().__init__(f"Unresolved merge conflict markers found in:\n{listing}")


# ============================================================================
# Operation
# ============================================================================


class PatchOperationFailed(PatchflowError):
    kind = ErrorKind.OPERATION

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"Patch operation failed: {cause}")


# ============================================================================
# Remote coordination
# ============================================================================


class RemoteCoordinationFailure(PatchflowError):
    kind = ErrorKind.REMOTE_COORDINATION


class IssueCreationFailure(RemoteCoordinationFailure):
    pass


class PRCreationFailure(RemoteCoordinationFailure):
    pass


class IdentityResolutionError(RemoteCoordinationFailure):
    pass
