"""Git operations subpackage.

This subpackage provides abstractions over git operations with support for
testing via fakes and dry-run via wrappers.
"""

from patchflow.core.git.abc import CONFLICT_MARKER_PATTERN, CommitInfo, Git
from patchflow.core.git.dry_run import DryRunGit
from patchflow.core.git.real import RealGit

__all__ = [
    "CONFLICT_MARKER_PATTERN",
    "CommitInfo",
    "DryRunGit",
    "Git",
    "RealGit",
]
