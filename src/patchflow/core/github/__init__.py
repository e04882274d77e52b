"""GitHub operations subpackage (gh CLI backed)."""

from patchflow.core.github.abc import GitHub
from patchflow.core.github.dry_run import DryRunGitHub
from patchflow.core.github.real import RealGitHub
from patchflow.core.github.types import ForkChain, ForkTarget, PRReference, RepoRef

__all__ = [
    "DryRunGitHub",
    "ForkChain",
    "ForkTarget",
    "GitHub",
    "PRReference",
    "RealGitHub",
    "RepoRef",
]
