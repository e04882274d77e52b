"""Semantic version parsing and bumping for release workflows."""

import re
from enum import Enum
from pathlib import Path
from typing import NamedTuple

from patchflow.core.errors import InvalidVersionError

_VERSION_RE = re.compile(r"^v?(\d+)\.(\d+)\.(\d+)$")


class BumpType(Enum):
    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"


class Version(NamedTuple):
    """A MAJOR.MINOR.PATCH triple."""

    major: int
    minor: int
    patch: int

    @staticmethod
    def parse(text: str) -> "Version":
        """Parse `1.2.3` (optionally `v1.2.3`), raising InvalidVersionError otherwise."""
        match = _VERSION_RE.match(text.strip())
        if match is None:
            raise InvalidVersionError(text.strip())
        return Version(int(match.group(1)), int(match.group(2)), int(match.group(3)))

    def bump(self, bump_type: BumpType) -> "Version":
        if bump_type is BumpType.MAJOR:
            return Version(self.major + 1, 0, 0)
        if bump_type is BumpType.MINOR:
            return Version(self.major, self.minor + 1, 0)
        return Version(self.major, self.minor, self.patch + 1)

    @property
    def tag(self) -> str:
        return f"v{self}"

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def read_version_file(path: Path) -> Version:
    """Read the bare version triple stored in the version file."""
    if not path.exists():
        raise InvalidVersionError(f"<missing {path.name}>")
    return Version.parse(path.read_text(encoding="utf-8"))


def write_version_file(path: Path, version: Version) -> None:
    path.write_text(f"{version}\n", encoding="utf-8")
