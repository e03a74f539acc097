"""
Semantic version helpers shared by the catalog model and the templates.

Precedence always ignores build metadata: two versions that differ only in
their build component compare equal, and callers that need a total order over
a bundle set must reject such pairs up front.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cmp_to_key, total_ordering

import semver


def parse_version(value: str) -> semver.Version:
    """Parse a strict semantic version string (no leading ``v``)."""
    return semver.Version.parse(value)


def strip_build_metadata(version: semver.Version) -> semver.Version:
    """Return ``version`` without its build component."""
    return version.replace(build=None)


def compare_versions(left: semver.Version, right: semver.Version) -> int:
    """Three-way compare by semver precedence, ignoring build metadata."""
    return strip_build_metadata(left).compare(strip_build_metadata(right))


version_sort_key = cmp_to_key(compare_versions)


def major_minor(version: semver.Version) -> tuple[int, int]:
    return (version.major, version.minor)


def _compare_release(left: str | None, right: str | None) -> int:
    if left == right:
        return 0
    # A bundle without a release qualifier precedes any re-release of it.
    if left is None:
        return -1
    if right is None:
        return 1
    # Release qualifiers follow pre-release identifier ordering rules.
    return semver.Version(0, 0, 0, prerelease=left).compare(semver.Version(0, 0, 0, prerelease=right))


@total_ordering
@dataclass(frozen=True)
class CompositeVersion:
    """Bundle version combined with its optional release qualifier."""

    version: semver.Version
    release: str | None = None

    def compare(self, other: CompositeVersion) -> int:
        result = compare_versions(self.version, other.version)
        if result != 0:
            return result
        return _compare_release(self.release, other.release)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CompositeVersion):
            return NotImplemented
        return self.compare(other) == 0

    def __lt__(self, other: CompositeVersion) -> bool:
        return self.compare(other) < 0

    def __hash__(self) -> int:
        return hash((str(strip_build_metadata(self.version)), self.release))

    def __str__(self) -> str:
        if self.release:
            return f"{self.version}~{self.release}"
        return str(self.version)
