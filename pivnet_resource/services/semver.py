"""Semantic version parsing, comparison and selection of new versions."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any

__all__ = [
    "SemVer",
    "parse_version",
    "compare_versions",
    "sort_versions",
    "new_versions",
]

_VERSION_RE = re.compile(
    r"^v?(0|[1-9]\d*)(?:\.(0|[1-9]\d*))?(?:\.(0|[1-9]\d*))?"
    r"(?:-([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$"
)


@dataclass(frozen=True, slots=True)
class SemVer:
    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()

    def compare(self, other: SemVer) -> int:
        """Return -1, 0 or 1 following semver precedence. Build metadata is ignored."""
        core = _cmp(
            (self.major, self.minor, self.patch),
            (other.major, other.minor, other.patch),
        )
        if core != 0:
            return core

        # A release ranks above any of its prereleases.
        if not self.prerelease or not other.prerelease:
            return _cmp(not self.prerelease, not other.prerelease)

        for mine, theirs in zip(self.prerelease, other.prerelease):
            result = _compare_identifier(mine, theirs)
            if result != 0:
                return result
        return _cmp(len(self.prerelease), len(other.prerelease))


def _cmp(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def _compare_identifier(a: str, b: str) -> int:
    a_num = a.isdigit()
    b_num = b.isdigit()
    if a_num and b_num:
        return _cmp(int(a), int(b))
    # Numeric identifiers have lower precedence than alphanumeric ones.
    if a_num != b_num:
        return -1 if a_num else 1
    return _cmp(a, b)


def parse_version(text: str) -> SemVer | None:
    """Parse ``[v]major[.minor[.patch]][-pre][+build]``; missing parts are 0."""
    m = _VERSION_RE.match(text.strip())
    if m is None:
        return None
    prerelease = tuple(m.group(4).split(".")) if m.group(4) else ()
    return SemVer(
        int(m.group(1)),
        int(m.group(2) or 0),
        int(m.group(3) or 0),
        prerelease,
    )


def compare_versions(a: str, b: str) -> int:
    """Compare two version strings.

    Both parse: semantic-version precedence. Otherwise the raw strings are
    compared lexically.
    """
    left = parse_version(a)
    right = parse_version(b)
    if left is None or right is None:
        return _cmp(a, b)
    return left.compare(right)


def sort_versions(versions: Sequence[str], sort_by: str) -> list[str]:
    """Order versions according to the source's sort policy.

    ``none`` keeps the release service's order untouched. ``semver`` returns
    newest first; equal versions keep their relative order.
    """
    if sort_by != "semver":
        return list(versions)
    return sorted(versions, key=cmp_to_key(compare_versions), reverse=True)


def new_versions(versions: Sequence[str], current: str | None) -> list[str]:
    """Select the versions Concourse should record, oldest first.

    Args:
        versions: Candidate versions, newest first.
        current: The version Concourse last saw, if any.

    Returns:
        ``current`` followed by everything newer. If ``current`` is unset or
        no longer listed, only the newest version.
    """
    if not versions:
        return []
    if current is None or current not in versions:
        return [versions[0]]
    index = list(versions).index(current)
    return list(reversed(versions[: index + 1]))
