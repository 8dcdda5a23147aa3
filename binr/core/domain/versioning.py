"""
L1 Domain — Semantic version parsing and ordering (pure).

Parses ``vMAJOR.MINOR.PATCH[-prerelease][+build]`` strings and orders
them by semver precedence. No I/O.

The leading ``v`` is optional, and short forms (``v1``, ``v1.2``) are
accepted and padded with zeros. Build metadata is kept for display but
ignored when comparing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import total_ordering

from binr.core.errors import InvalidArgumentError

_SEMVER_RE = re.compile(
    r"^v?(?P<major>\d+)"
    r"(?:\.(?P<minor>\d+))?"
    r"(?:\.(?P<patch>\d+))?"
    r"(?:-(?P<pre>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


@total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """A parsed semantic version."""

    major: int
    minor: int = 0
    patch: int = 0
    prerelease: tuple[str, ...] = ()
    build: str = ""
    original: str = field(default="", compare=False)

    def _key(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() == other._key() and self.prerelease == other.prerelease

    def __hash__(self) -> int:
        return hash((self._key(), self.prerelease))

    def __lt__(self, other: Version) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        if self._key() != other._key():
            return self._key() < other._key()
        return _prerelease_lt(self.prerelease, other.prerelease)

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        if self.build:
            text += "+" + self.build
        return text


def _prerelease_lt(left: tuple[str, ...], right: tuple[str, ...]) -> bool:
    """Semver rule 11: a release outranks any of its pre-releases."""
    if left == right:
        return False
    if not left:
        return False
    if not right:
        return True

    for a, b in zip(left, right):
        if a == b:
            continue
        a_num, b_num = a.isdigit(), b.isdigit()
        if a_num and b_num:
            return int(a) < int(b)
        if a_num != b_num:
            # Numeric identifiers sort before alphanumeric ones
            return a_num
        return a < b

    return len(left) < len(right)


def parse_version(text: str) -> Version:
    """Parse a version string.

    Raises:
        InvalidArgumentError: If ``text`` is not a semantic version.
    """
    match = _SEMVER_RE.match(text or "")
    if match is None:
        raise InvalidArgumentError(
            f"{text!r} is not a valid semantic version (ex: v1.2.3)"
        )
    pre = match.group("pre")
    return Version(
        major=int(match.group("major")),
        minor=int(match.group("minor") or 0),
        patch=int(match.group("patch") or 0),
        prerelease=tuple(pre.split(".")) if pre else (),
        build=match.group("build") or "",
        original=text,
    )


def is_valid_version(text: str) -> bool:
    """Check whether ``text`` parses as a semantic version."""
    return _SEMVER_RE.match(text or "") is not None


def compare_versions(left: str, right: str) -> int:
    """Compare two version strings.

    Returns:
        -1, 0 or 1 as ``left`` is lower, equal or higher than ``right``.
    """
    a, b = parse_version(left), parse_version(right)
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def highest(versions: list[Version]) -> Version | None:
    """Return the highest version, or None for an empty list."""
    return max(versions) if versions else None
