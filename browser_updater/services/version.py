"""Version parsing and ordering.

Versions are dotted numeric strings such as ``114.0.5735.199``. Only the
leading dotted-numeric run of a string is significant, so vendor suffixes
like ``115.3.1esr`` compare by their numeric part. Missing trailing
components count as zero.

An absent or unparsable version (product not installed, probe failed) sorts
below every real version, which lets first-time installs proceed.
"""

import re
from enum import Enum
from functools import total_ordering

from packaging.version import InvalidVersion
from packaging.version import Version as _PackagingVersion

_NUMERIC_PREFIX = re.compile(r"^\s*v?(\d+(?:\.\d+)*)")


class Ordering(Enum):
    """Result of comparing two versions."""

    LESS_THAN = -1
    EQUAL = 0
    GREATER_THAN = 1


@total_ordering
class Version:
    """Immutable parsed version."""

    __slots__ = ("_parsed", "_text")

    def __init__(self, text: str) -> None:
        """Parse a dotted numeric version.

        Args:
            text: Version string, optionally with a trailing suffix

        Raises:
            ValueError: If no leading numeric component is present
        """
        match = _NUMERIC_PREFIX.match(text)
        if match is None:
            raise ValueError(f"Not a version: {text!r}")
        try:
            parsed = _PackagingVersion(match.group(1))
        except InvalidVersion as e:
            raise ValueError(f"Not a version: {text!r}") from e
        object.__setattr__(self, "_parsed", parsed)
        object.__setattr__(self, "_text", match.group(1))

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("Version is immutable")

    @property
    def components(self) -> tuple[int, ...]:
        """Numeric components as written."""
        return tuple(self._parsed.release)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._parsed == other._parsed

    def __lt__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._parsed < other._parsed

    def __hash__(self) -> int:
        return hash(self._parsed)

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"Version({self._text!r})"


def parse_version(text: str | None) -> Version | None:
    """Parse a version, returning None for empty or malformed input."""
    if not text:
        return None
    try:
        return Version(text)
    except ValueError:
        return None


def compare(a: Version | None, b: Version | None) -> Ordering:
    """Order two versions, treating None as older than any version.

    Two missing versions are equal.
    """
    if a is None and b is None:
        return Ordering.EQUAL
    if a is None:
        return Ordering.LESS_THAN
    if b is None:
        return Ordering.GREATER_THAN
    if a == b:
        return Ordering.EQUAL
    return Ordering.LESS_THAN if a < b else Ordering.GREATER_THAN
