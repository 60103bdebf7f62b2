# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Version model and ordering for pkgboot.

This module is format-agnostic: it does NOT talk to registries or touch
files. It parses the version strings registries publish and orders them.

Version strings look like ``major.minor.patch[.build][-tag[.prebuild]]``
(``+`` is accepted in place of ``-``). Parsing never fails: missing or
malformed numeric components become 0, and a qualifier whose first segment
is not ``letters[digits]`` simply carries no pre-release tag.

Ordering rules (first difference wins):

1. major, minor, patch (integers)
2. build (numeric when both sides are digits, else text)
3. final release outranks any tagged pre-release
4. tag name, then a bare tag ("beta") outranks a numbered one ("beta3"),
   then tag numbers numerically
5. pre-release build (numeric when both sides are digits, else text)

Wherever a segment is compared "numeric, else text", digit-only values sort
below textual ones, and two digit strings with the same value ("01" and "1")
fall back to their text so the order stays total and matches equality.

Example:
    >>> from pkgboot.versioning.semver import Version
    >>> Version.parse("1.2.3") > Version.parse("1.2.3-beta")
    True
    >>> Version.parse("1.0.0-rc.2") < Version.parse("1.0.0-rc.10")
    True
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
import functools
import re

_TAG_RE = re.compile(r"(?P<name>[A-Za-z]+)(?P<number>[0-9]*)")
_DIGITS_RE = re.compile(r"[0-9]+")
_QUALIFIER_SEP = re.compile(r"[-+]")

DEFAULT_BUILD = "0"


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def _as_int(text: str) -> int | None:
    """Return the integer value of an ASCII digit string, else None."""
    if _DIGITS_RE.fullmatch(text):
        return int(text)
    return None


def _compare_segments(a: str, b: str) -> int:
    """Compare build-like segments: numeric if both are digits, else text."""
    if a == b:
        return 0
    ia, ib = _as_int(a), _as_int(b)
    if ia is not None and ib is not None:
        return _cmp(ia, ib) or _cmp(a, b)
    if ia is not None:
        return -1
    if ib is not None:
        return 1
    return _cmp(a, b)


@dataclass(frozen=True)
class PreReleaseTag:
    """Pre-release qualifier such as ``alpha``, ``beta3`` or ``rc``.

    Attributes:
        name: Alphabetic label (e.g., "beta").
        number: Optional numeric suffix (3 for "beta3"), None if absent.
        origin: Raw text the tag was parsed from (not compared).
    """

    name: str
    number: int | None = None
    origin: str = field(default="", compare=False)

    @classmethod
    def parse(cls, text: str) -> PreReleaseTag | None:
        """Parse ``letters[digits]``; returns None when text does not match."""
        m = _TAG_RE.fullmatch(text)
        if not m:
            return None
        digits = m.group("number")
        return cls(
            name=m.group("name"),
            number=int(digits) if digits else None,
            origin=text,
        )

    def compare(self, other: PreReleaseTag) -> int:
        """Compare two tags, returning -1, 0 or 1."""
        if self.name != other.name:
            return _cmp(self.name, other.name)
        if self.number is None and other.number is not None:
            return 1
        if self.number is not None and other.number is None:
            return -1
        if self.number is None:
            return 0
        return _cmp(self.number, other.number)

    def __str__(self) -> str:
        return self.origin or f"{self.name}{'' if self.number is None else self.number}"


def _int_or_zero(parts: list[str], index: int) -> int:
    if index >= len(parts):
        return 0
    value = _as_int(parts[index])
    return 0 if value is None else value


@functools.total_ordering
@dataclass(frozen=True)
class Version:
    """A parsed version string.

    Two versions are equal when major, minor, patch, build, pre_release and
    pre_release_build are equal. ``original`` is kept for reporting only.

    Attributes:
        major: Major component.
        minor: Minor component.
        patch: Patch component.
        build: Fourth dotted component, kept as text ("0" if absent).
        pre_release: Pre-release tag, None for a final release.
        pre_release_build: Segment after the tag ("0" if absent).
        original: The exact text that was parsed.
    """

    major: int = 0
    minor: int = 0
    patch: int = 0
    build: str = DEFAULT_BUILD
    pre_release: PreReleaseTag | None = None
    pre_release_build: str = DEFAULT_BUILD
    original: str = field(default="", compare=False)

    @classmethod
    def parse(cls, raw: str) -> Version:
        """Parse a version string. Never raises.

        Args:
            raw: Version text as published by a registry (e.g., "5.2.1-rc.3").

        Returns:
            The parsed Version; unparseable components default to zero.
        """
        prefix, _, qualifier = _split_qualifier(raw)
        parts = prefix.split(".")

        pre_release = None
        pre_release_build = DEFAULT_BUILD
        if qualifier is not None:
            segments = qualifier.split(".")
            pre_release = PreReleaseTag.parse(segments[0])
            if len(segments) > 1:
                pre_release_build = segments[1]

        return cls(
            major=_int_or_zero(parts, 0),
            minor=_int_or_zero(parts, 1),
            patch=_int_or_zero(parts, 2),
            build=parts[3] if len(parts) > 3 else DEFAULT_BUILD,
            pre_release=pre_release,
            pre_release_build=pre_release_build,
            original=raw,
        )

    @property
    def is_prerelease(self) -> bool:
        """True when the version carries any qualifier after ``-`` or ``+``."""
        if self.pre_release is not None or self.pre_release_build != DEFAULT_BUILD:
            return True
        return _QUALIFIER_SEP.search(self.original) is not None

    def compare(self, other: Version) -> int:
        """Compare with another version, returning -1, 0 or 1."""
        for comparator in _COMPARATORS:
            result = comparator(self, other)
            if result:
                return result
        return 0

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.compare(other) < 0

    def __str__(self) -> str:
        return self.original


def _split_qualifier(raw: str) -> tuple[str, str, str | None]:
    """Split on the first '-' or '+' into (prefix, separator, qualifier)."""
    m = _QUALIFIER_SEP.search(raw)
    if not m:
        return raw, "", None
    return raw[: m.start()], m.group(0), raw[m.end() :]


# ----------------------------
# Ordering rules, applied in sequence
# ----------------------------


def _compare_release(x: Version, y: Version) -> int:
    return _cmp((x.major, x.minor, x.patch), (y.major, y.minor, y.patch))


def _compare_build(x: Version, y: Version) -> int:
    return _compare_segments(x.build, y.build)


def _compare_pre_release(x: Version, y: Version) -> int:
    # A final release outranks every tagged variant.
    if x.pre_release is None and y.pre_release is None:
        return 0
    if x.pre_release is None:
        return 1
    if y.pre_release is None:
        return -1
    return x.pre_release.compare(y.pre_release)


def _compare_pre_release_build(x: Version, y: Version) -> int:
    return _compare_segments(x.pre_release_build, y.pre_release_build)


_COMPARATORS: tuple[Callable[[Version, Version], int], ...] = (
    _compare_release,
    _compare_build,
    _compare_pre_release,
    _compare_pre_release_build,
)


def compare_versions(a: Version | str, b: Version | str) -> int:
    """Compare two versions (parsed or raw), returning -1, 0 or 1.

    Example:
        >>> compare_versions("1.0.0-beta", "1.0.0-beta3")
        1
    """
    va = a if isinstance(a, Version) else Version.parse(a)
    vb = b if isinstance(b, Version) else Version.parse(b)
    return va.compare(vb)


def is_newer(remote: Version | str, current: Version | str | None) -> bool:
    """Return True iff ``remote`` is newer than ``current``.

    A missing current version (nothing installed yet) is always older.
    """
    if current is None:
        return True
    return compare_versions(remote, current) > 0
