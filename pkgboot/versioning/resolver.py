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

"""Pick the latest version out of a registry's version list.

Registries answer a "which versions exist" query with loosely formatted text,
typically a JSON-ish array such as ``["5.0.0","5.1.0-beta"]``. This module
splits that text into entries and selects the highest one with the ordering
from :mod:`pkgboot.versioning.semver`.

Whether pre-releases are eligible is decided upstream: the strategy asks the
registry for a list that already excludes them (or filters the list with
:func:`filter_prereleases`). The resolver ranks whatever it is given.
"""

from __future__ import annotations

from collections.abc import Iterable

from pkgboot.logging import get_global_logger
from pkgboot.versioning.semver import Version

_LIST_STRIP = "[] \t\r\n"
_ENTRY_STRIP = "\"' \t\r\n"


def split_version_list(text: str) -> list[str]:
    """Split a bracketed, comma-separated version list into entries.

    Args:
        text: Raw body, e.g. ``'["1.0.0", "1.1.0"]'``.

    Returns:
        Entries with brackets, quotes and surrounding whitespace removed.
        Empty entries are dropped.

    Example:
        >>> split_version_list('["1.0.0","1.1.0-beta"]')
        ['1.0.0', '1.1.0-beta']
    """
    body = text.strip().strip(_LIST_STRIP)
    entries = (part.strip(_ENTRY_STRIP) for part in body.split(","))
    return [entry for entry in entries if entry]


def filter_prereleases(raw_versions: Iterable[str]) -> list[str]:
    """Drop entries that carry a pre-release qualifier."""
    return [raw for raw in raw_versions if not Version.parse(raw).is_prerelease]


def select_latest(
    raw_versions: Iterable[str], include_prereleases: bool = True
) -> str | None:
    """Return the original text of the highest version, or None.

    Entries that are empty or whitespace-only are ignored. Among entries that
    compare equal (e.g., "2.0" and "2.0.0"), the greatest text wins so the
    result does not depend on input order.

    Args:
        raw_versions: Version strings as published by the registry.
        include_prereleases: Whether the list was requested with
            pre-releases. Informational; filtering happens upstream.

    Returns:
        The winning version's original text, or None if nothing is usable.

    Example:
        >>> select_latest(["1.0.0", "1.2.0", "1.1.0"], True)
        '1.2.0'
        >>> select_latest([], False) is None
        True
    """
    logger = get_global_logger()

    candidates = [Version.parse(raw) for raw in raw_versions if raw and raw.strip()]
    logger.debug(
        "RESOLVE",
        f"Ranking {len(candidates)} version(s) "
        f"(prereleases {'included' if include_prereleases else 'excluded'})",
    )
    if not candidates:
        return None

    latest = max(candidates, key=lambda v: (v, v.original))
    logger.debug("RESOLVE", f"Latest version: {latest.original}")
    return latest.original
