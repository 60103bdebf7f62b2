"""
Version parsing, ordering and selection for pkgboot.

Modules
-------
semver : module
    Version and PreReleaseTag value types with a total ordering.
resolver : module
    Split registry version lists and select the latest entry.

Public API
----------
Version : dataclass
    Parsed version string; supports <, ==, hash.
PreReleaseTag : dataclass
    Pre-release qualifier (name plus optional number).
compare_versions : function
    Compare two version strings, returning -1, 0, or 1.
is_newer : function
    Check if a remote version is newer than the current version.
select_latest : function
    Return the original text of the highest version in a list.
split_version_list : function
    Turn a bracketed, comma-separated registry answer into entries.
filter_prereleases : function
    Drop entries carrying a pre-release qualifier.

Examples
--------
    >>> from pkgboot.versioning import compare_versions, select_latest
    >>> compare_versions("1.2.3", "1.2.3-beta")
    1
    >>> select_latest(["2.0.0-alpha", "2.0.0"], False)
    '2.0.0'

Notes
-----
- Parsing never raises; malformed components default to zero
- No network or file I/O happens in this package
"""

from .resolver import filter_prereleases, select_latest, split_version_list
from .semver import PreReleaseTag, Version, compare_versions, is_newer

__all__ = [
    "PreReleaseTag",
    "Version",
    "compare_versions",
    "filter_prereleases",
    "is_newer",
    "select_latest",
    "split_version_list",
]
