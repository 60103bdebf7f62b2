"""
pkgboot - bootstrap a command-line tool from its package registries

pkgboot installs the latest (or a pinned) release of a tool such as Paket
from a NuGet v2 feed, GitHub releases or a local folder of .nupkg files.

pkgboot provides:
  - An extended major.minor.patch[.build][-tag[.build]] version ordering
  - Latest-version selection over a registry's version list
  - Sources tried in priority order with automatic fallback
  - Atomic placement of the executable and a state file to skip redundant
    downloads

Quick Start
-----------
Install the latest stable release as configured in ./pkgboot.yaml:

    $ pkgboot install

Print the latest version:

    $ pkgboot latest --prerelease

Package Structure
-----------------
cli : module
    Command-line interface with argparse.
core : module
    High-level orchestration functions.
config : package
    YAML configuration loading and merging.
strategies : package
    Registry sources and the fallback chain.
versioning : package
    Version model, ordering and latest-version selection.
io : package
    HTTP transport, archive extraction and file placement.
state : package
    Install state tracking.

Public API
----------
    from pkgboot.core import bootstrap, resolve_latest
    from pkgboot.config import load_config
    from pkgboot.versioning import Version, select_latest
"""

__version__ = "0.1.0"
__license__ = "Apache-2.0"
__description__ = "Bootstrap a tool from NuGet, GitHub or a local feed"

# Re-export commonly used functions for convenience
from pkgboot.config import load_config  # noqa: E402
from pkgboot.core import bootstrap, resolve_latest, validate_config  # noqa: E402
from pkgboot.versioning import (  # noqa: E402
    PreReleaseTag,
    Version,
    compare_versions,
    is_newer,
    select_latest,
)

__all__ = [
    "__version__",
    "__license__",
    "__description__",
    "bootstrap",
    "resolve_latest",
    "validate_config",
    "load_config",
    "Version",
    "PreReleaseTag",
    "compare_versions",
    "is_newer",
    "select_latest",
]
