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

"""Exception hierarchy for pkgboot.

All exceptions inherit from PkgbootError, so callers can catch every pkgboot
failure with a single except clause. Failures raised by a download source
derive from StrategyError and carry the name of the source that raised them,
which lets the orchestration report the last source it attempted.

Parsing version strings never raises: malformed text yields zero-valued
fields. Resolving the latest version returns None rather than raising.

Example:
    Catching specific error types:
        ```python
        from pkgboot.core import bootstrap
        from pkgboot.exceptions import ConfigError, StrategyError

        try:
            result = bootstrap(config)
        except ConfigError as e:
            print(f"Configuration error: {e}")
        except StrategyError as e:
            print(f"{e.source} failed: {e}")
        ```
"""

from __future__ import annotations

__all__ = [
    "PkgbootError",
    "ConfigError",
    "StrategyError",
    "SourceUnavailable",
    "NoVersionsFound",
    "DownloadFailed",
    "ArtifactPlacementFailed",
]


class PkgbootError(Exception):
    """Base exception for all pkgboot errors."""

    pass


class ConfigError(PkgbootError):
    """Raised for configuration-related errors.

    This exception is raised when there are problems with:

    - YAML parsing (syntax errors, top-level value not a mapping)
    - Missing or invalid configuration fields (no sources, no package id)
    - Unknown source types
    - Invalid source settings (bad regex, malformed repo name)
    """

    pass


class StrategyError(PkgbootError):
    """Base class for failures raised by a download source.

    Attributes:
        source: Name of the source that failed (e.g., "nuget", "github").

    Example:
        Report which source failed:
            ```python
            try:
                chain.get_latest_version(ignore_prerelease=True)
            except StrategyError as e:
                print(f"last attempted source: {e.source}")
            ```
    """

    def __init__(self, message: str, *, source: str) -> None:
        super().__init__(message)
        self.source = source


class SourceUnavailable(StrategyError):
    """Raised when a registry cannot be reached or answers with an error."""

    pass


class NoVersionsFound(StrategyError):
    """Raised when a registry answers but lists no usable version."""

    pass


class DownloadFailed(StrategyError):
    """Raised when fetching or extracting an artifact fails.

    Covers HTTP errors while downloading the package, corrupt archives, and
    archives that do not contain the expected executable.
    """

    pass


class ArtifactPlacementFailed(StrategyError):
    """Raised when the artifact cannot be copied to its target path."""

    pass
