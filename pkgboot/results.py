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

"""Public API return types for pkgboot.

All dataclasses are frozen (immutable) to prevent accidental mutation of
return values.

Example:
    Using result types:
        ```python
        from pkgboot.config import load_config
        from pkgboot.core import bootstrap

        result = bootstrap(load_config())
        print(result.version, result.status)
        ```

Note:
    Only public API return types belong in this module. Domain types
    (like Version) stay co-located with their related logic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class BootstrapResult:
    """Result from installing (or confirming) the tool.

    Attributes:
        version: Version now at the target ("" when the source's own latest
            endpoint was used and the version is unknown).
        source: Name of the source that supplied it.
        target: Path of the installed executable.
        sha256: SHA-256 of the downloaded package ("" when skipped).
        status: "installed" or "up-to-date".
    """

    version: str
    source: str
    target: Path
    sha256: str
    status: str


@dataclass(frozen=True)
class ValidationResult:
    """Result from validating a configuration.

    Attributes:
        status: "valid" or "invalid".
        errors: Problems that make the configuration unusable.
        warnings: Non-fatal observations.
        source_count: Number of configured sources.
    """

    status: str
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    source_count: int = 0
