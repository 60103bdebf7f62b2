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

"""Local folder feed strategy for pkgboot.

A folder (a network share, a build cache, an offline mirror) holding
``{id}.{version}.nupkg`` files. Versions come from the file names; nothing
goes over the network, so this source is a natural last fallback.

Configuration:
    ```yaml
    sources:
      - type: local
        path: "//fileserver/nuget"   # Required: folder containing .nupkg files
    ```

Error Handling:

- SourceUnavailable: the folder does not exist or cannot be listed
- NoVersionsFound: no matching package file in the folder
- DownloadFailed / ArtifactPlacementFailed: see strategies.staging
"""

from __future__ import annotations

import hashlib
from pathlib import Path
import re
import shutil
from typing import Any

from pkgboot.exceptions import (
    DownloadFailed,
    NoVersionsFound,
    SourceUnavailable,
)
from pkgboot.io.download import HttpTransport
from pkgboot.io.files import staging_directory
from pkgboot.logging import get_global_logger
from pkgboot.versioning.resolver import filter_prereleases, select_latest

from .base import PackageSpec, register_strategy
from .staging import place_from_package


class LocalFeedStrategy:
    """Source backed by a folder of .nupkg files."""

    name = "local"

    def __init__(
        self,
        settings: dict[str, Any],
        *,
        package: PackageSpec,
        transport: HttpTransport,
        work_dir: Path,
    ) -> None:
        self.settings = settings
        self.package = package
        self.work_dir = work_dir
        self.path = Path(settings.get("path") or ".")
        self._file_re = re.compile(
            rf"^{re.escape(package.id)}\.(?P<version>\d.*)\.nupkg$", re.IGNORECASE
        )

    def packages(self) -> dict[str, Path]:
        """Map version string -> package file for every matching file."""
        try:
            entries = list(self.path.iterdir())
        except OSError as err:
            raise SourceUnavailable(
                f"local: cannot read feed folder {self.path}: {err}", source=self.name
            ) from err

        found: dict[str, Path] = {}
        for entry in entries:
            m = self._file_re.match(entry.name)
            if m and entry.is_file():
                found[m.group("version")] = entry
        return found

    def get_latest_version(self, ignore_prerelease: bool) -> str:
        logger = get_global_logger()
        logger.verbose("LOCAL", f"Scanning feed folder: {self.path}")
        versions = list(self.packages())
        if ignore_prerelease:
            versions = filter_prereleases(versions)
        latest = select_latest(versions, include_prereleases=not ignore_prerelease)
        if latest is None:
            raise NoVersionsFound(
                f"local: no {self.package.id} packages in {self.path}",
                source=self.name,
            )
        logger.verbose("LOCAL", f"Latest version: {latest}")
        return latest

    def download_version(self, version: str, target: Path) -> str:
        """Install from the package file for ``version``.

        ``""`` installs the newest stable file, like the latest endpoints of
        the remote registries. Pre-releases are installed by name.
        """
        if not version:
            version = self.get_latest_version(ignore_prerelease=True)
        package_file = self.packages().get(version)
        if package_file is None:
            raise DownloadFailed(
                f"local: {self.package.id} {version} not found in {self.path}",
                source=self.name,
            )

        get_global_logger().verbose("LOCAL", f"Installing from {package_file}")
        with staging_directory(self.work_dir) as staging:
            staged = staging / package_file.name
            try:
                shutil.copy2(package_file, staged)
                digest = hashlib.sha256(staged.read_bytes()).hexdigest()
            except OSError as err:
                raise DownloadFailed(
                    f"local: could not copy {package_file}: {err}", source=self.name
                ) from err
            place_from_package(self.name, staged, staging, self.package.member, target)
        return digest

    def validate_config(self) -> list[str]:
        path = self.settings.get("path")
        if not path or not isinstance(path, str):
            return ["local: missing required field 'path'"]
        return []


register_strategy("local", LocalFeedStrategy)
