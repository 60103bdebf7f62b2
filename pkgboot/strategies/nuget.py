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

"""NuGet v2 feed strategy for pkgboot.

Lists the versions a NuGet v2 feed publishes for the package, picks the
latest with the pkgboot ordering, and installs the executable from the
``.nupkg`` (a zip archive).

Endpoints used:

- ``GET {feed}/package-versions/{id}``: bracketed list of versions,
  ``?includePrerelease=true`` adds pre-releases
- ``GET {feed}/package/{id}``: latest package according to the feed
- ``GET {feed}/package/{id}/{version}``: a specific package

Configuration:
    ```yaml
    sources:
      - type: nuget
        feed: https://www.nuget.org/api/v2     # Optional (this is the default)
    ```

Error Handling:

- SourceUnavailable: listing request failed (connection, HTTP status)
- NoVersionsFound: feed answered with an empty or unusable list
- DownloadFailed / ArtifactPlacementFailed: see strategies.staging

Example:
    ```python
    from pathlib import Path
    from pkgboot.strategies.base import PackageSpec
    from pkgboot.strategies.nuget import NugetStrategy
    from pkgboot.io import HttpTransport

    strategy = NugetStrategy(
        {"feed": "https://www.nuget.org/api/v2"},
        package=PackageSpec(id="Paket", executable="paket.exe"),
        transport=HttpTransport(),
        work_dir=Path(".paket"),
    )
    version = strategy.get_latest_version(ignore_prerelease=True)
    strategy.download_version(version, Path(".paket/paket.exe"))
    ```

"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import requests

from pkgboot.exceptions import NoVersionsFound, SourceUnavailable
from pkgboot.io.download import HttpTransport
from pkgboot.logging import get_global_logger
from pkgboot.versioning.resolver import select_latest, split_version_list

from .base import PackageSpec, register_strategy
from .staging import install_from_url

DEFAULT_FEED = "https://www.nuget.org/api/v2"


class NugetStrategy:
    """Source backed by a NuGet v2 feed."""

    name = "nuget"

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
        self.transport = transport
        self.work_dir = work_dir
        self.feed = str(settings.get("feed") or DEFAULT_FEED).rstrip("/")

    def versions_url(self, ignore_prerelease: bool) -> str:
        url = f"{self.feed}/package-versions/{self.package.id}"
        if not ignore_prerelease:
            url += "?includePrerelease=true"
        return url

    def package_url(self, version: str) -> str:
        if version:
            return f"{self.feed}/package/{self.package.id}/{version}"
        return f"{self.feed}/package/{self.package.id}"

    def get_latest_version(self, ignore_prerelease: bool) -> str:
        """Ask the feed for its version list and return the latest entry."""
        logger = get_global_logger()
        url = self.versions_url(ignore_prerelease)
        logger.verbose("NUGET", f"Listing versions: {url}")

        try:
            body = self.transport.fetch_text(url)
        except requests.RequestException as err:
            raise SourceUnavailable(
                f"nuget: could not list versions from {url}: {err}", source=self.name
            ) from err

        entries = split_version_list(body)
        logger.debug("NUGET", f"Feed listed {len(entries)} version(s)")
        latest = select_latest(entries, include_prereleases=not ignore_prerelease)
        if latest is None:
            raise NoVersionsFound(
                f"nuget: no versions of {self.package.id} found at {self.feed}",
                source=self.name,
            )
        logger.verbose("NUGET", f"Latest version: {latest}")
        return latest

    def download_version(self, version: str, target: Path) -> str:
        """Download the .nupkg for ``version`` ("" = feed's latest)."""
        logger = get_global_logger()
        url = self.package_url(version)
        filename = f"{self.package.id.lower()}.{version or 'latest'}.nupkg"
        logger.verbose("NUGET", f"Starting download from {url}")
        return install_from_url(
            source=self.name,
            transport=self.transport,
            url=url,
            filename=filename,
            member=self.package.member,
            target=target,
            work_dir=self.work_dir,
        )

    def validate_config(self) -> list[str]:
        errors = []
        feed = self.settings.get("feed")
        if feed is not None:
            if not isinstance(feed, str) or not feed.strip():
                errors.append("nuget: 'feed' must be a non-empty string")
            elif not feed.startswith(("http://", "https://")):
                errors.append(f"nuget: 'feed' must be an http(s) URL, got {feed!r}")
        return errors


# Register this strategy when the module is imported
register_strategy("nuget", NugetStrategy)
