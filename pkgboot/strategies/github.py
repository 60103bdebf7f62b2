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

"""GitHub releases strategy for pkgboot.

Lists the releases of a GitHub repository through the REST API, turns their
tags into version strings, and installs the executable from a release asset.
Assets ending in ``.zip`` or ``.nupkg`` are extracted and the executable is
taken from ``package.archive_path``; any other asset IS the executable.

Key Advantages:

- Version listing pages through the API 100 releases at a time
- Pre-releases are filtered with GitHub's own ``prerelease`` flag
- ``releases/latest/download/{asset}`` serves "latest" without an API call

Configuration:
    ```yaml
    sources:
      - type: github
        repo: "fsprojects/Paket"          # Required: owner/repo
        asset: "paket.exe"                # Optional: defaults to package.executable
        version_pattern: "v?(?P<version>.+)"  # Optional: tag -> version
        token: "${GITHUB_TOKEN}"          # Optional: raises the rate limit
        max_pages: 10                     # Optional: release listing page cap
        api_url: "https://api.github.com" # Optional (GitHub Enterprise)
        site_url: "https://github.com"    # Optional (GitHub Enterprise)
    ```

Configuration Fields:

- **repo** (str, required): repository in "owner/name" format
- **asset** (str, optional): release asset file name
- **version_pattern** (str, optional): regex applied to tag names. Uses the
  named group ``version`` if present, else group 1, else the whole match.
  Tags it does not match are skipped.
- **token** (str, optional): personal access token sent as
  ``Authorization: token ...``. Rate limit goes from 60 to 5000 requests per
  hour.
- **max_pages** (int, optional): upper bound on release listing pages
  (default 10, i.e. the newest 1000 releases). Named versions are resolved
  to tags through the same listing, so a ``v``-prefixed tag is found for
  "8.0.0".

Error Handling:

- SourceUnavailable: API request failed (404 repo, 403 rate limit, network)
- NoVersionsFound: no release tag yielded a version
- DownloadFailed / ArtifactPlacementFailed: see strategies.staging

"""

from __future__ import annotations

from pathlib import Path
import re
from typing import Any

import requests

from pkgboot.exceptions import ConfigError, NoVersionsFound, SourceUnavailable
from pkgboot.io.download import HttpTransport
from pkgboot.logging import get_global_logger
from pkgboot.versioning.resolver import select_latest

from .base import PackageSpec, register_strategy
from .staging import install_from_url

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_SITE_URL = "https://github.com"
DEFAULT_VERSION_PATTERN = r"v?(?P<version>.+)"
PAGE_SIZE = 100
DEFAULT_MAX_PAGES = 10


def _version_from_tag(pattern: re.Pattern[str], tag: str) -> str | None:
    match = pattern.search(tag)
    if not match:
        return None
    if "version" in pattern.groupindex:
        return match.group("version")
    if pattern.groups > 0:
        return match.group(1)
    return match.group(0)


class GithubStrategy:
    """Source backed by GitHub releases."""

    name = "github"

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
        self.repo = settings.get("repo") or ""
        self.asset = settings.get("asset") or package.executable
        self.api_url = str(settings.get("api_url") or DEFAULT_API_URL).rstrip("/")
        self.site_url = str(settings.get("site_url") or DEFAULT_SITE_URL).rstrip("/")
        self.version_pattern = settings.get("version_pattern") or DEFAULT_VERSION_PATTERN
        self.max_pages = settings.get("max_pages") or DEFAULT_MAX_PAGES
        # version string -> release tag, filled from the release listing
        self._tags: dict[str, str] = {}

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        token = self.settings.get("token")
        if token:
            headers["Authorization"] = f"token {token}"
        return headers

    def _compiled_pattern(self) -> re.Pattern[str]:
        try:
            return re.compile(self.version_pattern)
        except re.error as err:
            raise ConfigError(
                f"Invalid version_pattern regex: {self.version_pattern!r}"
            ) from err

    def list_releases(self) -> list[dict[str, Any]]:
        """Return the repository's releases as decoded by the API.

        Pages through the listing 100 releases at a time and stops at the
        first short page or after ``max_pages`` pages.
        """
        if not self.repo:
            raise ConfigError("github source requires 'repo'")
        logger = get_global_logger()

        releases: list[dict[str, Any]] = []
        for page in range(1, self.max_pages + 1):
            url = (
                f"{self.api_url}/repos/{self.repo}/releases"
                f"?per_page={PAGE_SIZE}&page={page}"
            )
            logger.verbose("GITHUB", f"Fetching releases from: {url}")
            batch = self._fetch_release_page(url)
            releases.extend(batch)
            if len(batch) < PAGE_SIZE:
                break
        else:
            logger.debug(
                "GITHUB", f"Stopped listing {self.repo} after {self.max_pages} pages"
            )
        return releases

    def _fetch_release_page(self, url: str) -> list[dict[str, Any]]:
        try:
            releases = self.transport.fetch_json(url, headers=self._headers())
        except requests.HTTPError as err:
            status = err.response.status_code if err.response is not None else None
            if status == 404:
                message = f"github: repository {self.repo!r} not found"
            elif status == 403:
                message = "github: API rate limit exceeded, consider setting a token"
            else:
                message = f"github: release listing failed: {err}"
            raise SourceUnavailable(message, source=self.name) from err
        except (requests.RequestException, ValueError) as err:
            raise SourceUnavailable(
                f"github: could not fetch releases for {self.repo}: {err}",
                source=self.name,
            ) from err

        if not isinstance(releases, list):
            raise SourceUnavailable(
                f"github: unexpected releases payload for {self.repo}",
                source=self.name,
            )
        return releases

    def _map_tags(self, ignore_prerelease: bool) -> dict[str, str]:
        """Return {version: tag} for the listed releases."""
        logger = get_global_logger()
        pattern = self._compiled_pattern()

        tags: dict[str, str] = {}
        for release in self.list_releases():
            if release.get("draft"):
                continue
            if ignore_prerelease and release.get("prerelease"):
                continue
            tag = release.get("tag_name") or ""
            version = _version_from_tag(pattern, tag)
            if version:
                tags[version] = tag
            else:
                logger.debug("GITHUB", f"Skipping tag {tag!r}")
        return tags

    def get_latest_version(self, ignore_prerelease: bool) -> str:
        """Return the latest version among the repository's release tags."""
        tags = self._map_tags(ignore_prerelease)
        latest = select_latest(tags, include_prereleases=not ignore_prerelease)
        if latest is None:
            raise NoVersionsFound(
                f"github: no usable release tags in {self.repo}", source=self.name
            )
        self._tags.update(tags)
        get_global_logger().verbose(
            "GITHUB", f"Latest version: {latest} (tag {tags[latest]})"
        )
        return latest

    def tag_for(self, version: str) -> str:
        """Return the release tag behind ``version``.

        Versions not seen by get_latest_version() are looked up in the
        release listing. A version that matches no release is used as the
        tag name unchanged.
        """
        if version not in self._tags:
            self._tags.update(self._map_tags(ignore_prerelease=False))
        tag = self._tags.get(version)
        if tag is None:
            get_global_logger().debug(
                "GITHUB", f"No release tag maps to {version}, using it as the tag"
            )
            return version
        return tag

    def asset_url(self, version: str) -> str:
        if not version:
            return f"{self.site_url}/{self.repo}/releases/latest/download/{self.asset}"
        tag = self.tag_for(version)
        return f"{self.site_url}/{self.repo}/releases/download/{tag}/{self.asset}"

    def download_version(self, version: str, target: Path) -> str:
        """Download the release asset for ``version`` ("" = latest release)."""
        if not self.repo:
            raise ConfigError("github source requires 'repo'")
        url = self.asset_url(version)
        get_global_logger().verbose("GITHUB", f"Starting download from {url}")
        return install_from_url(
            source=self.name,
            transport=self.transport,
            url=url,
            filename=self.asset,
            member=self.package.member,
            target=target,
            work_dir=self.work_dir,
            headers=self._headers() if self.settings.get("token") else None,
        )

    def validate_config(self) -> list[str]:
        errors = []
        repo = self.settings.get("repo")
        if repo is None:
            errors.append("github: missing required field 'repo'")
        elif not isinstance(repo, str) or repo.count("/") != 1 or not all(
            repo.split("/")
        ):
            errors.append(
                f"github: 'repo' must be in format 'owner/repo', got {repo!r}"
            )

        max_pages = self.settings.get("max_pages")
        if max_pages is not None and (
            isinstance(max_pages, bool) or not isinstance(max_pages, int) or max_pages < 1
        ):
            errors.append(
                f"github: 'max_pages' must be a positive integer, got {max_pages!r}"
            )

        if "version_pattern" in self.settings:
            try:
                re.compile(self.settings["version_pattern"])
            except (re.error, TypeError) as err:
                errors.append(f"github: invalid version_pattern regex: {err}")
        return errors


# Register this strategy when the module is imported
register_strategy("github", GithubStrategy)
