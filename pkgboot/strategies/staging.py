"""Shared download → extract → place pipeline for strategies.

Every source ends the same way: a package file lands in a staging folder, is
unpacked when it is an archive, and the executable is copied to its target.
These helpers do that and translate collaborator failures into
DownloadFailed / ArtifactPlacementFailed tagged with the source name.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

import requests

from pkgboot.exceptions import ArtifactPlacementFailed, DownloadFailed
from pkgboot.io.archive import ArchiveError, extract_archive, is_archive
from pkgboot.io.download import HttpTransport
from pkgboot.io.files import find_member, place_artifact, staging_directory


def place_from_package(
    source: str, package_file: Path, staging: Path, member: str, target: Path
) -> None:
    """Place the executable contained in (or being) ``package_file``."""
    artifact = package_file
    if is_archive(package_file.name):
        content = staging / "content"
        try:
            extract_archive(package_file, content)
        except ArchiveError as err:
            raise DownloadFailed(f"{source}: {err}", source=source) from err
        found = find_member(content, member)
        if found is None:
            raise DownloadFailed(
                f"{source}: {package_file.name} does not contain {member!r}",
                source=source,
            )
        artifact = found

    try:
        place_artifact(artifact, target)
    except OSError as err:
        raise ArtifactPlacementFailed(
            f"{source}: could not copy {artifact.name} to {target}: {err}",
            source=source,
        ) from err


def install_from_url(
    *,
    source: str,
    transport: HttpTransport,
    url: str,
    filename: str,
    member: str,
    target: Path,
    work_dir: Path,
    headers: Mapping[str, str] | None = None,
) -> str:
    """Download ``url`` into a staging folder and place its executable.

    Returns:
        SHA-256 of the downloaded file.
    """
    with staging_directory(work_dir) as staging:
        package_file = staging / filename
        try:
            digest = transport.fetch_to_file(url, package_file, headers=headers)
        except (requests.RequestException, OSError) as err:
            raise DownloadFailed(
                f"{source}: download from {url} failed: {err}", source=source
            ) from err
        place_from_package(source, package_file, staging, member, target)
    return digest
