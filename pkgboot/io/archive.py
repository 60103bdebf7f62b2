"""Archive extraction for pkgboot.

NuGet packages (``.nupkg``) and zipped release assets are plain zip files.
This module unpacks them into a staging directory; it knows nothing about
which file inside the archive a strategy is after.
"""

from __future__ import annotations

from pathlib import Path
import zipfile

from pkgboot.logging import get_global_logger

ARCHIVE_SUFFIXES = (".zip", ".nupkg")


class ArchiveError(Exception):
    """Raised when an archive cannot be read or extracted."""


def is_archive(name: str) -> bool:
    """True if ``name`` has a suffix pkgboot extracts (.zip, .nupkg)."""
    return name.lower().endswith(ARCHIVE_SUFFIXES)


def extract_archive(archive: Path, target_dir: Path) -> Path:
    """Extract ``archive`` into ``target_dir``.

    Args:
        archive: Path to a zip-format archive.
        target_dir: Folder to extract into (created if missing).

    Returns:
        ``target_dir``.

    Raises:
        ArchiveError: If the file is missing or not a valid zip archive.
    """
    logger = get_global_logger()
    target_dir.mkdir(parents=True, exist_ok=True)
    logger.verbose("FILE", f"Extracting {archive.name} to {target_dir}")
    try:
        with zipfile.ZipFile(archive, "r") as zf:
            zf.extractall(target_dir)
    except (zipfile.BadZipFile, FileNotFoundError) as err:
        raise ArchiveError(f"cannot extract {archive}: {err}") from err
    return target_dir
