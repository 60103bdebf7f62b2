"""Filesystem helpers for pkgboot.

- ``staging_directory``: process-unique scratch folder for one download
- ``find_member``: locate an extracted file by relative path, ignoring case
- ``place_artifact``: copy the artifact to its final path atomically
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
import os
from pathlib import Path
import shutil
import tempfile

from pkgboot.logging import get_global_logger

STAGING_PREFIX = "pkgboot-"


@contextmanager
def staging_directory(work_dir: Path) -> Iterator[Path]:
    """Create a unique staging folder under ``work_dir`` and remove it after.

    The folder name comes from ``tempfile.mkdtemp`` and is unique per process
    and call, so concurrent runs sharing ``work_dir`` never collide. Removal
    on the error path is best-effort.

    Example:
        ```python
        with staging_directory(Path(".paket")) as staging:
            transport.fetch_to_file(url, staging / "paket.nupkg")
        ```
    """
    logger = get_global_logger()
    work_dir.mkdir(parents=True, exist_ok=True)
    path = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=work_dir))
    logger.debug("FILE", f"Staging directory: {path}")
    try:
        yield path
    except BaseException:
        shutil.rmtree(path, ignore_errors=True)
        raise
    shutil.rmtree(path)


def find_member(root: Path, relative: str) -> Path | None:
    """Find ``relative`` (posix-style) below ``root``, case-insensitively.

    NuGet packages built on different systems disagree on case ("Tools/" vs
    "tools/"), so an exact match is tried first and then a case-insensitive
    walk.
    """
    exact = root / relative
    if exact.is_file():
        return exact
    wanted = relative.replace("\\", "/").strip("/").lower()
    for dirpath, _dirnames, filenames in os.walk(root):
        for filename in filenames:
            candidate = Path(dirpath) / filename
            if candidate.relative_to(root).as_posix().lower() == wanted:
                return candidate
    return None


def place_artifact(source: Path, target: Path) -> Path:
    """Copy ``source`` to ``target``, replacing any existing file.

    The copy goes to a sibling temporary file first and is then renamed, so
    a running copy of the old executable is never left half-overwritten.

    Raises:
        OSError: If the copy or rename fails.
    """
    logger = get_global_logger()
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp = target.with_name(f".{target.name}.{os.getpid()}.tmp")
    try:
        shutil.copy2(source, tmp)
        tmp.replace(target)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise
    logger.verbose("FILE", f"Placed artifact: {target}")
    return target
