"""Input/Output collaborators for pkgboot.

Modules:

download : module
    HTTP(S) transport with retries, per-request proxy setup and atomic writes.
archive : module
    Zip/nupkg extraction.
files : module
    Staging directories and atomic artifact placement.

Example:
    from pathlib import Path
    from pkgboot.io import HttpTransport, NetworkSettings

    transport = HttpTransport(NetworkSettings(proxy="http://proxy:3128"))
    sha256 = transport.fetch_to_file(
        "https://example.com/tool.zip", Path("staging/tool.zip")
    )

"""

from .archive import ArchiveError, extract_archive, is_archive
from .download import HttpTransport, NetworkSettings, make_session
from .files import find_member, place_artifact, staging_directory

__all__ = [
    "ArchiveError",
    "HttpTransport",
    "NetworkSettings",
    "extract_archive",
    "find_member",
    "is_archive",
    "make_session",
    "place_artifact",
    "staging_directory",
]
