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

"""State tracking implementation for pkgboot.

Records which version was installed at which target, from which source and
with which package hash, so a repeated ``pkgboot install`` can skip the
download when nothing changed.

The filesystem remains the source of truth: an entry only counts when the
target file still exists.

Example:
    High-level API with StateTracker:
        ```python
        from pathlib import Path
        from pkgboot.state import StateTracker

        tracker = StateTracker(Path(".paket/pkgboot.state.json"))
        tracker.load()
        if not tracker.is_installed(Path(".paket/paket.exe"), "8.0.3"):
            ...
        tracker.record_install(Path(".paket/paket.exe"), "8.0.3", "nuget", digest)
        tracker.save()
        ```

    Low-level API with functions:
        ```python
        from pathlib import Path
        from pkgboot.state import load_state, save_state

        state = load_state(Path(".paket/pkgboot.state.json"))
        save_state(state, Path(".paket/pkgboot.state.json"))
        ```

"""

from __future__ import annotations

from datetime import UTC, datetime
import json
from pathlib import Path
from typing import Any

from pkgboot import __version__
from pkgboot.logging import get_global_logger

SCHEMA_VERSION = "1"


class StateTracker:
    """Manages install state with automatic persistence.

    Attributes:
        state_file: Path to the JSON state file.
        state: In-memory state dictionary.

    """

    def __init__(self, state_file: Path):
        self.state_file = state_file
        self.state: dict[str, Any] = {}

    def load(self) -> dict[str, Any]:
        """Load state from file.

        Creates the default structure when the file doesn't exist. A
        corrupted file is renamed to ``*.backup`` and replaced with a fresh
        state; a warning is logged and the run continues.

        Returns:
            Loaded state dictionary.

        Raises:
            OSError: If file permissions prevent reading.

        """
        try:
            self.state = load_state(self.state_file)
        except FileNotFoundError:
            self.state = create_default_state()
            self.save()
        except json.JSONDecodeError:
            backup = self.state_file.with_suffix(".json.backup")
            self.state_file.replace(backup)
            self.state = create_default_state()
            self.save()
            get_global_logger().warning(
                "STATE", f"Corrupted state file backed up to {backup}"
            )

        if not isinstance(self.state.get("installs"), dict):
            self.state["installs"] = {}
        return self.state

    def save(self) -> None:
        """Save current state, refreshing metadata.last_updated."""
        self.state.setdefault("metadata", {})
        self.state["metadata"]["last_updated"] = datetime.now(UTC).isoformat()
        save_state(self.state, self.state_file)

    @staticmethod
    def _key(target: Path) -> str:
        return str(Path(target).resolve())

    def get_install(self, target: Path) -> dict[str, Any] | None:
        """Return the recorded install for ``target``, if any."""
        return self.state.get("installs", {}).get(self._key(target))

    def record_install(
        self, target: Path, version: str, source: str, sha256: str
    ) -> None:
        """Remember that ``version`` from ``source`` now lives at ``target``."""
        self.state.setdefault("installs", {})[self._key(target)] = {
            "version": version,
            "source": source,
            "sha256": sha256,
            "installed_at": datetime.now(UTC).isoformat(),
        }
        get_global_logger().debug("STATE", f"Recorded {version} from {source}")

    def is_installed(self, target: Path, version: str) -> bool:
        """True if ``version`` is recorded for ``target`` and the file exists."""
        entry = self.get_install(target)
        if not entry or not version:
            return False
        return entry.get("version") == version and Path(target).is_file()


def create_default_state() -> dict[str, Any]:
    """Create an empty state structure with metadata."""
    return {
        "metadata": {
            "pkgboot_version": __version__,
            "schema_version": SCHEMA_VERSION,
            "last_updated": datetime.now(UTC).isoformat(),
        },
        "installs": {},
    }


def load_state(state_file: Path) -> dict[str, Any]:
    """Load state from a JSON file.

    Raises:
        FileNotFoundError: If state file doesn't exist.
        json.JSONDecodeError: If file contains invalid JSON.

    """
    with open(state_file, encoding="utf-8") as f:
        return json.load(f)


def save_state(state: dict[str, Any], state_file: Path) -> None:
    """Save state to JSON with 2-space indentation and sorted keys.

    Creates parent directories if needed.
    """
    state_file.parent.mkdir(parents=True, exist_ok=True)

    with open(state_file, "w", encoding="utf-8") as f:
        json.dump(state, f, indent=2, sort_keys=True)
        f.write("\n")
