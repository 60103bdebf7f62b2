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

"""Download strategy protocol and registry for pkgboot.

This module defines the foundational pieces of the source system:

- FetchStrategy protocol: interface every source implements
- PackageSpec: what is being bootstrapped (package id, executable)
- Strategy registry: dict mapping source types to implementations
- register_strategy() and get_strategy()

A strategy answers two questions for one backing source:

- get_latest_version(ignore_prerelease): which version is newest?
- download_version(version, target): put that version's executable at target

Design Philosophy:
    - Strategies are Protocol classes (structural subtyping, not inheritance)
    - Registration happens at module import time (strategies self-register)
    - Fallback is NOT a strategy's business; StrategyChain (chain.py) tries an
      ordered sequence of strategies, and a chain is itself a strategy

Example:
    Implementing a custom source:
        ```python
        from pathlib import Path
        from pkgboot.strategies.base import register_strategy

        class MirrorStrategy:
            name = "mirror"

            def __init__(self, settings, *, package, transport, work_dir):
                self.settings = settings
                ...

            def get_latest_version(self, ignore_prerelease: bool) -> str:
                ...

            def download_version(self, version: str, target: Path) -> str:
                ...

            def validate_config(self) -> list[str]:
                return []

        register_strategy("mirror", MirrorStrategy)
        ```

"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from pkgboot.exceptions import ConfigError
from pkgboot.io.download import HttpTransport

# -------------------------------
# Shared DTO
# -------------------------------


@dataclass(frozen=True)
class PackageSpec:
    """The tool being bootstrapped.

    Attributes:
        id: Package id in the registry (e.g., "Paket").
        executable: File name of the tool (e.g., "paket.exe").
        archive_path: Path of the executable inside a package archive.
            Defaults to ``tools/<executable>``.
    """

    id: str
    executable: str
    archive_path: str | None = None

    @property
    def member(self) -> str:
        return self.archive_path or f"tools/{self.executable}"

    @classmethod
    def from_config(cls, package: dict[str, Any]) -> PackageSpec:
        pkg_id = package.get("id")
        if not pkg_id:
            raise ConfigError("configuration requires 'package.id'")
        executable = package.get("executable") or f"{pkg_id.lower()}.exe"
        return cls(
            id=pkg_id,
            executable=executable,
            archive_path=package.get("archive_path") or None,
        )


# -------------------------------
# Strategy Protocol
# -------------------------------


class FetchStrategy(Protocol):
    """Protocol for version sources.

    Attributes:
        name: Source name used in logs and error reports.
    """

    name: str

    def get_latest_version(self, ignore_prerelease: bool) -> str:
        """Return the latest version string published by the source.

        Args:
            ignore_prerelease: If True, pre-release versions are not eligible.

        Returns:
            The original text of the latest version.

        Raises:
            SourceUnavailable: If the source cannot be reached.
            NoVersionsFound: If the source lists no usable version.

        """
        ...

    def download_version(self, version: str, target: Path) -> str:
        """Install ``version`` of the executable at ``target``.

        Args:
            version: Version to install. An empty string means the latest
                STABLE version according to the source itself (its own
                latest endpoint, not the resolver). Registry "latest"
                endpoints never serve pre-releases, so the ``prerelease``
                setting only applies through get_latest_version().
            target: Final path of the executable.

        Returns:
            SHA-256 of the downloaded package.

        Raises:
            DownloadFailed: On transport or archive failures.
            ArtifactPlacementFailed: If copying to ``target`` fails.

        """
        ...

    def validate_config(self) -> list[str]:
        """Return human-readable problems with the source settings.

        Must not touch the network.
        """
        ...


# -------------------------------
# Strategy Registry
# -------------------------------

_STRATEGY_REGISTRY: dict[str, type[FetchStrategy]] = {}


def register_strategy(name: str, strategy_class: type[FetchStrategy]) -> None:
    """Register a strategy class under a source type name.

    Registering the same name twice overwrites the previous registration
    (handy for tests).

    Args:
        name: Source type used in configuration (``sources[].type``).
        strategy_class: Class implementing FetchStrategy. It is constructed
            as ``strategy_class(settings, package=..., transport=...,
            work_dir=...)``.
    """
    _STRATEGY_REGISTRY[name] = strategy_class


def available_strategies() -> list[str]:
    """Return registered source type names, sorted."""
    return sorted(_STRATEGY_REGISTRY)


def get_strategy(
    name: str,
    settings: dict[str, Any],
    *,
    package: PackageSpec,
    transport: HttpTransport | None = None,
    work_dir: Path,
) -> FetchStrategy:
    """Instantiate the strategy registered under ``name``.

    Args:
        name: Source type (e.g., "nuget").
        settings: The source's configuration mapping.
        package: What is being bootstrapped.
        transport: HTTP transport; a default one is created if None.
        work_dir: Folder where staging directories are created.

    Returns:
        A new strategy instance.

    Raises:
        ConfigError: If ``name`` is not registered. The message lists the
            available types.
    """
    if name not in _STRATEGY_REGISTRY:
        available = ", ".join(available_strategies())
        raise ConfigError(
            f"Unknown source type: {name!r}. Available: {available or '(none)'}"
        )
    return _STRATEGY_REGISTRY[name](
        settings,
        package=package,
        transport=transport or HttpTransport(),
        work_dir=work_dir,
    )
