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

"""Core orchestration for pkgboot.

This module turns a loaded configuration into a StrategyChain and runs the
bootstrap workflow against it:

1. Build the chain from ``sources`` (config order, adjusted by
   ``force_source`` / ``prefer_source``)
2. For each source in order: resolve the version (unless one was requested),
   skip when the state file shows it already installed, otherwise download
   and place the executable
3. Record the result in the state file

A source failing at any step hands over to the next one. When every source
fails, the error of the last one attempted is raised.

Design Principles:

- Functions return structured data (dataclasses) for easy testing
- Error handling uses exceptions; the CLI layer formats them for display
- Sources are instantiated through the strategy registry

Example:
    Programmatic usage:
        ```python
        from pathlib import Path
        from pkgboot.config import load_config
        from pkgboot.core import bootstrap

        result = bootstrap(load_config(Path("pkgboot.yaml")))
        print(f"{result.version} from {result.source}: {result.status}")
        ```

"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pkgboot.exceptions import ConfigError
from pkgboot.io.download import HttpTransport, NetworkSettings
from pkgboot.logging import get_global_logger
from pkgboot.results import BootstrapResult, ValidationResult
from pkgboot.state import StateTracker
from pkgboot.strategies import (
    FetchStrategy,
    PackageSpec,
    StrategyChain,
    available_strategies,
    get_strategy,
    run_with_fallback,
)


def _ordered_sources(config: dict[str, Any]) -> list[dict[str, Any]]:
    sources = config.get("sources") or []
    if not isinstance(sources, list) or not all(isinstance(s, dict) for s in sources):
        raise ConfigError("'sources' must be a list of mappings")

    forced = config.get("force_source")
    if forced:
        picked = [s for s in sources if s.get("type") == forced]
        if not picked:
            raise ConfigError(f"force_source {forced!r} is not a configured source")
        return picked[:1]

    preferred = config.get("prefer_source")
    if preferred:
        first = [s for s in sources if s.get("type") == preferred]
        if not first:
            raise ConfigError(
                f"prefer_source {preferred!r} is not a configured source"
            )
        rest = [s for s in sources if s is not first[0]]
        return [first[0], *rest]

    return list(sources)


def target_path(config: dict[str, Any]) -> Path:
    target = config.get("target")
    if not target:
        raise ConfigError("'target' is required")
    return Path(target)


def _work_dir(config: dict[str, Any]) -> Path:
    work_dir = config.get("work_dir")
    if work_dir:
        return Path(work_dir)
    return target_path(config).parent


def build_chain(
    config: dict[str, Any], transport: HttpTransport | None = None
) -> StrategyChain:
    """Instantiate every configured source in priority order.

    Args:
        config: Effective configuration (see pkgboot.config).
        transport: Shared HTTP transport; built from ``network`` when None.

    Returns:
        The chain of strategies.

    Raises:
        ConfigError: If no source is configured, a source type is unknown,
            or force_source / prefer_source name a missing source.
    """
    logger = get_global_logger()
    package = PackageSpec.from_config(config.get("package") or {})
    if transport is None:
        transport = HttpTransport(NetworkSettings.from_config(config.get("network")))
    work_dir = _work_dir(config)

    strategies: list[FetchStrategy] = []
    for source in _ordered_sources(config):
        settings = {k: v for k, v in source.items() if k != "type"}
        strategies.append(
            get_strategy(
                source.get("type") or "",
                settings,
                package=package,
                transport=transport,
                work_dir=work_dir,
            )
        )

    chain = StrategyChain(strategies)
    logger.verbose("CHAIN", f"Sources: {chain.name}")
    return chain


def resolve_latest(
    config: dict[str, Any], transport: HttpTransport | None = None
) -> tuple[str, str]:
    """Return (latest version, name of the source that answered)."""
    chain = build_chain(config, transport)
    ignore_prerelease = not config.get("prerelease", False)
    version, strategy = run_with_fallback(
        chain.strategies, lambda s: s.get_latest_version(ignore_prerelease)
    )
    return version, strategy.name


def bootstrap(
    config: dict[str, Any],
    version: str | None = None,
    force: bool = False,
    stateless: bool = False,
    transport: HttpTransport | None = None,
) -> BootstrapResult:
    """Make sure the configured tool is installed at its target.

    Args:
        config: Effective configuration.
        version: Exact version to install. None resolves the latest one per
            source. "" asks each source for its own latest package without
            resolving.
        force: Download even if the state file says it is installed.
        stateless: Neither read nor write the state file.
        transport: Shared HTTP transport (mainly for tests).

    Returns:
        BootstrapResult describing what is now at the target.

    Raises:
        ConfigError: Invalid configuration.
        StrategyError: Every source failed; the last source's error.
    """
    logger = get_global_logger()
    target = target_path(config)
    ignore_prerelease = not config.get("prerelease", False)

    logger.step(1, 3, "Loading sources...")
    chain = build_chain(config, transport)

    tracker: StateTracker | None = None
    if not stateless and config.get("state_file"):
        tracker = StateTracker(Path(config["state_file"]))
        try:
            tracker.load()
            logger.verbose("STATE", f"Loaded state from {tracker.state_file}")
        except OSError as err:
            logger.warning("STATE", f"Failed to load state: {err}")
            tracker = None

    def install(strategy: FetchStrategy) -> tuple[str, str, str]:
        wanted = version
        if wanted is None:
            logger.step(2, 3, f"Resolving latest version ({strategy.name})...")
            wanted = strategy.get_latest_version(ignore_prerelease)
        if not force and tracker is not None and tracker.is_installed(target, wanted):
            logger.verbose("STATE", f"{wanted} already installed at {target}")
            return wanted, "", "up-to-date"
        logger.step(3, 3, f"Installing {wanted or 'latest'} from {strategy.name}...")
        digest = strategy.download_version(wanted, target)
        return wanted, digest, "installed"

    (installed, digest, status), strategy = run_with_fallback(
        chain.strategies, install
    )

    if tracker is not None and status == "installed":
        tracker.record_install(target, installed, strategy.name, digest)
        try:
            tracker.save()
            logger.verbose("STATE", f"Updated state file: {tracker.state_file}")
        except OSError as err:
            logger.warning("STATE", f"Failed to save state: {err}")

    return BootstrapResult(
        version=installed,
        source=strategy.name,
        target=target,
        sha256=digest,
        status=status,
    )


def validate_config(config: dict[str, Any]) -> ValidationResult:
    """Check a configuration without any network access."""
    errors: list[str] = []
    warnings: list[str] = []

    package = config.get("package")
    if not isinstance(package, dict) or not package.get("id"):
        errors.append("package: missing required field 'id'")
    if not config.get("target"):
        errors.append("missing required field 'target'")

    sources = config.get("sources")
    if not isinstance(sources, list) or not sources:
        errors.append("'sources' must be a non-empty list")
        sources = []

    known = available_strategies()
    types = [s.get("type") for s in sources if isinstance(s, dict)]
    for index, source in enumerate(sources):
        if not isinstance(source, dict):
            errors.append(f"sources[{index}]: must be a mapping")
        elif source.get("type") not in known:
            errors.append(
                f"sources[{index}]: unknown type {source.get('type')!r} "
                f"(available: {', '.join(known)})"
            )
    for dup in sorted({t for t in types if t and types.count(t) > 1}):
        warnings.append(f"source type {dup!r} configured more than once")

    for key in ("force_source", "prefer_source"):
        value = config.get(key)
        if value and value not in types:
            errors.append(f"{key} {value!r} is not a configured source")

    if not errors:
        try:
            chain = build_chain(config, HttpTransport())
        except ConfigError as err:
            errors.append(str(err))
        else:
            errors.extend(chain.validate_config())
    if len(sources) == 1 and not errors:
        warnings.append("only one source configured, no fallback available")

    return ValidationResult(
        status="valid" if not errors else "invalid",
        errors=errors,
        warnings=warnings,
        source_count=len(sources),
    )
