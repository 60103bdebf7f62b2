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

"""Ordered fallback over several strategies.

A StrategyChain holds strategies in priority order. Each operation is tried
against the first strategy; when it raises a StrategyError the next one is
tried, and so on. If every strategy fails, the error of the LAST attempted
strategy is raised, so the reported source is the one tried last.

Only StrategyError triggers a fallback. ConfigError and programming errors
propagate immediately. There is no retry within a single strategy.

The chain satisfies the FetchStrategy protocol itself, and exposes
``fallback_strategy``: the chain of the remaining strategies (None for the
last one).

Example:
    ```python
    from pkgboot.strategies.chain import StrategyChain

    chain = StrategyChain([github, nuget])
    version = chain.get_latest_version(ignore_prerelease=True)
    chain.download_version(version, Path(".paket/paket.exe"))
    ```
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TypeVar

from pkgboot.exceptions import ConfigError, StrategyError
from pkgboot.logging import get_global_logger

from .base import FetchStrategy

T = TypeVar("T")


def run_with_fallback(
    strategies: Sequence[FetchStrategy],
    operation: Callable[[FetchStrategy], T],
) -> tuple[T, FetchStrategy]:
    """Run ``operation`` against each strategy until one succeeds.

    Args:
        strategies: Strategies in priority order.
        operation: Callable receiving a strategy; may raise StrategyError.

    Returns:
        A tuple (result, strategy) for the first strategy that succeeded.

    Raises:
        StrategyError: The last strategy's error when all of them fail.
        ConfigError: If ``strategies`` is empty.
    """
    logger = get_global_logger()
    if not strategies:
        raise ConfigError("no sources configured")

    for strategy, next_strategy in zip(strategies, strategies[1:]):
        try:
            return operation(strategy), strategy
        except StrategyError as err:
            logger.warning("CHAIN", f"{err} -- falling back to {next_strategy.name}")

    last = strategies[-1]
    try:
        return operation(last), last
    except StrategyError as err:
        logger.verbose("CHAIN", f"Last source {last.name} failed: {err}")
        raise


class StrategyChain:
    """Strategies tried in a fixed priority order."""

    def __init__(self, strategies: Sequence[FetchStrategy]) -> None:
        if not strategies:
            raise ConfigError("no sources configured")
        self.strategies: tuple[FetchStrategy, ...] = tuple(strategies)

    @property
    def name(self) -> str:
        return " -> ".join(s.name for s in self.strategies)

    @property
    def primary(self) -> FetchStrategy:
        return self.strategies[0]

    @property
    def fallback_strategy(self) -> StrategyChain | None:
        """Chain of the strategies after the primary one, if any."""
        if len(self.strategies) < 2:
            return None
        return StrategyChain(self.strategies[1:])

    def __iter__(self):
        return iter(self.strategies)

    def __len__(self) -> int:
        return len(self.strategies)

    def get_latest_version(self, ignore_prerelease: bool) -> str:
        version, _ = run_with_fallback(
            self.strategies, lambda s: s.get_latest_version(ignore_prerelease)
        )
        return version

    def download_version(self, version: str, target: Path) -> str:
        digest, _ = run_with_fallback(
            self.strategies, lambda s: s.download_version(version, target)
        )
        return digest

    def validate_config(self) -> list[str]:
        errors: list[str] = []
        for strategy in self.strategies:
            errors.extend(strategy.validate_config())
        return errors
