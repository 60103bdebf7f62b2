"""
Tests for pkgboot.strategies.chain module.

Tests ordered fallback including:
- Primary success (fallback untouched)
- Fallback after SourceUnavailable / NoVersionsFound / DownloadFailed
- Last error reported when every source fails
- ConfigError is not a fallback trigger
"""

from __future__ import annotations

from pathlib import Path

import pytest

from pkgboot.exceptions import (
    ConfigError,
    DownloadFailed,
    NoVersionsFound,
    SourceUnavailable,
)
from pkgboot.logging import set_global_logger
from pkgboot.strategies import StrategyChain, run_with_fallback


class FakeStrategy:
    """In-memory source recording the calls it receives."""

    def __init__(self, name, latest=None, error=None, download_error=None):
        self.name = name
        self.latest = latest
        self.error = error
        self.download_error = download_error
        self.calls: list[tuple] = []

    def get_latest_version(self, ignore_prerelease: bool) -> str:
        self.calls.append(("latest", ignore_prerelease))
        if self.error is not None:
            raise self.error
        return self.latest

    def download_version(self, version: str, target: Path) -> str:
        self.calls.append(("download", version, target))
        if self.download_error is not None:
            raise self.download_error
        target.write_text(f"{self.name}:{version}")
        return f"sha-{self.name}"

    def validate_config(self) -> list[str]:
        return [f"{self.name}: problem"] if self.error else []


class RecordingLogger:
    """Logger capturing warnings."""

    def __init__(self):
        self.warnings: list[str] = []

    def step(self, step, total, message):
        pass

    def warning(self, prefix, message):
        self.warnings.append(f"{prefix}: {message}")

    def verbose(self, prefix, message):
        pass

    def debug(self, prefix, message):
        pass


class TestFallback:
    """Tests for get_latest_version / download_version across sources."""

    def test_primary_success_skips_fallback(self):
        """Test that the fallback is not called when the primary works."""
        primary = FakeStrategy("github", latest="8.0.0")
        fallback = FakeStrategy("nuget", latest="7.0.0")
        chain = StrategyChain([primary, fallback])

        assert chain.get_latest_version(ignore_prerelease=True) == "8.0.0"
        assert fallback.calls == []

    def test_unavailable_primary_uses_fallback(self):
        """Test that SourceUnavailable hands over to the fallback."""
        primary = FakeStrategy("github", error=SourceUnavailable("down", source="github"))
        fallback = FakeStrategy("nuget", latest="7.0.0")
        chain = StrategyChain([primary, fallback])

        assert chain.get_latest_version(ignore_prerelease=False) == "7.0.0"
        assert fallback.calls == [("latest", False)]

    def test_no_versions_primary_uses_fallback(self):
        """Test that NoVersionsFound hands over to the fallback."""
        primary = FakeStrategy("github", error=NoVersionsFound("none", source="github"))
        fallback = FakeStrategy("nuget", latest="7.0.0")

        assert StrategyChain([primary, fallback]).get_latest_version(True) == "7.0.0"

    def test_all_fail_raises_last_error(self):
        """Test that the last attempted source's error is raised."""
        first = SourceUnavailable("github down", source="github")
        last = SourceUnavailable("nuget down", source="nuget")
        chain = StrategyChain(
            [FakeStrategy("github", error=first), FakeStrategy("nuget", error=last)]
        )

        with pytest.raises(SourceUnavailable) as exc_info:
            chain.get_latest_version(ignore_prerelease=True)

        assert exc_info.value is last
        assert exc_info.value.source == "nuget"

    def test_single_failing_source_raises_its_error(self):
        """Test that a lone failing source raises its own error without warnings."""
        logger = RecordingLogger()
        set_global_logger(logger)
        error = NoVersionsFound("empty feed", source="nuget")

        with pytest.raises(NoVersionsFound) as exc_info:
            run_with_fallback(
                (FakeStrategy("nuget", error=error),),
                lambda s: s.get_latest_version(True),
            )

        assert exc_info.value is error
        assert logger.warnings == []

    def test_download_falls_back(self, tmp_test_dir):
        """Test that DownloadFailed hands the download to the fallback."""
        target = tmp_test_dir / "paket.exe"
        primary = FakeStrategy(
            "github", download_error=DownloadFailed("404", source="github")
        )
        fallback = FakeStrategy("nuget")
        chain = StrategyChain([primary, fallback])

        assert chain.download_version("8.0.0", target) == "sha-nuget"
        assert target.read_text() == "nuget:8.0.0"

    def test_config_error_is_not_caught(self):
        """Test that ConfigError propagates without trying the fallback."""
        primary = FakeStrategy("github", error=ConfigError("bad regex"))
        fallback = FakeStrategy("nuget", latest="7.0.0")

        with pytest.raises(ConfigError):
            StrategyChain([primary, fallback]).get_latest_version(True)
        assert fallback.calls == []

    def test_fallback_warning_logged(self):
        """Test that each hand-over is reported as a warning."""
        logger = RecordingLogger()
        set_global_logger(logger)
        chain = StrategyChain(
            [
                FakeStrategy("github", error=SourceUnavailable("down", source="github")),
                FakeStrategy("nuget", latest="1.0.0"),
            ]
        )

        chain.get_latest_version(True)

        assert len(logger.warnings) == 1
        assert "falling back to nuget" in logger.warnings[0]


class TestStrategyChain:
    """Tests for the chain's structure."""

    def test_fallback_strategy_links(self):
        """Test that fallback_strategy walks the remaining sources."""
        a, b, c = FakeStrategy("a"), FakeStrategy("b"), FakeStrategy("c")
        chain = StrategyChain([a, b, c])

        assert chain.primary is a
        assert chain.fallback_strategy.primary is b
        assert chain.fallback_strategy.fallback_strategy.primary is c
        assert chain.fallback_strategy.fallback_strategy.fallback_strategy is None

    def test_name_and_len(self):
        """Test the joined name and length."""
        chain = StrategyChain([FakeStrategy("github"), FakeStrategy("nuget")])
        assert chain.name == "github -> nuget"
        assert len(chain) == 2
        assert [s.name for s in chain] == ["github", "nuget"]

    def test_empty_chain_rejected(self):
        """Test that a chain needs at least one source."""
        with pytest.raises(ConfigError):
            StrategyChain([])
        with pytest.raises(ConfigError):
            run_with_fallback([], lambda s: s)

    def test_validate_config_aggregates(self):
        """Test that validation problems from all sources are collected."""
        chain = StrategyChain(
            [
                FakeStrategy("github", error=SourceUnavailable("x", source="github")),
                FakeStrategy("nuget"),
                FakeStrategy("local", error=SourceUnavailable("x", source="local")),
            ]
        )
        assert chain.validate_config() == ["github: problem", "local: problem"]

    def test_run_with_fallback_reports_strategy(self):
        """Test that run_with_fallback returns the succeeding strategy."""
        failing = FakeStrategy("github", error=SourceUnavailable("x", source="github"))
        working = FakeStrategy("nuget", latest="2.0.0")

        result, strategy = run_with_fallback(
            [failing, working], lambda s: s.get_latest_version(True)
        )

        assert result == "2.0.0"
        assert strategy is working
