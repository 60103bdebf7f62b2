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

"""Command-line interface for pkgboot.

Commands:

    latest: Print the latest version available from the configured sources
    install: Install the latest (or a given) version at the target path
    compare: Compare two version strings with the pkgboot ordering
    validate: Check the configuration without network access

Example:
    Install the latest stable release:
        ```bash
        $ pkgboot install
        ```

    Install a specific pre-release from NuGet only:
        ```bash
        $ pkgboot install 9.0.0-alpha003 --force-source nuget
        ```

    Compare two versions:
        ```bash
        $ pkgboot compare 1.0.0-rc.2 1.0.0-rc.10
        1.0.0-rc.2 < 1.0.0-rc.10
        ```

Exit Codes:

- 0: Success
- 1: Error (configuration, network, download, or validation failure)

Note:
    Verbose mode shows full tracebacks on errors for debugging.
    Debug mode implies verbose mode.

"""

from __future__ import annotations

import argparse
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
import sys
import traceback
from typing import Any

from pkgboot.config import load_config
from pkgboot.core import bootstrap, resolve_latest, validate_config
from pkgboot.exceptions import ConfigError, PkgbootError, StrategyError
from pkgboot.logging import get_logger, set_global_logger
from pkgboot.versioning import compare_versions


def _configure_logger(args: argparse.Namespace) -> None:
    debug = getattr(args, "debug", False)
    verbose = getattr(args, "verbose", False)
    set_global_logger(get_logger(verbose=verbose, debug=debug))


def _overrides(args: argparse.Namespace) -> dict[str, Any]:
    target = getattr(args, "target", None)
    return {
        "prerelease": True if getattr(args, "prerelease", False) else None,
        "target": str(Path(target).resolve()) if target else None,
        "force_source": getattr(args, "force_source", None),
        "prefer_source": getattr(args, "prefer_source", None),
    }


def _load(args: argparse.Namespace) -> dict[str, Any]:
    config_path = Path(args.config) if args.config else None
    return load_config(config_path, overrides=_overrides(args))


def _report_error(args: argparse.Namespace, err: Exception) -> int:
    print(f"Error: {err}", file=sys.stderr)
    if getattr(args, "verbose", False) or getattr(args, "debug", False):
        traceback.print_exc()
    return 1


def cmd_latest(args: argparse.Namespace) -> int:
    """Handler for 'pkgboot latest'.

    Prints the latest version (and the source that supplied it) without
    downloading anything.
    """
    _configure_logger(args)
    try:
        config = _load(args)
        latest, source = resolve_latest(config)
    except PkgbootError as err:
        return _report_error(args, err)

    print(f"{latest} ({source})")
    return 0


def cmd_install(args: argparse.Namespace) -> int:
    """Handler for 'pkgboot install'.

    Resolves the version (unless given), downloads the package from the
    first source that works and places the executable at the target. The
    state file lets repeated runs skip unchanged installs.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Exit code (0 for success, 1 for failure).

    """
    _configure_logger(args)
    try:
        config = _load(args)
        result = bootstrap(
            config,
            version=args.version,
            force=args.force,
            stateless=args.stateless,
        )
    except ConfigError as err:
        return _report_error(args, err)
    except StrategyError as err:
        print(f"All sources failed; last tried: {err.source}", file=sys.stderr)
        return _report_error(args, err)
    except PkgbootError as err:
        return _report_error(args, err)

    print("=" * 70)
    print("BOOTSTRAP RESULTS")
    print("=" * 70)
    print(f"Version:  {result.version or '(source latest)'}")
    print(f"Source:   {result.source}")
    print(f"Target:   {result.target}")
    if result.sha256:
        print(f"SHA-256:  {result.sha256}")
    print(f"Status:   {result.status}")
    print("=" * 70)
    return 0


def cmd_compare(args: argparse.Namespace) -> int:
    """Handler for 'pkgboot compare A B'."""
    result = compare_versions(args.left, args.right)
    symbol = {-1: "<", 0: "==", 1: ">"}[result]
    print(f"{args.left} {symbol} {args.right}")
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Handler for 'pkgboot validate'.

    Validates the configuration without making network calls.
    """
    _configure_logger(args)
    try:
        config = _load(args)
    except PkgbootError as err:
        return _report_error(args, err)

    result = validate_config(config)

    print(f"Status:   {result.status.upper()}")
    print(f"Sources:  {result.source_count}")
    for warning in result.warnings:
        print(f"  [WARNING] {warning}")
    for error in result.errors:
        print(f"  [X] {error}")

    if result.status == "valid":
        print("[SUCCESS] Configuration is valid!")
        return 0
    print(f"[FAILED] Validation failed with {len(result.errors)} error(s).")
    return 1


def _package_version() -> str:
    try:
        return version("pkgboot")
    except PackageNotFoundError:
        from pkgboot import __version__

        return __version__


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=None,
        help="Path to the config file (default: ./pkgboot.yaml if present)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show detailed debugging output (implies --verbose)",
    )


def _add_source_selection(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--prerelease",
        action="store_true",
        help="Consider pre-release versions",
    )
    parser.add_argument(
        "--force-source",
        default=None,
        help="Use only this source type (no fallback)",
    )
    parser.add_argument(
        "--prefer-source",
        default=None,
        help="Try this source type first, then the others in config order",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pkgboot",
        description="pkgboot - install the latest release of a tool from "
        "NuGet, GitHub or a local feed",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"pkgboot {_package_version()}",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True,
    )

    # 'latest' command
    parser_latest = subparsers.add_parser(
        "latest",
        help="Print the latest available version",
    )
    _add_common(parser_latest)
    _add_source_selection(parser_latest)
    parser_latest.set_defaults(func=cmd_latest)

    # 'install' command
    parser_install = subparsers.add_parser(
        "install",
        help="Install the tool at the target path",
        description="Download the latest (or given) version and place the "
        "executable at the target path, falling back between sources.",
    )
    parser_install.add_argument(
        "version",
        nargs="?",
        default=None,
        help="Exact version to install (default: latest)",
    )
    parser_install.add_argument(
        "--target",
        default=None,
        help="Where to place the executable (default: from config)",
    )
    parser_install.add_argument(
        "--force",
        action="store_true",
        help="Download even if the state file says it is installed",
    )
    parser_install.add_argument(
        "--stateless",
        action="store_true",
        help="Disable state tracking",
    )
    _add_common(parser_install)
    _add_source_selection(parser_install)
    parser_install.set_defaults(func=cmd_install)

    # 'compare' command
    parser_compare = subparsers.add_parser(
        "compare",
        help="Compare two version strings",
    )
    parser_compare.add_argument("left", help="First version")
    parser_compare.add_argument("right", help="Second version")
    parser_compare.set_defaults(func=cmd_compare)

    # 'validate' command
    parser_validate = subparsers.add_parser(
        "validate",
        help="Validate the configuration (no network access)",
    )
    _add_common(parser_validate)
    parser_validate.set_defaults(func=cmd_validate)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the pkgboot CLI.

    This function is registered as the 'pkgboot' console script in
    pyproject.toml.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
