"""
Configuration loading and merging for pkgboot.

Configuration is assembled from three layers, each one overriding the last:

1. **Built-in defaults** (DEFAULT_CONFIG in this module)
   - NuGet feed as the only source, stable releases only
2. **Configuration file** (pkgboot.yaml, optional)
   - The package to bootstrap, its target path and its sources
3. **Overrides** (from the CLI)
   - --prerelease, --target, --force-source, --prefer-source

Merge Behavior
--------------
Deep merge with "last wins" semantics:
  - **Dicts**: Recursively merged (keys from overlay override base)
  - **Lists**: Completely replaced (a file's ``sources`` replaces the default)
  - **Scalars**: Overwritten (strings, numbers, booleans)

Environment Expansion
---------------------
After merging, ``${VAR}`` references inside string values are replaced with
the value of the environment variable VAR (empty when unset). A ``.env``
file in the working directory is loaded first with python-dotenv, which is
the usual place for a GitHub token.

Path Resolution
---------------
``target``, ``work_dir``, ``state_file`` and ``local`` source paths are
resolved against the CONFIG FILE location when relative, so a configuration
checked in next to a project works from any working directory.

Error Handling
--------------
- ConfigError: config file missing, empty, not a mapping, or invalid YAML
- All errors are chained with "from err" for better debugging

Examples
--------
    >>> from pathlib import Path
    >>> from pkgboot.config import load_config
    >>> cfg = load_config(Path("pkgboot.yaml"), overrides={"prerelease": True})
    >>> cfg["package"]["id"]
    'Paket'
"""

from __future__ import annotations

import copy
import os
from pathlib import Path
import re
from typing import Any

from dotenv import find_dotenv, load_dotenv
import yaml

from pkgboot.exceptions import ConfigError
from pkgboot.logging import get_global_logger

DEFAULT_CONFIG_NAME = "pkgboot.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "package": {
        "id": "Paket",
        "executable": "paket.exe",
        "archive_path": None,
    },
    "target": ".paket/paket.exe",
    "prerelease": False,
    "work_dir": None,
    "state_file": ".paket/pkgboot.state.json",
    "force_source": None,
    "prefer_source": None,
    "sources": [
        {"type": "nuget", "feed": "https://www.nuget.org/api/v2"},
    ],
    "network": {
        "proxy": None,
        "headers": {},
        "timeout": 60,
        "user_agent": "pkgboot",
    },
}

_ENV_REF = re.compile(r"\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)\}")

# -------------------------------
# YAML helpers
# -------------------------------


def _load_yaml_file(p: Path) -> dict[str, Any]:
    """
    Load a YAML file that must contain a mapping.

    Raises:
      ConfigError - file missing, unreadable, empty, invalid or not a mapping
    """
    if not p.exists():
        raise ConfigError(f"config file not found: {p}")
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigError(f"Error parsing YAML: {p}: {err}") from err
    except OSError as err:
        raise ConfigError(f"cannot read config file {p}: {err}") from err
    if data is None:
        raise ConfigError(f"YAML file is empty: {p}")
    if not isinstance(data, dict):
        raise ConfigError(f"top level of {p} must be a mapping")
    return data


def _deep_merge_dicts(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """
    Deep-merge two dicts with "overlay wins".

      - dict + dict -> deep merge
      - anything else -> overlay replaces base (lists included)
    """
    result = copy.deepcopy(base)
    for k, v in overlay.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge_dicts(result[k], v)
        else:
            result[k] = copy.deepcopy(v)
    return result


def _expand_env(value: Any) -> Any:
    """Replace ${VAR} references in every string inside ``value``."""
    if isinstance(value, str):
        return _ENV_REF.sub(lambda m: os.environ.get(m.group("name"), ""), value)
    if isinstance(value, dict):
        return {k: _expand_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env(v) for v in value]
    return value


def _resolve_known_paths(cfg: dict[str, Any], base_dir: Path) -> None:
    """Resolve relative path fields against ``base_dir`` in place."""
    for key in ("target", "work_dir", "state_file"):
        value = cfg.get(key)
        if value and not Path(value).is_absolute():
            cfg[key] = str((base_dir / value).resolve())

    for source in cfg.get("sources") or []:
        if isinstance(source, dict) and source.get("type") == "local":
            path = source.get("path")
            if path and not Path(path).is_absolute():
                source["path"] = str((base_dir / path).resolve())


# -------------------------------
# Public API
# -------------------------------


def load_config(
    path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Load the effective configuration.

    Args:
        path: Config file. When None, ``pkgboot.yaml`` in the working
            directory is used if it exists; built-in defaults otherwise.
        overrides: Values layered on top (None values are ignored).

    Returns:
        The merged, env-expanded configuration dict.

    Raises:
        ConfigError: If an explicit ``path`` does not exist or any file is
            invalid.
    """
    logger = get_global_logger()
    load_dotenv(find_dotenv(usecwd=True))

    cfg = copy.deepcopy(DEFAULT_CONFIG)
    base_dir = Path.cwd()

    if path is None and Path(DEFAULT_CONFIG_NAME).exists():
        path = Path(DEFAULT_CONFIG_NAME)

    if path is not None:
        path = Path(path)
        logger.verbose("CONFIG", f"Loading config: {path}")
        cfg = _deep_merge_dicts(cfg, _load_yaml_file(path))
        base_dir = path.resolve().parent
    else:
        logger.verbose("CONFIG", "No config file, using built-in defaults")

    if overrides:
        applied = {k: v for k, v in overrides.items() if v is not None}
        if applied:
            logger.debug("CONFIG", f"Overrides: {applied}")
            cfg = _deep_merge_dicts(cfg, applied)

    cfg = _expand_env(cfg)
    _resolve_known_paths(cfg, base_dir)
    return cfg
