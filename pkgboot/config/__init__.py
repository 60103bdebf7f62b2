"""Configuration management for pkgboot.

Public API:

- load_config: Load defaults, the config file and overrides into one dict

Example:
    Basic usage:

        from pathlib import Path
        from pkgboot.config import load_config

        config = load_config(Path("pkgboot.yaml"))
        print(config["target"])

"""

from .loader import DEFAULT_CONFIG, load_config

__all__ = ["DEFAULT_CONFIG", "load_config"]
