#!/usr/bin/env python3
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Option lookup for linear-git.

Options are looked up in this order, first match wins:

1. command-line flags
2. environment variables, LINEAR_<OPTION> (e.g. LINEAR_WORKSPACE)
3. .linear.toml at the repository root
4. $XDG_CONFIG_HOME/linear/linear.toml

Example .linear.toml:

    workspace = "acme"
    team_id = "ENG"
    prefer_graphite = true
"""

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Self

from .errors import ConfigurationError

logger = logging.getLogger("linear_git.config")

CONFIG_FILENAME = ".linear.toml"
ENV_PREFIX = "LINEAR_"
OPTIONS = ("workspace", "team_id", "api_key", "prefer_graphite")


def get_xdg_config_file() -> Path:
    return (
        Path(os.getenv("XDG_CONFIG_HOME", Path.home() / ".config"))
        / "linear"
        / "linear.toml"
    )


def _stringify(value: object) -> str:
    # TOML booleans are compared against "true", not Python's "True"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def load_config_file(path: Path) -> dict[str, str]:
    """
    Load a TOML config file into a flat option dictionary.

    Missing files give an empty dictionary. Keys are normalised so that
    "prefer-graphite" and "prefer_graphite" are the same option, and
    nested tables are ignored.

    Raises:
        ConfigurationError: if the file exists but cannot be parsed
    """
    if not path.exists():
        return {}

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (tomllib.TOMLDecodeError, OSError) as e:
        raise ConfigurationError(f"Unable to read config file {path}: {e}") from e

    logger.debug(f"Loaded config from {path}")
    return {
        str(k).replace("-", "_"): _stringify(v)
        for k, v in data.items()
        if not isinstance(v, dict)
    }


@dataclass
class Config:
    """
    Merged option sources for a single invocation.

    Attributes:
        overrides: Options given on the command line
        environ: Environment to read LINEAR_* variables from
        files: Parsed config files, highest precedence first
    """

    overrides: dict[str, str] = field(default_factory=dict)
    environ: dict[str, str] = field(default_factory=dict)
    files: list[dict[str, str]] = field(default_factory=list)

    @classmethod
    def load(
        cls,
        repo_dir: Path,
        overrides: dict[str, str | None] | None = None,
        environ: dict[str, str] | None = None,
    ) -> Self:
        """
        Collect options for a command run in repo_dir.

        Args:
            repo_dir: Repository root, searched for .linear.toml
            overrides: Command-line values; None entries are dropped
            environ: Defaults to os.environ
        """
        files = [
            load_config_file(repo_dir / CONFIG_FILENAME),
            load_config_file(get_xdg_config_file()),
        ]
        return cls(
            overrides={k: v for k, v in (overrides or {}).items() if v is not None},
            environ=dict(os.environ if environ is None else environ),
            files=files,
        )

    def get_option(self, name: str) -> str | None:
        if name in self.overrides:
            return self.overrides[name]

        value = self.environ.get(f"{ENV_PREFIX}{name.upper()}")
        if value:
            return value

        for options in self.files:
            if name in options:
                return options[name]
        return None

    def require_option(self, name: str, description: str) -> str:
        value = self.get_option(name)
        if not value:
            raise ConfigurationError(
                f"{description} is not set via command line, configuration file, or environment."
            )
        return value

    def workspace(self) -> str:
        return self.require_option("workspace", "workspace")
