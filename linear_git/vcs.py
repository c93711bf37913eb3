#!/usr/bin/env python3
# SPDX-License-Identifier: GPL-3.0-or-later

"""Branch checkout and creation with git or Graphite (gt)."""

import enum
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import click

from .cmd import run_command, run_interactive

logger = logging.getLogger("linear_git.vcs")


class VcsBackend(enum.StrEnum):
    GIT = "git"
    GRAPHITE = "graphite"


def backend_from_option(prefer_graphite: str | None) -> VcsBackend:
    """Graphite is only used when prefer_graphite is exactly "true"."""
    return VcsBackend.GRAPHITE if prefer_graphite == "true" else VcsBackend.GIT


class Vcs(Protocol):
    def checkout(self, branch: str) -> bool: ...

    def create(self, branch: str, source_ref: str | None = None) -> bool: ...


@dataclass
class GitVcs:
    """Plain git, run silently with captured output."""

    repo_dir: Path | None = None

    def _git(self, args: list[str]) -> bool:
        try:
            result = run_command(["git", *args], cwd=self.repo_dir, check=False)
        except OSError as e:
            logger.error(f"Unable to run git: {e}")
            return False
        if result.returncode != 0:
            logger.info(f"git {' '.join(args)} failed: {result.stderr.strip()}")
        return result.returncode == 0

    def checkout(self, branch: str) -> bool:
        if not self._git(["checkout", branch]):
            return False
        click.secho(f"✓ Switched to '{branch}'", fg="green")
        return True

    def create(self, branch: str, source_ref: str | None = None) -> bool:
        if not self._git(["checkout", "-b", branch, source_ref or "HEAD"]):
            return False
        click.secho(f"✓ Created and switched to branch '{branch}'", fg="green")
        return True


@dataclass
class GraphiteVcs:
    """
    Graphite's gt command, attached to the terminal so its own prompts
    reach the user.
    """

    repo_dir: Path | None = None

    def _gt(self, args: list[str]) -> bool:
        try:
            return run_interactive(["gt", *args], cwd=self.repo_dir) == 0
        except OSError as e:
            logger.error(f"Unable to run gt: {e}")
            return False

    def checkout(self, branch: str) -> bool:
        if not self._gt(["checkout", branch]):
            return False
        click.secho(f"✓ Switched to '{branch}' using Graphite", fg="green")
        return True

    def create(self, branch: str, source_ref: str | None = None) -> bool:
        # gt create always stacks on the current branch
        if source_ref is not None:
            logger.warning(
                f"Graphite does not support a source ref, ignoring {source_ref}"
            )
        if not self._gt(["create", branch]):
            return False
        click.secho(
            f"✓ Created and switched to branch '{branch}' using Graphite", fg="green"
        )
        return True


def vcs_for(backend: VcsBackend, repo_dir: Path | None = None) -> Vcs:
    if backend == VcsBackend.GRAPHITE:
        return GraphiteVcs(repo_dir=repo_dir)
    elif backend == VcsBackend.GIT:
        return GitVcs(repo_dir=repo_dir)
    else:
        raise NotImplementedError(f"Error: Invalid VCS backend {backend}")
