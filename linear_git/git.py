#!/usr/bin/env python3
# SPDX-License-Identifier: GPL-3.0-or-later

"""Read-only git repository queries."""

import logging
import subprocess
from pathlib import Path

from .cmd import run_command

logger = logging.getLogger("linear_git.git")


def get_branch(repo_dir: Path, ref: str = "HEAD") -> str:
    """
    Get the branch name for a given ref (commit-ish).

    Args:
        repo_dir: Path to git repository
        ref: Git ref (branch name, HEAD, etc.). Default: HEAD

    Returns:
        The branch name

    Raises:
        subprocess.CalledProcessError if ref doesn't exist or not a git repo
    """
    result = run_command(
        ["git", "rev-parse", "--abbrev-ref", "--verify", ref],
        cwd=repo_dir,
    )
    return result.stdout.strip()


def branch_exists(repo_dir: Path, branch: str) -> bool:
    result = run_command(
        ["git", "rev-parse", "--verify", f"refs/heads/{branch}"],
        cwd=repo_dir,
        check=False,
    )
    return result.returncode == 0


def get_repo_root(path: Path) -> Path:
    """
    Return the top-level directory of the repository containing path.

    Outside of a git repository (or without git installed) path itself
    is returned.
    """
    try:
        result = run_command(["git", "rev-parse", "--show-toplevel"], cwd=path)
    except (subprocess.CalledProcessError, OSError) as e:
        logger.debug(f"{path} is not inside a git repository: {e}")
        return path
    return Path(result.stdout.strip())
