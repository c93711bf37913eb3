#!/usr/bin/env python3
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pick the branch to work on for an issue, creating it if needed."""

import enum
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import click

from .git import branch_exists
from .vcs import Vcs

logger = logging.getLogger("linear_git.branch")

SWITCH = "switch"
CREATE = "create"


class BranchAction(enum.StrEnum):
    SWITCHED = "switched"
    CREATED = "created"


@dataclass
class BranchOutcome:
    """
    Result of resolving the work branch.

    Attributes:
        branch: The branch that was switched to or created
        action: Whether an existing branch was checked out or a new one created
        succeeded: Whether the underlying git/gt command succeeded
    """

    branch: str
    action: BranchAction
    succeeded: bool


def prompt_existing_branch(branch: str) -> str:
    """Ask whether to switch to an existing branch or create a new one."""
    click.secho(
        f"Branch {branch} already exists. What would you like to do?", bold=True
    )
    click.echo(f"  {SWITCH}: Switch to existing branch")
    click.echo(f"  {CREATE}: Create new branch with suffix")
    return click.prompt(
        "Choice",
        type=click.Choice([SWITCH, CREATE]),
        default=SWITCH,
    )


def find_available_branch_name(repo_dir: Path | None, base_name: str) -> str:
    """
    Return the first of base_name-1, base_name-2, ... that does not exist.

    Suffixes are probed strictly in order and gaps are not reused. There
    is no upper bound on the suffix.
    """
    suffix = 1
    branch = f"{base_name}-{suffix}"
    while branch_exists(repo_dir, branch):
        logger.debug(f"Branch {branch} exists, trying next suffix")
        suffix += 1
        branch = f"{base_name}-{suffix}"
    return branch


def resolve_branch(
    vcs: Vcs,
    repo_dir: Path | None,
    branch_name: str,
    source_ref: str | None = None,
    choose: Callable[[str], str] = prompt_existing_branch,
) -> BranchOutcome:
    """
    Switch to or create the branch for an issue.

    A branch that does not exist yet is created from source_ref (HEAD if
    None). For an existing branch choose() decides between switching to
    it and creating a suffixed sibling branch.

    Args:
        vcs: Backend that runs checkout/create
        repo_dir: Repository to check branch existence in
        branch_name: Branch name suggested for the issue
        source_ref: Ref to base a new branch on
        choose: Called with the existing branch name, returns "switch" or "create"
    """
    if not branch_exists(repo_dir, branch_name):
        return BranchOutcome(
            branch=branch_name,
            action=BranchAction.CREATED,
            succeeded=vcs.create(branch_name, source_ref),
        )

    if choose(branch_name) == SWITCH:
        return BranchOutcome(
            branch=branch_name,
            action=BranchAction.SWITCHED,
            succeeded=vcs.checkout(branch_name),
        )

    new_branch = find_available_branch_name(repo_dir, branch_name)
    logger.info(f"Creating {new_branch} instead of existing {branch_name}")
    return BranchOutcome(
        branch=new_branch,
        action=BranchAction.CREATED,
        succeeded=vcs.create(new_branch, source_ref),
    )
