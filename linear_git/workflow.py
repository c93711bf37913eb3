#!/usr/bin/env python3
# SPDX-License-Identifier: GPL-3.0-or-later

"""Start working on an issue: set up its branch, then mark it as started."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import click
import httpx

from .branch import BranchOutcome, prompt_existing_branch, resolve_branch
from .config import Config
from .errors import LinearApiError, LinearGitError
from .linear import LinearClient, WorkflowState
from .vcs import backend_from_option, vcs_for

logger = logging.getLogger("linear_git.workflow")


@dataclass
class StartOutcome:
    """
    Attributes:
        branch: Outcome of the branch switch/creation
        state: The workflow state the issue was moved to, None if unchanged
    """

    branch: BranchOutcome
    state: WorkflowState | None = None


def start_work_on_issue(
    client: LinearClient,
    config: Config,
    issue_id: str,
    team_id: str,
    git_source_ref: str | None = None,
    repo_dir: Path | None = None,
    choose: Callable[[str], str] = prompt_existing_branch,
) -> StartOutcome:
    """
    Switch to (or create) the issue's branch and move the issue to the
    team's started state.

    The issue state is only changed after the branch operation succeeded,
    and a failed state update does not undo the branch operation.

    Raises:
        LinearGitError: if the issue details cannot be fetched
    """
    issue = client.fetch_issue_details(issue_id, include_branch_name=True)
    if not issue.branch_name:
        raise LinearApiError(f"Linear did not return a branch name for {issue_id}")

    backend = backend_from_option(config.get_option("prefer_graphite"))
    logger.debug(f"Using {backend} for branch operations")
    vcs = vcs_for(backend, repo_dir)

    outcome = StartOutcome(
        branch=resolve_branch(
            vcs, repo_dir, issue.branch_name, git_source_ref, choose=choose
        )
    )
    if not outcome.branch.succeeded:
        click.secho(
            "Branch operation failed - issue state not updated", err=True, fg="yellow"
        )
        return outcome

    try:
        state = client.get_started_state(team_id)
        client.update_issue_state(issue_id, state.id)
    except (LinearGitError, httpx.HTTPError) as e:
        click.secho(f"Failed to update issue state: {e}", err=True, fg="red")
        return outcome

    click.secho(f"✓ Issue state updated to '{state.name}'", fg="green")
    outcome.state = state
    return outcome
