#!/usr/bin/env python3
# SPDX-License-Identifier: GPL-3.0-or-later

"""Open Linear issue, project and team pages in the browser or the app."""

import base64
import json
import logging
import sys
from pathlib import Path
from typing import Any

import click

from .cmd import run_command
from .config import Config
from .errors import ConfigurationError, ResolutionError
from .linear import get_issue_identifier, get_team_key

logger = logging.getLogger("linear_git.pages")

LINEAR_HOST = "linear.app"
LINEAR_APP_NAME = "Linear"

# Issues assigned to the current user
ACTIVE_ASSIGNEE_FILTER = {"and": [{"assignee": {"or": [{"isMe": {"eq": True}}]}}]}


def encode_filter(filter_obj: dict[str, Any]) -> str:
    """Encode a view filter as compact JSON in unpadded URL-safe base64."""
    text = json.dumps(filter_obj, separators=(",", ":"), sort_keys=True)
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")


def decode_filter(encoded: str) -> dict[str, Any]:
    padding = "=" * (-len(encoded) % 4)
    return json.loads(base64.urlsafe_b64decode(encoded + padding))


def issue_url(workspace: str, issue_id: str) -> str:
    return f"https://{LINEAR_HOST}/{workspace}/issue/{issue_id}"


def project_url(workspace: str, project_id: str) -> str:
    return f"https://{LINEAR_HOST}/{workspace}/project/{project_id}"


def team_active_url(workspace: str, team_id: str) -> str:
    encoded = encode_filter(ACTIVE_ASSIGNEE_FILTER)
    return f"https://{LINEAR_HOST}/{workspace}/team/{team_id}/active?filter={encoded}"


def open_in_app(url: str) -> None:
    if sys.platform == "darwin":
        result = run_command(["open", "-a", LINEAR_APP_NAME, url], check=False)
        if result.returncode == 0:
            return
        logger.warning(
            f"Unable to open {LINEAR_APP_NAME}.app ({result.stderr.strip()}), using the web browser"
        )
    else:
        logger.warning(
            f"Opening in {LINEAR_APP_NAME}.app is only supported on macOS, using the web browser"
        )
    click.launch(url)


def open_url(url: str, app: bool = False) -> None:
    destination = f"{LINEAR_APP_NAME}.app" if app else "web browser"
    click.echo(f"Opening {url} in {destination}")
    if app:
        open_in_app(url)
    else:
        click.launch(url)


def open_issue_page(
    config: Config, repo_dir: Path, provided_id: str | None = None, app: bool = False
) -> str:
    """
    Open the page of the given issue, or the one named by the current branch.

    Returns:
        The URL that was opened

    Raises:
        ResolutionError: if no issue id can be derived
        ConfigurationError: if the workspace is not configured
    """
    issue_id = get_issue_identifier(
        provided_id, get_team_key(config, repo_dir), repo_dir
    )
    if not issue_id:
        raise ResolutionError(
            "The current branch does not contain a valid linear issue id."
        )

    url = issue_url(config.workspace(), issue_id)
    open_url(url, app)
    return url


def open_project_page(config: Config, project_id: str, app: bool = False) -> str:
    url = project_url(config.workspace(), project_id)
    open_url(url, app)
    return url


def open_team_assignee_view(config: Config, repo_dir: Path, app: bool = False) -> str:
    """Open the active issues of the team that are assigned to the current user."""
    team_id = get_team_key(config, repo_dir)
    if not team_id:
        raise ConfigurationError(
            "Could not determine team id from configuration or directory name."
        )

    url = team_active_url(config.workspace(), team_id)
    open_url(url, app)
    return url
