#!/usr/bin/env python3
# SPDX-License-Identifier: GPL-3.0-or-later

import logging
import sys
from dataclasses import dataclass
from functools import cached_property
from pathlib import Path

import click
import rich.logging

from .config import Config
from .errors import ConfigurationError, LinearGitError, ResolutionError
from .git import get_repo_root
from .linear import LinearClient, get_issue_identifier, get_team_key
from .pages import open_issue_page, open_project_page, open_team_assignee_view
from .workflow import start_work_on_issue

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[rich.logging.RichHandler(rich_tracebacks=True)],
)
logger = logging.getLogger("linear_git")


@dataclass
class Context:
    repo_dir: Path
    overrides: dict[str, str | None]

    @cached_property
    def config(self) -> Config:
        """Options are only read once a command needs them."""
        return Config.load(self.repo_dir, self.overrides)


def fail(ctx: click.Context, error: LinearGitError) -> None:
    click.secho(f"Error: {error}", err=True, fg="red")
    ctx.exit(1)


def app_option(f):
    return click.option(
        "--app/--web",
        default=False,
        help="Open in the Linear desktop app instead of the web browser (default: --web)",
    )(f)


@click.group()
@click.option("-v", "--verbose", count=True, help="increase verbosity")
@click.option("--workspace", default=None, help="Linear workspace slug")
@click.option("--team-id", default=None, help="Linear team key, e.g. ENG")
@click.option(
    "--api-key",
    default=None,
    help="Linear personal API key (default: $LINEAR_API_KEY or config file)",
)
@click.option(
    "--prefer-graphite/--no-prefer-graphite",
    default=None,
    help="Use Graphite (gt) instead of git for branch operations",
)
@click.pass_context
def linear_git(
    ctx: click.Context,
    verbose: int,
    workspace: str | None,
    team_id: str | None,
    api_key: str | None,
    prefer_graphite: bool | None,
) -> None:
    """linear-git: Open Linear pages and start work on issues from git."""

    verbose_levels = {0: logging.ERROR, 1: logging.INFO, 2: logging.DEBUG}
    logger.setLevel(verbose_levels.get(verbose, logging.DEBUG))
    logger.debug(f"Verbose level set {logger.getEffectiveLevel()}")

    overrides = {
        "workspace": workspace,
        "team_id": team_id,
        "api_key": api_key,
        "prefer_graphite": None,
    }
    if prefer_graphite is not None:
        overrides["prefer_graphite"] = "true" if prefer_graphite else "false"

    ctx.obj = Context(
        repo_dir=get_repo_root(Path.cwd().resolve()), overrides=overrides
    )


@linear_git.group("issue")
def cmd_issue() -> None:
    """Work with Linear issues."""


@cmd_issue.command("open")
@click.argument("issue_id", required=False)
@app_option
@click.pass_context
def cmd_issue_open(ctx: click.Context, issue_id: str | None, app: bool) -> None:
    """
    Open an issue page.

    ISSUE_ID may be a full identifier (ENG-123) or an issue number of the
    current team. If omitted, the issue named in the current branch is used.
    """
    try:
        open_issue_page(ctx.obj.config, ctx.obj.repo_dir, issue_id, app=app)
    except LinearGitError as e:
        fail(ctx, e)


@cmd_issue.command("id")
@click.argument("issue_id", required=False)
@click.pass_context
def cmd_issue_id(ctx: click.Context, issue_id: str | None) -> None:
    """Print the issue identifier for ISSUE_ID or the current branch."""
    try:
        team_key = get_team_key(ctx.obj.config, ctx.obj.repo_dir)
    except LinearGitError as e:
        fail(ctx, e)
    resolved = get_issue_identifier(issue_id, team_key, ctx.obj.repo_dir)
    if not resolved:
        fail(
            ctx,
            ResolutionError(
                "The current branch does not contain a valid linear issue id."
            ),
        )
    click.echo(resolved)


@cmd_issue.command("start")
@click.argument("issue_id", required=False)
@click.option(
    "--from",
    "git_source_ref",
    default=None,
    help="Ref to create the new branch from (default: HEAD, ignored with Graphite)",
)
@click.pass_context
def cmd_issue_start(
    ctx: click.Context, issue_id: str | None, git_source_ref: str | None
) -> None:
    """
    Start working on an issue.

    Switches to (or creates) the issue's branch and, if that succeeded,
    moves the issue to the team's started state.
    """
    repo_dir = ctx.obj.repo_dir
    try:
        config = ctx.obj.config
        team_id = get_team_key(config, repo_dir)
        if not team_id:
            raise ConfigurationError(
                "Could not determine team id from configuration or directory name."
            )

        resolved = get_issue_identifier(issue_id, team_id, repo_dir)
        if not resolved:
            raise ResolutionError(
                "The current branch does not contain a valid linear issue id."
            )

        with LinearClient.from_config(config) as client:
            start_work_on_issue(
                client,
                config,
                resolved,
                team_id,
                git_source_ref=git_source_ref,
                repo_dir=repo_dir,
            )
    except LinearGitError as e:
        fail(ctx, e)


@linear_git.group("project")
def cmd_project() -> None:
    """Work with Linear projects."""


@cmd_project.command("open")
@click.argument("project_id")
@app_option
@click.pass_context
def cmd_project_open(ctx: click.Context, project_id: str, app: bool) -> None:
    """Open a project page."""
    try:
        open_project_page(ctx.obj.config, project_id, app=app)
    except LinearGitError as e:
        fail(ctx, e)


@linear_git.group("team")
def cmd_team() -> None:
    """Work with Linear teams."""


@cmd_team.command("active")
@app_option
@click.pass_context
def cmd_team_active(ctx: click.Context, app: bool) -> None:
    """Open the team's active issues assigned to you."""
    try:
        open_team_assignee_view(ctx.obj.config, ctx.obj.repo_dir, app=app)
    except LinearGitError as e:
        fail(ctx, e)


if __name__ == "__main__":
    sys.exit(linear_git())
