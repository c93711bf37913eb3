#!/usr/bin/env python3
# SPDX-License-Identifier: GPL-3.0-or-later

"""Linear API client and issue identifier resolution."""

import logging
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Self

import httpx

from .config import Config
from .errors import LinearApiError
from .git import get_branch

logger = logging.getLogger("linear_git.linear")

LINEAR_API_URL = "https://api.linear.app/graphql"

# ENG-123, eng-123 but not ENG-0123
ISSUE_ID_PATTERN = re.compile(r"[a-zA-Z]{2,}-[1-9][0-9]*")
ISSUE_NUMBER_PATTERN = re.compile(r"[1-9][0-9]*")
TEAM_KEY_PATTERN = re.compile(r"^[a-zA-Z]+")

ISSUE_QUERY = """
query IssueDetails($id: String!) {
  issue(id: $id) {
    identifier
    title
    url
    description
    branchName
  }
}
"""

ISSUE_QUERY_NO_BRANCH = """
query IssueDetails($id: String!) {
  issue(id: $id) {
    identifier
    title
    url
    description
  }
}
"""

STARTED_STATES_QUERY = """
query StartedStates($teamKey: String!) {
  teams(filter: { key: { eq: $teamKey } }) {
    nodes {
      states(filter: { type: { eq: "started" } }) {
        nodes {
          id
          name
          position
        }
      }
    }
  }
}
"""

UPDATE_ISSUE_STATE_MUTATION = """
mutation UpdateIssueState($id: String!, $stateId: String!) {
  issueUpdate(id: $id, input: { stateId: $stateId }) {
    success
  }
}
"""


@dataclass
class IssueDetails:
    identifier: str
    title: str
    url: str
    description: str | None = None
    branch_name: str | None = None

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> Self:
        return cls(
            identifier=node["identifier"],
            title=node["title"],
            url=node["url"],
            description=node.get("description"),
            branch_name=node.get("branchName"),
        )


@dataclass
class WorkflowState:
    id: str
    name: str


class LinearClient:
    """
    Minimal Linear GraphQL client.

    Args:
        api_key: Personal API key, sent as the Authorization header
        http_client: Optional preconfigured httpx.Client (used by tests)
    """

    def __init__(self, api_key: str, http_client: httpx.Client | None = None):
        self.http = http_client or httpx.Client()
        self.headers = {
            "Authorization": api_key,
            "Content-Type": "application/json",
        }

    @classmethod
    def from_config(cls, config: Config) -> Self:
        return cls(config.require_option("api_key", "api_key"))

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def query(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        """
        Run a GraphQL query and return its data payload.

        Raises:
            LinearApiError: on transport errors, non-2xx responses or
            GraphQL errors in the response body
        """
        try:
            response = self.http.post(
                LINEAR_API_URL,
                json={"query": query, "variables": variables},
                headers=self.headers,
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            raise LinearApiError(
                f"Linear API returned {e.response.status_code}: {e.response.text}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise LinearApiError(f"Linear API request failed: {e}") from e

        if not isinstance(body, dict):
            raise LinearApiError(f"Unexpected Linear API response: {body!r}")
        if body.get("errors"):
            messages = "; ".join(
                err.get("message", str(err)) if isinstance(err, dict) else str(err)
                for err in body["errors"]
            )
            raise LinearApiError(f"Linear API error: {messages}")

        data = body.get("data") or {}
        if not isinstance(data, dict):
            raise LinearApiError(f"Unexpected Linear API response: {body!r}")
        return data

    def fetch_issue_details(
        self, issue_id: str, include_branch_name: bool = False
    ) -> IssueDetails:
        query = ISSUE_QUERY if include_branch_name else ISSUE_QUERY_NO_BRANCH
        data = self.query(query, {"id": issue_id})
        node = data.get("issue")
        if not node:
            raise LinearApiError(f"Issue {issue_id} not found")
        try:
            return IssueDetails.from_node(node)
        except (AttributeError, KeyError, TypeError) as e:
            raise LinearApiError(f"Malformed issue {issue_id}: {e}") from e

    def get_started_state(self, team_key: str) -> WorkflowState:
        """
        Return the team's first workflow state of type "started".

        Teams may define several started states (e.g. "In Progress",
        "In Review"), the one with the lowest position wins.
        """
        data = self.query(STARTED_STATES_QUERY, {"teamKey": team_key})
        teams = (data.get("teams") or {}).get("nodes") or []
        if not teams:
            raise LinearApiError(f"Team {team_key} not found")

        states = ((teams[0] or {}).get("states") or {}).get("nodes") or []
        if not states:
            raise LinearApiError(f"Team {team_key} has no started workflow state")

        try:
            state = min(states, key=lambda s: s.get("position") or 0)
            return WorkflowState(id=state["id"], name=state["name"])
        except (AttributeError, KeyError, TypeError) as e:
            raise LinearApiError(
                f"Malformed workflow state for team {team_key}: {e}"
            ) from e

    def update_issue_state(self, issue_id: str, state_id: str) -> None:
        data = self.query(
            UPDATE_ISSUE_STATE_MUTATION, {"id": issue_id, "stateId": state_id}
        )
        if not (data.get("issueUpdate") or {}).get("success"):
            raise LinearApiError(f"Failed to update state of issue {issue_id}")


def get_team_key(config: Config, repo_dir: Path) -> str | None:
    """
    Return the team key from the team_id option, falling back to the
    leading letters of the repository directory name.
    """
    team_id = config.get_option("team_id")
    if team_id:
        return team_id.upper()

    match = TEAM_KEY_PATTERN.match(repo_dir.name)
    if match:
        logger.debug(f"Using team key {match.group(0)} from {repo_dir.name}")
        return match.group(0).upper()
    return None


def get_issue_identifier(
    provided_id: str | None, team_key: str | None, repo_dir: Path
) -> str | None:
    """
    Resolve an issue identifier like ENG-123.

    Args:
        provided_id: ENG-123 (any case), a bare issue number, or None to
            parse the identifier out of the current branch name
        team_key: Prefix used for bare issue numbers
        repo_dir: Repository whose current branch is inspected

    Returns:
        The upper-cased identifier, or None if none can be derived
    """
    if provided_id:
        if ISSUE_ID_PATTERN.fullmatch(provided_id):
            return provided_id.upper()
        if ISSUE_NUMBER_PATTERN.fullmatch(provided_id) and team_key:
            return f"{team_key.upper()}-{provided_id}"
        logger.debug(f"Unable to interpret {provided_id!r} as an issue id")
        return None

    try:
        branch = get_branch(repo_dir)
    except (subprocess.CalledProcessError, OSError) as e:
        logger.debug(f"Unable to determine current branch: {e}")
        return None

    match = ISSUE_ID_PATTERN.search(branch)
    return match.group(0).upper() if match else None
