#!/usr/bin/env python3
# SPDX-License-Identifier: GPL-3.0-or-later

"""Tests for the Linear API client and issue id resolution."""

import json
import subprocess
from unittest.mock import patch

import httpx
import pytest

from linear_git.config import Config
from linear_git.errors import ConfigurationError, LinearApiError
from linear_git.linear import (
    LINEAR_API_URL,
    LinearClient,
    WorkflowState,
    get_issue_identifier,
    get_team_key,
)


def make_client(*responses):
    """
    Return a client whose requests are answered by responses in order,
    and the list the sent requests are recorded in.
    """
    requests = []
    answers = list(responses)

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        answer = answers.pop(0)
        if isinstance(answer, httpx.Response):
            return answer
        return httpx.Response(200, json=answer)

    http = httpx.Client(transport=httpx.MockTransport(handler))
    return LinearClient("lin_api_test", http_client=http), requests


ISSUE_NODE = {
    "identifier": "ENG-123",
    "title": "Fix login",
    "url": "https://linear.app/acme/issue/ENG-123/fix-login",
    "description": None,
    "branchName": "eng-123-fix-login",
}


class TestLinearClient:
    def test_fetch_issue_details(self):
        client, requests = make_client({"data": {"issue": ISSUE_NODE}})

        issue = client.fetch_issue_details("ENG-123", include_branch_name=True)

        assert issue.identifier == "ENG-123"
        assert issue.branch_name == "eng-123-fix-login"

        request = requests[0]
        assert str(request.url) == LINEAR_API_URL
        assert request.headers["Authorization"] == "lin_api_test"
        body = json.loads(request.content)
        assert body["variables"] == {"id": "ENG-123"}
        assert "branchName" in body["query"]

    def test_fetch_issue_details_without_branch_name(self):
        node = {k: v for k, v in ISSUE_NODE.items() if k != "branchName"}
        client, requests = make_client({"data": {"issue": node}})

        issue = client.fetch_issue_details("ENG-123")

        assert issue.branch_name is None
        assert "branchName" not in json.loads(requests[0].content)["query"]

    def test_fetch_missing_issue(self):
        client, _ = make_client({"data": {"issue": None}})

        with pytest.raises(LinearApiError, match="ENG-404 not found"):
            client.fetch_issue_details("ENG-404")

    def test_graphql_errors_raise(self):
        client, _ = make_client(
            {"errors": [{"message": "Entity not found"}, {"message": "Oops"}]}
        )

        with pytest.raises(LinearApiError, match="Entity not found; Oops"):
            client.fetch_issue_details("ENG-1")

    def test_http_error_raises(self):
        client, _ = make_client(httpx.Response(401, text="Authentication required"))

        with pytest.raises(LinearApiError, match="401"):
            client.fetch_issue_details("ENG-1")

    def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = LinearClient(
            "key", http_client=httpx.Client(transport=httpx.MockTransport(handler))
        )

        with pytest.raises(LinearApiError, match="request failed"):
            client.get_started_state("ENG")

    def test_get_started_state_picks_lowest_position(self):
        client, requests = make_client(
            {
                "data": {
                    "teams": {
                        "nodes": [
                            {
                                "states": {
                                    "nodes": [
                                        {"id": "s2", "name": "In Review", "position": 3},
                                        {"id": "s1", "name": "In Progress", "position": 2},
                                    ]
                                }
                            }
                        ]
                    }
                }
            }
        )

        state = client.get_started_state("ENG")

        assert state == WorkflowState(id="s1", name="In Progress")
        assert json.loads(requests[0].content)["variables"] == {"teamKey": "ENG"}

    def test_get_started_state_unknown_team(self):
        client, _ = make_client({"data": {"teams": {"nodes": []}}})

        with pytest.raises(LinearApiError, match="Team NOPE not found"):
            client.get_started_state("NOPE")

    def test_get_started_state_without_started_states(self):
        client, _ = make_client(
            {"data": {"teams": {"nodes": [{"states": {"nodes": []}}]}}}
        )

        with pytest.raises(LinearApiError, match="no started workflow state"):
            client.get_started_state("ENG")

    def test_update_issue_state(self):
        client, requests = make_client({"data": {"issueUpdate": {"success": True}}})

        client.update_issue_state("ENG-123", "s1")

        body = json.loads(requests[0].content)
        assert body["variables"] == {"id": "ENG-123", "stateId": "s1"}
        assert "issueUpdate" in body["query"]

    def test_update_issue_state_unsuccessful(self):
        client, _ = make_client({"data": {"issueUpdate": {"success": False}}})

        with pytest.raises(LinearApiError, match="Failed to update state"):
            client.update_issue_state("ENG-123", "s1")

    def test_from_config_requires_api_key(self, mock_repo):
        with pytest.raises(ConfigurationError, match="api_key is not set"):
            LinearClient.from_config(Config.load(mock_repo, environ={}))


class TestGetTeamKey:
    def test_team_id_option_is_uppercased(self, mock_repo):
        config = Config(overrides={"team_id": "eng"})

        assert get_team_key(config, mock_repo) == "ENG"

    @pytest.mark.parametrize(
        "dirname,expected",
        [("eng-repo", "ENG"), ("web", "WEB"), ("ops2", "OPS"), ("123-repo", None)],
    )
    def test_falls_back_to_directory_name(self, tmp_path, dirname, expected):
        assert get_team_key(Config(), tmp_path / dirname) == expected


class TestGetIssueIdentifier:
    @pytest.mark.parametrize(
        "provided,expected",
        [
            ("ENG-123", "ENG-123"),
            ("eng-123", "ENG-123"),
            ("123", "ENG-123"),
            ("0", None),
            ("ENG-0123", None),
            ("not an issue", None),
        ],
    )
    def test_provided_id(self, mock_repo, provided, expected):
        with patch("linear_git.linear.get_branch") as mock_branch:
            assert get_issue_identifier(provided, "ENG", mock_repo) == expected
            mock_branch.assert_not_called()

    def test_bare_number_without_team(self, mock_repo):
        assert get_issue_identifier("123", None, mock_repo) is None

    @pytest.mark.parametrize(
        "branch,expected",
        [
            ("eng-123-fix-login", "ENG-123"),
            ("alice/eng-42-thing", "ENG-42"),
            ("main", None),
        ],
    )
    def test_from_current_branch(self, mock_repo, branch, expected):
        with patch("linear_git.linear.get_branch", return_value=branch):
            assert get_issue_identifier(None, "ENG", mock_repo) == expected

    def test_not_a_repository(self, mock_repo):
        with patch("linear_git.linear.get_branch") as mock_branch:
            mock_branch.side_effect = subprocess.CalledProcessError(128, ["git"])

            assert get_issue_identifier(None, "ENG", mock_repo) is None


class TestMalformedResponses:
    """Unexpected response shapes are reported as LinearApiError."""

    @pytest.mark.parametrize(
        "payload",
        [
            {"data": {"teams": None}},
            {"data": {"teams": {"nodes": None}}},
            {"data": {"teams": {"nodes": [None]}}},
            {"data": {"teams": {"nodes": [{"states": None}]}}},
            {"data": {"teams": {"nodes": [{"states": {"nodes": [{"name": "x"}]}}]}}},
            {"data": None},
            {"data": []},
            [],
            "oops",
        ],
    )
    def test_get_started_state(self, payload):
        client, _ = make_client(payload)

        with pytest.raises(LinearApiError):
            client.get_started_state("ENG")

    @pytest.mark.parametrize(
        "payload",
        [
            {"data": {"issueUpdate": None}},
            {"data": {"issueUpdate": {}}},
            {"data": None},
            ["not", "a", "dict"],
        ],
    )
    def test_update_issue_state(self, payload):
        client, _ = make_client(payload)

        with pytest.raises(LinearApiError):
            client.update_issue_state("ENG-1", "s1")

    def test_issue_with_missing_fields(self):
        client, _ = make_client({"data": {"issue": {"identifier": "ENG-1"}}})

        with pytest.raises(LinearApiError, match="Malformed issue ENG-1"):
            client.fetch_issue_details("ENG-1", include_branch_name=True)

    def test_errors_that_are_not_objects(self):
        client, _ = make_client({"errors": ["boom"]})

        with pytest.raises(LinearApiError, match="boom"):
            client.fetch_issue_details("ENG-1")
