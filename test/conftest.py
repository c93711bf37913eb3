#!/usr/bin/env python3
# SPDX-License-Identifier: GPL-3.0-or-later

import subprocess

import pytest


@pytest.fixture
def mock_repo(tmp_path):
    """Create a mock git repository directory."""
    repo_dir = tmp_path / "eng-repo"
    repo_dir.mkdir()
    return repo_dir


@pytest.fixture
def real_git_repo(tmp_path):
    """Create a real git repository for integration tests."""
    repo_dir = tmp_path / "test-repo"
    repo_dir.mkdir()

    for cmd in (
        ["git", "init", "-b", "main"],
        ["git", "config", "user.name", "Test User"],
        ["git", "config", "user.email", "test@example.com"],
    ):
        subprocess.run(cmd, cwd=repo_dir, check=True, capture_output=True)

    test_file = repo_dir / "README.md"
    test_file.write_text("# Test Repository\n")
    subprocess.run(
        ["git", "add", "README.md"],
        cwd=repo_dir,
        check=True,
        capture_output=True,
    )
    subprocess.run(
        ["git", "commit", "-m", "Initial commit"],
        cwd=repo_dir,
        check=True,
        capture_output=True,
    )

    return repo_dir


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Keep the user's LINEAR_* variables and config file out of the tests."""
    for name in ("WORKSPACE", "TEAM_ID", "API_KEY", "PREFER_GRAPHITE"):
        monkeypatch.delenv(f"LINEAR_{name}", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
