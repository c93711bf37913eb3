#!/usr/bin/env python3
# SPDX-License-Identifier: GPL-3.0-or-later

"""Exceptions raised by linear-git."""


class LinearGitError(Exception):
    """Base class for all errors the command line turns into exit status 1."""


class ConfigurationError(LinearGitError):
    """A required option (workspace, team, API key) is missing or unreadable."""


class ResolutionError(LinearGitError):
    """No issue identifier could be derived from the input or the branch."""


class LinearApiError(LinearGitError):
    """The Linear API request failed or returned GraphQL errors."""
