#!/usr/bin/env python3
# SPDX-License-Identifier: GPL-3.0-or-later

"""linear-git: open Linear pages and start work on issues from a git checkout."""

__version__ = "0.1.0"

from .cli import linear_git

__all__ = ["linear_git"]
