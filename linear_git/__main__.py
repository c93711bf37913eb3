#!/usr/bin/env python3
# SPDX-License-Identifier: GPL-3.0-or-later

"""Entry point for running linear-git as a module: python -m linear_git"""

import sys

from .cli import linear_git

if __name__ == "__main__":
    sys.exit(linear_git())
