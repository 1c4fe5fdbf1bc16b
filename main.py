#!/usr/bin/env python3
"""
ytscribe Entry Point Script

This script initializes the CLI handler and downloads a channel's transcripts.
"""

import sys
from ytscribe.cli import CLIHandler

if __name__ == "__main__":
    if sys.version_info < (3, 9):
        sys.stderr.write("ytscribe requires Python 3.9 or later.\n")
        sys.exit(1)

    cli = CLIHandler()
    sys.exit(cli.run())
