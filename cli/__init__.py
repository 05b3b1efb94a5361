"""CLI package for sheets-cli

This package provides the command-line interface: OAuth session
management (auth login/status/logout) and spreadsheet commands.
"""

from cli.main import build_parser, main

__all__ = [
    "build_parser",
    "main",
]
