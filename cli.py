"""CLI entry point - wrapper for running from a source checkout

Equivalent to the installed ``sheets-cli`` command.
"""

from cli.main import run

if __name__ == "__main__":
    run()
