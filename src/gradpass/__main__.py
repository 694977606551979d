"""
Entry point for running gradpass as a module.

Usage:
    python -m gradpass [command] [options]

Example:
    python -m gradpass checkin admit --ceremony CER-2026 --invitee inv-1 --ticket T-1
    python -m gradpass offline status
    python -m gradpass offline watch --interval 10
"""

from gradpass.cli.main import cli

if __name__ == "__main__":
    cli()
