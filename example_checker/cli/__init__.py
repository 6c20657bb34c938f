"""
CLI Layer

Command-line entry point.
"""

from example_checker.cli.app import app, check, version

__all__ = [
    "app",
    "check",
    "version",
]
