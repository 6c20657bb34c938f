"""
Reporter interface
"""

from typing import Protocol

from example_checker.verification.aggregator import Report


class Reporter(Protocol):
    """Renders an aggregated Report."""

    def report(self, result: Report, target: str) -> None:
        ...
