"""
Reporters Layer

Rich terminal reporter and JSON reporter.
"""

from example_checker.reporters.base import Reporter
from example_checker.reporters.rich_reporter import RichReporter, format_violation
from example_checker.reporters.json_reporter import JsonReporter

__all__ = [
    "Reporter",
    "RichReporter",
    "JsonReporter",
    "format_violation",
]
