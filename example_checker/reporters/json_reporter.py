"""
JSON reporter - machine-readable report for downstream tooling
"""

import json
import sys
from typing import TextIO

from example_checker.verification.aggregator import Report


class JsonReporter:
    """JSON reporter"""

    def __init__(self, output: TextIO | None = None):
        self.output = output or sys.stdout

    def report(self, result: Report, target: str) -> None:
        """Write the report as one JSON object keyed by document."""
        report_data = {"target": target, **result.to_dict()}
        json_str = json.dumps(report_data, indent=2, ensure_ascii=False)
        print(json_str, file=self.output)
