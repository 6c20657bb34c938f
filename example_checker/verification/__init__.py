"""
Verification Layer - consistency checker and report aggregator
"""

from example_checker.verification.checker import (
    check,
    check_document,
    check_missing_assertion,
    check_empty_assertions,
    check_conflicting_flags,
    check_nesting,
)
from example_checker.verification.aggregator import (
    aggregate,
    deduplicate,
    DocumentStatus,
    Report,
    ReportedViolation,
)

__all__ = [
    # checker
    "check",
    "check_document",
    "check_missing_assertion",
    "check_empty_assertions",
    "check_conflicting_flags",
    "check_nesting",
    # aggregator
    "aggregate",
    "deduplicate",
    "DocumentStatus",
    "Report",
    "ReportedViolation",
]
