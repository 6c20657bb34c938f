"""
Report aggregator - merges per-document findings into one Report

Findings from all documents are appended, then deduplicated and sorted once.
Severities are resolved here from the run configuration, so the same
findings can pass in a lenient run and fail in a strict one.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional

from example_checker.config import CheckerConfig
from example_checker.core.models import IOFailure, Severity, Violation, ViolationKind


class DocumentStatus(Enum):
    """Per-document verdict."""
    PASS = "pass"
    FAIL = "fail"
    INCOMPLETE = "incomplete"
    IO_FAILURE = "io-failure"


@dataclass(frozen=True)
class ReportedViolation:
    """A violation with its resolved severity."""
    violation: Violation
    severity: Severity

    def to_dict(self) -> dict[str, Any]:
        data = self.violation.to_dict()
        data["severity"] = self.severity.value
        return data


@dataclass(frozen=True)
class Report:
    """
    Aggregated result of a run

    Attributes:
        passed: False when any error, incomplete document or IO failure exists
        document_count: number of distinct documents seen
        violations: deduplicated findings sorted by (doc_id, line)
        failures: documents that could not be read, sorted by doc_id
        document_statuses: (doc_id, DocumentStatus) pairs sorted by doc_id
    """
    passed: bool
    document_count: int
    violations: tuple[ReportedViolation, ...] = ()
    failures: tuple[IOFailure, ...] = ()
    document_statuses: tuple[tuple[str, DocumentStatus], ...] = ()

    @property
    def statuses(self) -> dict[str, DocumentStatus]:
        """doc_id -> DocumentStatus, as a fresh dict."""
        return dict(self.document_statuses)

    @property
    def violation_count(self) -> int:
        return len(self.violations)

    @property
    def error_count(self) -> int:
        return sum(1 for v in self.violations if v.severity == Severity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for v in self.violations if v.severity == Severity.WARNING)

    @property
    def incomplete(self) -> tuple[str, ...]:
        return tuple(d for d, s in self.document_statuses if s == DocumentStatus.INCOMPLETE)

    @property
    def exit_code(self) -> int:
        """0 pass, 1 fail, 2 when any document could not be read."""
        if self.failures:
            return 2
        return 0 if self.passed else 1

    def by_document(self) -> dict[str, list[dict[str, Any]]]:
        """Nested mapping: document -> list of violation records."""
        result: dict[str, list[dict[str, Any]]] = {doc_id: [] for doc_id, _ in self.document_statuses}
        for reported in self.violations:
            result.setdefault(reported.violation.doc_id, []).append(reported.to_dict())
        return result

    def to_dict(self) -> dict[str, Any]:
        return {
            "passed": self.passed,
            "documents": self.document_count,
            "violations": self.violation_count,
            "summary": {
                "errors": self.error_count,
                "warnings": self.warning_count,
                "io_failures": len(self.failures),
                "incomplete": list(self.incomplete),
            },
            "statuses": {doc_id: status.value for doc_id, status in self.document_statuses},
            "results": self.by_document(),
            "failures": [failure.to_dict() for failure in self.failures],
        }


def deduplicate(violations: Iterable[Violation]) -> list[Violation]:
    """Keep the first violation for each (doc_id, line, kind)."""
    seen: set[tuple[str, int, ViolationKind]] = set()
    unique: list[Violation] = []
    for violation in violations:
        if violation.key in seen:
            continue
        seen.add(violation.key)
        unique.append(violation)
    return unique


def aggregate(
    violations: Iterable[Violation],
    *,
    documents: Iterable[str] = (),
    failures: Iterable[IOFailure] = (),
    config: Optional[CheckerConfig] = None,
) -> Report:
    """
    Merge findings into a Report

    Args:
        violations: findings from every document, in any order
        documents: ids of every document processed, including clean ones
        failures: documents that could not be read
        config: severity settings (defaults when None)

    Returns:
        Report; never raises on content
    """
    config = config or CheckerConfig()
    ordered = sorted(deduplicate(violations), key=lambda v: (v.doc_id, v.line))
    reported = tuple(ReportedViolation(v, config.severity_of(v.kind)) for v in ordered)

    failure_map: dict[str, IOFailure] = {}
    for failure in failures:
        failure_map.setdefault(failure.doc_id, failure)

    doc_ids = set(documents) | {v.doc_id for v in ordered} | set(failure_map)
    statuses: dict[str, DocumentStatus] = {doc_id: DocumentStatus.PASS for doc_id in doc_ids}
    for item in reported:
        doc_id = item.violation.doc_id
        if item.violation.kind == ViolationKind.INCOMPLETE:
            statuses[doc_id] = DocumentStatus.INCOMPLETE
        elif item.severity == Severity.ERROR and statuses[doc_id] == DocumentStatus.PASS:
            statuses[doc_id] = DocumentStatus.FAIL
    for doc_id in failure_map:
        statuses[doc_id] = DocumentStatus.IO_FAILURE

    passed = (
        not failure_map
        and all(item.severity != Severity.ERROR for item in reported)
        and DocumentStatus.INCOMPLETE not in statuses.values()
    )

    return Report(
        passed=passed,
        document_count=len(doc_ids),
        violations=reported,
        failures=tuple(failure_map[d] for d in sorted(failure_map)),
        document_statuses=tuple(sorted(statuses.items())),
    )
