"""
Consistency checker - static rules over parsed code samples

Rules (each independent, none of them runs sample code):
1. Missing assertion: a verified sample with statements must claim an output
2. Ambiguous empty assertion: ``«»`` without the no-output marker
3. Conflicting flags: e.g. ``:skip-test`` together with ``:must-fail``
4. Excessive nesting: directive depth above ``max_nesting``
"""

from typing import Optional

from example_checker.config import CheckerConfig
from example_checker.core.models import (
    CodeSample,
    Document,
    ParsedSample,
    Violation,
    ViolationKind,
)
from example_checker.parsing.assertions import parse


def _requires_assertion(sample: CodeSample, config: CheckerConfig) -> bool:
    if sample.is_skip:
        return False
    language = (sample.language or "").lower()
    return language in config.executable_languages


def check_missing_assertion(parsed: ParsedSample, doc_id: str, config: CheckerConfig) -> list[Violation]:
    sample = parsed.sample
    if not _requires_assertion(sample, config):
        return []
    if not parsed.statements or parsed.assertions or parsed.malformed:
        return []
    return [Violation(
        kind=ViolationKind.MISSING_ASSERTION,
        doc_id=doc_id,
        line=sample.first_line,
        message=f"Code sample starting at line {sample.start_line} has no '# OUTPUT: «...»' assertion",
    )]


def check_empty_assertions(parsed: ParsedSample, doc_id: str) -> list[Violation]:
    return [
        Violation(
            kind=ViolationKind.EMPTY_ASSERTION_AMBIGUOUS,
            doc_id=doc_id,
            line=assertion.line,
            message="Empty expected output; use '# NO OUTPUT' to document an example that prints nothing",
        )
        for assertion in parsed.assertions
        if assertion.text == "" and not assertion.sentinel
    ]


def check_conflicting_flags(sample: CodeSample, doc_id: str, config: CheckerConfig) -> list[Violation]:
    conflicts = [
        f":{first} with :{second}"
        for first, second in config.conflicting_flags
        if sample.has_flag(first) and sample.has_flag(second)
    ]
    if not conflicts:
        return []
    return [Violation(
        kind=ViolationKind.CONFLICTING_FLAGS,
        doc_id=doc_id,
        line=sample.start_line,
        message=f"Mutually exclusive flags on code sample: {', '.join(conflicts)}",
    )]


def check_nesting(sample: CodeSample, doc_id: str, config: CheckerConfig) -> list[Violation]:
    if sample.depth <= config.max_nesting:
        return []
    return [Violation(
        kind=ViolationKind.EXCESSIVE_NESTING,
        doc_id=doc_id,
        line=sample.start_line,
        message=f"Code sample nested {sample.depth} levels deep (maximum {config.max_nesting})",
    )]


def check(
    parsed: ParsedSample,
    config: Optional[CheckerConfig] = None,
    doc_id: str = "",
) -> tuple[Violation, ...]:
    """
    Apply every sample rule to one parsed sample

    Args:
        parsed: output of the sample parser
        config: rule settings (defaults when None)
        doc_id: document id stamped on the findings

    Returns:
        Violations in rule order
    """
    config = config or CheckerConfig()
    sample = parsed.sample
    return tuple(
        check_missing_assertion(parsed, doc_id, config)
        + check_empty_assertions(parsed, doc_id)
        + check_conflicting_flags(sample, doc_id, config)
        + check_nesting(sample, doc_id, config)
    )


def check_document(
    document: Document,
    config: Optional[CheckerConfig] = None,
) -> tuple[tuple[ParsedSample, ...], tuple[Violation, ...]]:
    """
    Parse and check every code sample of a scanned document

    Returns:
        (parsed samples, all findings): scan findings first, then for each
        sample its malformed assertions followed by rule findings
    """
    config = config or CheckerConfig()
    violations: list[Violation] = list(document.violations)
    parsed_samples: list[ParsedSample] = []
    nesting_reported = False

    for sample in document.samples:
        parsed = parse(sample, document.doc_id)
        parsed_samples.append(parsed)
        violations.extend(parsed.malformed)
        findings = check(parsed, config, document.doc_id)
        nesting_reported = nesting_reported or any(
            v.kind == ViolationKind.EXCESSIVE_NESTING for v in findings
        )
        violations.extend(findings)

    if document.max_depth > config.max_nesting and not nesting_reported:
        violations.append(Violation(
            kind=ViolationKind.EXCESSIVE_NESTING,
            doc_id=document.doc_id,
            line=document.deepest_line,
            message=f"Directives nested {document.max_depth} levels deep (maximum {config.max_nesting})",
        ))

    return tuple(parsed_samples), tuple(violations)
