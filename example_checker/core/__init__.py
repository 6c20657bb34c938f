"""
Core Layer

Data models and the block scanner (Pod6 and Markdown).
"""

from example_checker.core.models import (
    CodeSample,
    Document,
    DocumentResult,
    Flag,
    Heading,
    InlineSpan,
    IOFailure,
    Multiplicity,
    OutputAssertion,
    ParsedSample,
    Prose,
    Region,
    Severity,
    SourceLine,
    Violation,
    ViolationKind,
    SKIP_FLAGS,
)
from example_checker.core.scanner import (
    scan,
    scan_document,
    detect_syntax,
    parse_flags,
    find_inline_spans,
    split_lines,
    RegionStream,
    SYNTAX_POD,
    SYNTAX_MARKDOWN,
)

__all__ = [
    # models
    "CodeSample",
    "Document",
    "DocumentResult",
    "Flag",
    "Heading",
    "InlineSpan",
    "IOFailure",
    "Multiplicity",
    "OutputAssertion",
    "ParsedSample",
    "Prose",
    "Region",
    "Severity",
    "SourceLine",
    "Violation",
    "ViolationKind",
    "SKIP_FLAGS",
    # scanner
    "scan",
    "scan_document",
    "detect_syntax",
    "parse_flags",
    "find_inline_spans",
    "split_lines",
    "RegionStream",
    "SYNTAX_POD",
    "SYNTAX_MARKDOWN",
]
