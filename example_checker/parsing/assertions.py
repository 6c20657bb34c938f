"""
Sample parser - pulls ``# OUTPUT: «...»`` assertions out of code samples

A sample body is treated as opaque text: only comments are looked at.

    say 1;             # OUTPUT: «1␤»
    say [1, 2];
    # OUTPUT: «[1 2]␤
    #          [3 4]␤»

A trailing comment annotates its own line; a comment-only line annotates the
nearest statement above it. An expected-output string left open continues on
the following comment-only lines until its closing ``»``.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from example_checker.core.models import (
    CodeSample,
    Multiplicity,
    OutputAssertion,
    ParsedSample,
    SourceLine,
    Violation,
    ViolationKind,
)

logger = logging.getLogger(__name__)


# ============================================================
# Constants
# ============================================================

OUTPUT_MARKER = re.compile(r'^OUTPUT\s*:\s*')

# Explicit "this example prints nothing" comment
NO_OUTPUT_SENTINEL = re.compile(r'^NO\s+OUTPUT\s*$', re.IGNORECASE)

OPEN_DELIMITER = "«"
CLOSE_DELIMITER = "»"
ESCAPE = "\\"

# String opener -> closer; a '#' between them is not a comment
STRING_DELIMITERS: dict[str, str] = {
    '"': '"',
    "'": "'",
    "「": "」",
}

# Visible stand-ins for separators inside expected output
SEPARATOR_TOKENS: dict[str, str] = {
    "␤": "\n",
    "␉": "\t",
    "␍": "\r",
    "␀": "\0",
    "␠": " ",
}

_DECODE = re.compile(r'\\([«»\\])|([' + "".join(SEPARATOR_TOKENS) + r'])')


# ============================================================
# Helpers
# ============================================================

def split_comment(line: str) -> tuple[str, Optional[str]]:
    """
    Split a source line at the first ``#`` outside a string literal

    Returns:
        (code, comment) where comment starts with ``#`` or is None
    """
    closer: Optional[str] = None
    escaped = False
    for i, char in enumerate(line):
        if escaped:
            escaped = False
        elif char == ESCAPE:
            escaped = True
        elif closer is not None:
            if char == closer:
                closer = None
        elif char in STRING_DELIMITERS:
            closer = STRING_DELIMITERS[char]
        elif char == '#':
            return line[:i], line[i:]
    return line, None


def decode_output(raw: str) -> str:
    """Turn escaped delimiters and separator tokens into literal characters."""
    def replace(match: re.Match) -> str:
        if match.group(1) is not None:
            return match.group(1)
        return SEPARATOR_TOKENS[match.group(2)]

    return _DECODE.sub(replace, raw)


def read_delimited(text: str, depth: int = 0) -> tuple[str, int, str]:
    """
    Read a ``«...»`` string, honouring nesting and backslash escapes

    Args:
        text: text to read from; when ``depth`` is 0 it must start with ``«``
        depth: nesting depth already open from a previous line

    Returns:
        (raw content, remaining depth, text after the closing delimiter).
        A remaining depth above 0 means the string is still open.
    """
    content: list[str] = []
    i = 0
    while i < len(text):
        char = text[i]
        if char == ESCAPE and i + 1 < len(text) and text[i + 1] in (OPEN_DELIMITER, CLOSE_DELIMITER, ESCAPE):
            content.append(text[i:i + 2])
            i += 2
            continue
        if char == OPEN_DELIMITER:
            depth += 1
            if depth > 1:
                content.append(char)
        elif char == CLOSE_DELIMITER:
            depth -= 1
            if depth == 0:
                return "".join(content), 0, text[i + 1:]
            content.append(char)
        else:
            content.append(char)
        i += 1
    return "".join(content), depth, ""


def _join_parts(parts: list[str]) -> str:
    text = ""
    for part in parts:
        decoded = decode_output(part)
        if text and not text.endswith("\n"):
            text += " "
        text += decoded
    return text


@dataclass
class _OpenAssertion:
    """An expected-output string still waiting for its closing delimiter."""
    line: int
    attached_to: SourceLine
    depth: int
    parts: list[str] = field(default_factory=list)


# ============================================================
# Parser
# ============================================================

def parse(sample: CodeSample, doc_id: str = "") -> ParsedSample:
    """
    Extract output assertions from a code sample

    Args:
        sample: a scanned code sample
        doc_id: document id used on MalformedAssertion findings

    Returns:
        ParsedSample with statements, assertions and malformed findings
    """
    statements: list[SourceLine] = []
    assertions: list[OutputAssertion] = []
    malformed: list[Violation] = []
    informational = sample.is_skip
    last_statement: Optional[SourceLine] = None
    pending: Optional[_OpenAssertion] = None

    def report(line: int, message: str) -> None:
        malformed.append(Violation(
            kind=ViolationKind.MALFORMED_ASSERTION,
            doc_id=doc_id,
            line=line,
            message=message,
        ))

    for source in sample.lines:
        code, comment = split_comment(source.text)
        body = comment.lstrip("#").strip() if comment is not None else None

        if pending is not None:
            if code.strip() or body is None:
                report(pending.line, "Expected output is not closed before the next statement")
                pending = None
            elif OUTPUT_MARKER.match(body):
                report(pending.line, "Expected output is not closed before the next OUTPUT marker")
                pending = None
            else:
                raw, depth, _ = read_delimited(comment.lstrip("#").lstrip(), pending.depth)
                pending.parts.append(raw)
                pending.depth = depth
                if depth == 0:
                    assertions.append(OutputAssertion(
                        text=_join_parts(pending.parts),
                        line=pending.line,
                        attached_to=pending.attached_to,
                        multiplicity=Multiplicity.CONTINUATION,
                        informational=informational,
                    ))
                    pending = None
                continue

        is_statement = bool(code.strip())
        if is_statement:
            statements.append(source)
            last_statement = source
        if body is None:
            continue

        target = source if is_statement else last_statement

        if NO_OUTPUT_SENTINEL.match(body):
            if target is None:
                report(source.number, "No-output marker precedes any statement")
                continue
            assertions.append(OutputAssertion(
                text="",
                line=source.number,
                attached_to=target,
                informational=informational,
                sentinel=True,
            ))
            continue

        marker = OUTPUT_MARKER.match(body)
        if not marker:
            continue
        if target is None:
            report(source.number, "Output assertion precedes any statement")
            continue

        rest = body[marker.end():]
        if not rest.startswith(OPEN_DELIMITER):
            report(source.number, f"Expected output must be a «...» string, got: {rest or '(nothing)'}")
            continue

        raw, depth, _ = read_delimited(rest)
        if depth == 0:
            assertions.append(OutputAssertion(
                text=decode_output(raw),
                line=source.number,
                attached_to=target,
                informational=informational,
            ))
        else:
            pending = _OpenAssertion(line=source.number, attached_to=target, depth=depth, parts=[raw])

    if pending is not None:
        report(pending.line, "Expected output is not closed within the code sample")

    if malformed:
        logger.debug(f"{doc_id}:{sample.start_line}: {len(malformed)} malformed assertion(s)")

    return ParsedSample(
        sample=sample,
        assertions=tuple(assertions),
        statements=tuple(statements),
        malformed=tuple(malformed),
    )
