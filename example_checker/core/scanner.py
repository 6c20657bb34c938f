"""
Block scanner - splits a document into prose, heading and code-sample regions

Pod6 documents are walked line by line with an explicit integer cursor over a
read-only line buffer. Markdown documents are delegated to
``example_checker.core.markdown``. Both produce the same Region variants.

Structural problems (an ``=end`` without a matching ``=begin``, a block left
open at end of document) are reported as Violations in the same event stream
instead of being raised.
"""

import logging
from dataclasses import dataclass
from pathlib import PurePath
from typing import Iterator, Optional, Union

from example_checker.core.models import (
    CodeSample,
    Document,
    Flag,
    Heading,
    InlineSpan,
    Prose,
    Region,
    SourceLine,
    Violation,
    ViolationKind,
)
from example_checker.core.patterns import (
    ABBREVIATED_CODE,
    ANY_DIRECTIVE,
    BLOCK_DIRECTIVE,
    FLAG,
    HEADING,
    INLINE_BRACKETS,
    INLINE_CODE_OPEN,
    LINE_BREAK,
    TITLE,
    strip_quotes,
)

logger = logging.getLogger(__name__)

SYNTAX_POD = "pod"
SYNTAX_MARKDOWN = "markdown"

MARKDOWN_SUFFIXES: frozenset[str] = frozenset({".md", ".markdown"})


@dataclass(frozen=True)
class DepthMark:
    """Emitted whenever the scan reaches a new maximum nesting depth."""
    depth: int
    line: int


ScanEvent = Union[Prose, Heading, CodeSample, Violation, DepthMark]


# ============================================================
# Helpers
# ============================================================

def split_lines(text: str) -> tuple[str, ...]:
    """
    Split on ``\\r\\n``, ``\\r`` or ``\\n``, keeping terminators so joins are lossless

    Line numbering matches markdown-it, which treats all three as a break.
    """
    lines: list[str] = []
    start = 0
    for match in LINE_BREAK.finditer(text):
        lines.append(text[start:match.end()])
        start = match.end()
    if start < len(text):
        lines.append(text[start:])
    return tuple(lines)


def _content(line: str) -> str:
    return line.rstrip("\r\n")


def detect_syntax(doc_id: str) -> str:
    """Pick the markup flavour from the document id suffix."""
    if PurePath(doc_id).suffix.lower() in MARKDOWN_SUFFIXES:
        return SYNTAX_MARKDOWN
    return SYNTAX_POD


def parse_flags(config: str) -> tuple[Flag, ...]:
    """
    Parse Pod block configuration (``:skip-test :lang<raku> :!solo``)

    Args:
        config: text following the block name on a directive line

    Returns:
        Flags in source order; unknown names are kept as written
    """
    flags: list[Flag] = []
    for match in FLAG.finditer(config):
        value = None
        for group in ("angle", "paren", "bracket", "brace", "guillemet"):
            if match.group(group) is not None:
                value = match.group(group)
                break
        if match.group("paren") is not None:
            value = strip_quotes(value)
        flags.append(Flag(
            name=match.group("name"),
            value=value,
            negated=match.group("neg") is not None,
            raw=match.group(0),
        ))
    return tuple(flags)


def find_inline_spans(text: str, line_number: int) -> tuple[InlineSpan, ...]:
    """
    Find ``C<...>`` style code spans on a single line

    Doubled openers (``C<<...>>``) close on the same number of brackets;
    single openers close on the matching bracket, counting nested pairs.
    A span that is not closed on the line is not a span.
    """
    spans: list[InlineSpan] = []
    pos = 0
    while True:
        match = INLINE_CODE_OPEN.search(text, pos)
        if not match:
            break
        opener = match.group("open")
        start = match.end()

        if len(opener) > 1:
            closer = INLINE_BRACKETS[opener[0]] * len(opener)
            end = text.find(closer, start)
            if end == -1:
                pos = start
                continue
            content = text[start:end].strip()
        else:
            closer = INLINE_BRACKETS[opener]
            depth = 1
            end = start
            while end < len(text):
                char = text[end]
                if char == opener:
                    depth += 1
                elif char == closer:
                    depth -= 1
                    if depth == 0:
                        break
                end += 1
            if depth != 0:
                pos = start
                continue
            content = text[start:end]

        spans.append(InlineSpan(
            line=line_number,
            column=match.start() + 1,
            marker=match.group("marker"),
            text=content,
        ))
        pos = end + len(closer)
    return tuple(spans)


def _is_end_of(line: str, name: str) -> bool:
    match = BLOCK_DIRECTIVE.match(_content(line))
    return bool(match and match.group("verb") == "end" and match.group("name") == name)


@dataclass(frozen=True)
class _OpenBlock:
    name: str
    line: int


# ============================================================
# Pod6 scan
# ============================================================

def _scan_pod(lines: tuple[str, ...], doc_id: str) -> Iterator[ScanEvent]:
    """Walk Pod6 lines and yield regions, violations and depth marks."""
    stack: list[_OpenBlock] = []
    prose: list[str] = []
    prose_start = 1
    max_depth = 0
    total = len(lines)
    cursor = 0

    def flush() -> Iterator[Prose]:
        if prose:
            spans: list[InlineSpan] = []
            for offset, raw in enumerate(prose):
                spans.extend(find_inline_spans(_content(raw), prose_start + offset))
            yield Prose(raw="".join(prose), start_line=prose_start, spans=tuple(spans), depth=len(stack))
            prose.clear()

    while cursor < total:
        line = lines[cursor]
        text = _content(line)
        number = cursor + 1

        directive = BLOCK_DIRECTIVE.match(text)
        abbreviated = None if directive else ABBREVIATED_CODE.match(text)
        heading = None if directive or abbreviated else (HEADING.match(text) or TITLE.match(text))

        if directive is None and abbreviated is None and heading is None:
            if not prose:
                prose_start = number
            prose.append(line)
            cursor += 1
            continue

        yield from flush()

        if heading is not None:
            level = int(heading.group("level")) if "level" in heading.groupdict() else 0
            yield Heading(level=level, text=heading.group("text").strip(), raw=line, line=number, depth=len(stack))
            cursor += 1
            continue

        verb = directive.group("verb") if directive else "for"
        name = directive.group("name") if directive else "code"
        config = (directive or abbreviated).group("config")
        depth = len(stack) + 1
        if verb != "end" and depth > max_depth:
            max_depth = depth
            yield DepthMark(depth=depth, line=number)

        if verb == "begin" and name == "code":
            close = cursor + 1
            while close < total and not _is_end_of(lines[close], "code"):
                close += 1
            body = lines[cursor + 1:close]
            if close >= total:
                yield Violation(
                    kind=ViolationKind.UNTERMINATED_BLOCK,
                    doc_id=doc_id,
                    line=number,
                    message="'=begin code' is never closed by '=end code'",
                )
                if body:
                    yield Prose(raw="".join(body), start_line=number + 1, depth=len(stack))
                cursor = total
                continue
            yield CodeSample(
                lines=tuple(SourceLine(number + 1 + i, _content(raw)) for i, raw in enumerate(body)),
                flags=parse_flags(config),
                start_line=number,
                end_line=close + 1,
                raw="".join(body),
                depth=depth,
            )
            cursor = close + 1
            continue

        if verb == "begin":
            stack.append(_OpenBlock(name=name, line=number))
            cursor += 1
            continue

        if verb == "end":
            names = [block.name for block in stack]
            if name not in names:
                yield Violation(
                    kind=ViolationKind.UNMATCHED_DIRECTIVE,
                    doc_id=doc_id,
                    line=number,
                    message=f"'=end {name}' has no matching '=begin {name}'",
                )
            else:
                while stack[-1].name != name:
                    inner = stack.pop()
                    yield Violation(
                        kind=ViolationKind.UNTERMINATED_BLOCK,
                        doc_id=doc_id,
                        line=inner.line,
                        message=f"'=begin {inner.name}' is closed implicitly by '=end {name}' at line {number}",
                    )
                stack.pop()
            cursor += 1
            continue

        # =for NAME / =code: paragraph block, runs to the next blank line or directive
        if name != "code":
            cursor += 1
            continue
        close = cursor + 1
        while close < total and _content(lines[close]).strip() and not ANY_DIRECTIVE.match(lines[close]):
            close += 1
        body = lines[cursor + 1:close]
        sample_lines = [SourceLine(number + 1 + i, _content(raw)) for i, raw in enumerate(body)]
        sample_raw = "".join(body)
        flags = parse_flags(config)
        inline = config.strip()
        if abbreviated is not None and inline and not inline.startswith(":"):
            # =code say 1;  (the rest of the line is the first body line)
            sample_lines.insert(0, SourceLine(number, inline))
            sample_raw = inline + line[len(text):] + sample_raw
            flags = ()
        yield CodeSample(
            lines=tuple(sample_lines),
            flags=flags,
            start_line=number,
            end_line=close if body else number,
            raw=sample_raw,
            depth=depth,
        )
        cursor = close

    yield from flush()

    for block in reversed(stack):
        yield Violation(
            kind=ViolationKind.UNTERMINATED_BLOCK,
            doc_id=doc_id,
            line=block.line,
            message=f"'=begin {block.name}' is never closed by '=end {block.name}'",
        )


# ============================================================
# Public API
# ============================================================

class RegionStream:
    """
    Lazy, restartable sequence of Regions for one document

    Every iteration starts a fresh scan over the same immutable line buffer,
    so iterating twice yields equal sequences and nothing leaks between
    iterations.
    """

    def __init__(self, text: str, doc_id: str, syntax: Optional[str] = None):
        self.doc_id = doc_id
        self.syntax = syntax or detect_syntax(doc_id)
        if self.syntax not in (SYNTAX_POD, SYNTAX_MARKDOWN):
            raise ValueError(f"Unknown markup syntax: {self.syntax}")
        self._text = text
        self._lines = split_lines(text)

    def events(self) -> Iterator[ScanEvent]:
        if self.syntax == SYNTAX_MARKDOWN:
            from example_checker.core.markdown import scan_markdown
            return scan_markdown(self._text, self._lines, self.doc_id)
        return _scan_pod(self._lines, self.doc_id)

    def __iter__(self) -> Iterator[Region]:
        for event in self.events():
            if isinstance(event, (Prose, Heading, CodeSample)):
                yield event

    def violations(self) -> tuple[Violation, ...]:
        return tuple(e for e in self.events() if isinstance(e, Violation))

    def to_document(self) -> Document:
        """Materialise regions and findings in a single pass."""
        regions: list[Region] = []
        violations: list[Violation] = []
        deepest = DepthMark(depth=0, line=0)
        for event in self.events():
            if isinstance(event, Violation):
                violations.append(event)
            elif isinstance(event, DepthMark):
                deepest = event
            else:
                regions.append(event)
        logger.debug(f"Scanned {self.doc_id}: {len(regions)} regions, {len(violations)} structural findings")
        return Document(
            doc_id=self.doc_id,
            regions=tuple(regions),
            violations=tuple(violations),
            max_depth=deepest.depth,
            deepest_line=deepest.line,
            syntax=self.syntax,
        )


def scan(text: str, doc_id: str, syntax: Optional[str] = None) -> RegionStream:
    """Scan ``text`` into a lazy Region sequence."""
    return RegionStream(text, doc_id, syntax)


def scan_document(text: str, doc_id: str, syntax: Optional[str] = None) -> Document:
    """Scan ``text`` into an immutable Document."""
    return RegionStream(text, doc_id, syntax).to_document()
