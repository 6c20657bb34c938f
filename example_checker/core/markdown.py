"""
Markdown flavour of the block scanner

Uses markdown-it-py for block structure: fenced code blocks become
CodeSamples, headings become Headings, every other line is Prose. The fence
info string carries the language and the sample flags, either bare
(```` ```raku skip-test ````) or Pod style (```` ```raku :skip-test ````).
"""

from typing import Iterator

from markdown_it import MarkdownIt
from markdown_it.token import Token

from example_checker.core.models import (
    CodeSample,
    Flag,
    Heading,
    InlineSpan,
    Prose,
    Region,
    SourceLine,
    Violation,
    ViolationKind,
)
from example_checker.core.patterns import BACKTICK_SPAN, FENCE
from example_checker.core.scanner import DepthMark, parse_flags


def parse_info_string(info: str) -> tuple[Flag, ...]:
    """
    Parse a fence info string into flags

    The first word, unless it starts with ``:``, is the language and becomes
    a ``lang`` flag. ``key=value`` words become valued flags.
    """
    flags: list[Flag] = []
    words = info.split()
    for index, word in enumerate(words):
        if word.startswith(":"):
            flags.extend(parse_flags(word))
        elif index == 0:
            flags.append(Flag(name="lang", value=word, raw=word))
        elif "=" in word:
            name, _, value = word.partition("=")
            flags.append(Flag(name=name, value=value, raw=word))
        else:
            flags.append(Flag(name=word, raw=word))
    return tuple(flags)


def find_backtick_spans(text: str, line_number: int) -> tuple[InlineSpan, ...]:
    """Find backtick code spans on a single line."""
    return tuple(
        InlineSpan(
            line=line_number,
            column=match.start() + 1,
            marker=match.group("ticks"),
            text=match.group("text").strip(),
        )
        for match in BACKTICK_SPAN.finditer(text)
    )


def _is_closing_fence(line: str, opener: str) -> bool:
    match = FENCE.match(line.rstrip("\r\n").lstrip(" >"))
    if not match or match.group("info").strip():
        return False
    fence = match.group("fence")
    return fence[0] == opener[0] and len(fence) >= len(opener)


def _fence_regions(
    token: Token,
    lines: tuple[str, ...],
    doc_id: str,
) -> tuple[Violation | None, list[tuple[int, int, Region | None]]]:
    """
    Map a fence token to claimed line ranges

    Returns:
        (finding, [(first line index, end index, region or None)]) where a
        None region marks lines that are stripped from the output
    """
    start, end = token.map
    end = min(end, len(lines))
    if not (end - 1 > start and _is_closing_fence(lines[end - 1], token.markup)):
        finding = Violation(
            kind=ViolationKind.UNTERMINATED_BLOCK,
            doc_id=doc_id,
            line=start + 1,
            message=f"Code fence '{token.markup}' is never closed",
        )
        body = Prose(raw="".join(lines[start + 1:end]), start_line=start + 2, depth=token.level)
        return finding, [(start, start + 1, None), (start + 1, end, body)]

    raw_body = lines[start + 1:end - 1]
    content_lines = token.content.split("\n")[:-1] if token.content else []
    if len(content_lines) != len(raw_body):
        content_lines = [raw.rstrip("\r\n") for raw in raw_body]
    sample = CodeSample(
        lines=tuple(SourceLine(start + 2 + i, text.rstrip("\r")) for i, text in enumerate(content_lines)),
        flags=parse_info_string(token.info),
        start_line=start + 1,
        end_line=end,
        raw="".join(raw_body),
        depth=token.level + 1,
    )
    return None, [(start, end, sample)]


def scan_markdown(text: str, lines: tuple[str, ...], doc_id: str) -> Iterator[object]:
    """
    Scan Markdown ``text`` (already split into ``lines``)

    Yields the same event types as the Pod6 scan: regions in document
    order, Violations, and DepthMarks.
    """
    md = MarkdownIt("commonmark")
    tokens = md.parse(text)

    # line index -> (end index, region or None for stripped lines)
    claimed: dict[int, tuple[int, Region | None]] = {}
    findings: list[Violation] = []
    max_depth = 0
    marks: list[DepthMark] = []

    for index, token in enumerate(tokens):
        if token.map is None:
            continue
        if token.nesting == 1 or token.type == "fence":
            depth = token.level + 1
            if depth > max_depth:
                max_depth = depth
                marks.append(DepthMark(depth=depth, line=token.map[0] + 1))

        if token.type == "fence":
            finding, ranges = _fence_regions(token, lines, doc_id)
            if finding is not None:
                findings.append(finding)
            for start, end, region in ranges:
                claimed[start] = (end, region)
        elif token.type == "heading_open":
            start, end = token.map
            inline = tokens[index + 1] if index + 1 < len(tokens) else None
            heading_text = inline.content if inline is not None and inline.type == "inline" else ""
            claimed[start] = (end, Heading(
                level=int(token.tag[1]),
                text=heading_text.strip(),
                raw="".join(lines[start:end]),
                line=start + 1,
                depth=token.level,
            ))

    yield from marks

    prose: list[str] = []
    prose_start = 1
    spans: list[InlineSpan] = []
    cursor = 0
    while cursor < len(lines):
        if cursor in claimed:
            if prose:
                yield Prose(raw="".join(prose), start_line=prose_start, spans=tuple(spans))
                prose, spans = [], []
            end, region = claimed[cursor]
            if region is not None:
                yield region
            cursor = max(end, cursor + 1)
            continue
        if not prose:
            prose_start = cursor + 1
        prose.append(lines[cursor])
        spans.extend(find_backtick_spans(lines[cursor].rstrip("\r\n"), cursor + 1))
        cursor += 1
    if prose:
        yield Prose(raw="".join(prose), start_line=prose_start, spans=tuple(spans))

    yield from findings
