"""
Tests for example_checker.core.scanner (Pod6) and core.markdown

Test Coverage:
- scan(): region classification, flags, inline spans, line numbers
- Structural findings: UnmatchedDirective, UnterminatedBlock
- Round-trip of region text and restartable iteration
- Markdown fences and headings
"""
import re

import pytest

from example_checker.core import (
    CodeSample,
    Heading,
    Prose,
    ViolationKind,
    detect_syntax,
    find_inline_spans,
    parse_flags,
    scan,
    scan_document,
    split_lines,
)


POD_PAGE = """=begin pod
=TITLE class List

Some C<say> prose with C«a < b» and C<<x>y>>.

=head1 Methods

=begin code :skip-test
say 1; # OUTPUT: «1␤»
=end code

=for code
my @a = 1, 2;

Final words.
=end pod
"""

MARKDOWN_PAGE = """# Title

Use `say` here.

```raku
say 1; # OUTPUT: «1␤»
```

```raku skip-test
die;
```
"""

POD_DIRECTIVE_LINE = re.compile(r'^\s*=(begin|end|for)\s')
FENCE_LINE = re.compile(r'^\s*(```|~~~)')


def _strip(text: str, pattern: re.Pattern) -> str:
    return "".join(line for line in split_lines(text) if not pattern.match(line))


class TestPodScan:
    def test_single_code_sample(self):
        regions = list(scan("=begin code\nsay 1;\n# OUTPUT: «1»\n=end code", "a.rakudoc"))

        assert len(regions) == 1
        sample = regions[0]
        assert isinstance(sample, CodeSample)
        assert [line.text for line in sample.lines] == ["say 1;", "# OUTPUT: «1»"]
        assert [line.number for line in sample.lines] == [2, 3]
        assert sample.start_line == 1
        assert sample.end_line == 4
        assert sample.depth == 1

    def test_region_kinds_in_document_order(self):
        regions = list(scan(POD_PAGE, "list.rakudoc"))
        kinds = [type(r).__name__ for r in regions]

        assert kinds == ["Heading", "Prose", "Heading", "Prose", "CodeSample", "Prose", "CodeSample", "Prose"]

    def test_title_is_level_zero_heading(self):
        document = scan_document(POD_PAGE, "list.rakudoc")

        assert [(h.level, h.text) for h in document.headings] == [(0, "class List"), (1, "Methods")]

    def test_code_sample_flags(self):
        document = scan_document(POD_PAGE, "list.rakudoc")
        first, second = document.samples

        assert first.is_skip
        assert not second.is_skip
        assert [line.text for line in second.lines] == ["my @a = 1, 2;"]

    def test_paragraph_code_block_ends_at_blank_line(self):
        document = scan_document("=for code\nsay 1;\nsay 2;\n\nafter\n", "a.pod6")

        sample = document.samples[0]
        assert [line.number for line in sample.lines] == [2, 3]
        assert isinstance(document.regions[-1], Prose)
        assert document.regions[-1].raw == "\nafter\n"

    def test_abbreviated_code_block(self):
        document = scan_document("=code :lang<raku>\nsay 1;\n", "a.pod6")

        assert document.samples[0].language == "raku"

    def test_abbreviated_code_with_content_on_directive_line(self):
        document = scan_document("=code say 1; # OUTPUT: «1␤»\nsay 2;\n\nafter\n", "a.pod6")
        sample = document.samples[0]

        assert [(line.number, line.text) for line in sample.lines] == [
            (1, "say 1; # OUTPUT: «1␤»"),
            (2, "say 2;"),
        ]
        assert sample.flags == ()
        assert sample.raw == "say 1; # OUTPUT: «1␤»\nsay 2;\n"

    @pytest.mark.parametrize("newline", ["\r\n", "\r"])
    def test_other_line_endings(self, newline):
        text = "=begin code\nsay 1;\n# OUTPUT: «1»\n=end code\n".replace("\n", newline)
        document = scan_document(text, "a.rakudoc")

        assert document.violations == ()
        assert [(line.number, line.text) for line in document.samples[0].lines] == [
            (2, "say 1;"),
            (3, "# OUTPUT: «1»"),
        ]

    def test_directives_inside_code_body_are_text(self):
        text = "=begin code\n=begin pod\nsay 1;\n=end code\n"
        document = scan_document(text, "a.rakudoc")

        assert document.violations == ()
        assert [line.text for line in document.samples[0].lines] == ["=begin pod", "say 1;"]

    def test_inline_spans_recorded_on_prose(self):
        document = scan_document(POD_PAGE, "list.rakudoc")
        prose = [r for r in document.regions if isinstance(r, Prose) and r.spans][0]

        assert [s.text for s in prose.spans] == ["say", "a < b", "x>y"]
        assert prose.spans[0].line == 4
        assert prose.spans[0].column == 6

    def test_depth_tracks_nesting(self):
        text = "=begin pod\n=begin item\n=begin code\nsay 1;\n=end code\n=end item\n=end pod\n"
        document = scan_document(text, "a.rakudoc")

        assert document.samples[0].depth == 3
        assert document.max_depth == 3
        assert document.deepest_line == 3


class TestPodStructuralFindings:
    def test_unmatched_end(self):
        document = scan_document("text\n=end code\nmore\n", "a.rakudoc")

        assert [(v.kind, v.line) for v in document.violations] == [(ViolationKind.UNMATCHED_DIRECTIVE, 2)]

    def test_unterminated_container_at_end(self):
        document = scan_document("=begin pod\nText\n", "a.rakudoc")

        assert [(v.kind, v.line) for v in document.violations] == [(ViolationKind.UNTERMINATED_BLOCK, 1)]

    def test_unterminated_code_reported_once_at_opening_line(self):
        document = scan_document("Intro\n=begin code :lang<raku>\nsay 1;\n", "a.rakudoc")

        assert [(v.kind, v.line) for v in document.violations] == [(ViolationKind.UNTERMINATED_BLOCK, 2)]
        assert document.samples == ()
        assert document.regions[-1].raw == "say 1;\n"

    def test_end_of_outer_block_closes_inner(self):
        document = scan_document("=begin pod\n=begin item\ntext\n=end pod\n", "a.rakudoc")

        assert [(v.kind, v.line) for v in document.violations] == [(ViolationKind.UNTERMINATED_BLOCK, 2)]

    def test_scan_never_raises_on_garbage(self):
        text = "=end\n=begin\n=for\n=head\n«»C<\n=end pod\n=end pod\n"
        document = scan_document(text, "a.rakudoc")

        assert all(v.kind == ViolationKind.UNMATCHED_DIRECTIVE for v in document.violations)
        assert len(document.violations) == 2


class TestRoundTripAndRestart:
    def test_pod_round_trip(self):
        regions = list(scan(POD_PAGE, "list.rakudoc"))

        assert "".join(r.raw for r in regions) == _strip(POD_PAGE, POD_DIRECTIVE_LINE)

    def test_markdown_round_trip(self):
        regions = list(scan(MARKDOWN_PAGE, "page.md"))

        assert "".join(r.raw for r in regions) == _strip(MARKDOWN_PAGE, FENCE_LINE)

    def test_prose_only_round_trip_keeps_missing_final_newline(self):
        text = "line one\nline two"
        regions = list(scan(text, "a.rakudoc"))

        assert "".join(r.raw for r in regions) == text

    def test_iterating_twice_gives_equal_sequences(self):
        stream = scan(POD_PAGE, "list.rakudoc")

        assert list(stream) == list(stream)
        assert list(scan(POD_PAGE, "list.rakudoc")) == list(stream)

    def test_stream_violations_match_document(self):
        text = "=begin pod\n=end code\n"
        stream = scan(text, "a.rakudoc")

        assert stream.violations() == scan_document(text, "a.rakudoc").violations

    def test_empty_text(self):
        document = scan_document("", "a.rakudoc")

        assert document.regions == ()
        assert document.violations == ()


class TestMarkdownScan:
    def test_regions(self):
        regions = list(scan(MARKDOWN_PAGE, "page.md"))

        assert [type(r).__name__ for r in regions] == ["Heading", "Prose", "CodeSample", "Prose", "CodeSample"]
        heading = regions[0]
        assert isinstance(heading, Heading)
        assert (heading.level, heading.text, heading.line) == (1, "Title", 1)

    def test_fence_info_string_flags(self):
        document = scan_document(MARKDOWN_PAGE, "page.md")
        first, second = document.samples

        assert first.language == "raku"
        assert not first.is_skip
        assert second.is_skip
        assert [(line.number, line.text) for line in first.lines] == [(6, "say 1; # OUTPUT: «1␤»")]

    def test_backtick_spans(self):
        document = scan_document(MARKDOWN_PAGE, "page.md")
        prose = document.regions[1]

        assert [s.text for s in prose.spans] == ["say"]

    def test_pod_style_flags_in_info_string(self):
        document = scan_document("```raku :skip-test :must-fail\ndie;\n```\n", "page.md")
        sample = document.samples[0]

        assert sample.has_flag("skip-test")
        assert sample.has_flag("must-fail")

    def test_unclosed_fence(self):
        document = scan_document("```raku\nsay 1;\n", "page.md")

        assert [(v.kind, v.line) for v in document.violations] == [(ViolationKind.UNTERMINATED_BLOCK, 1)]
        assert document.samples == ()

    @pytest.mark.parametrize("newline", ["\r\n", "\r"])
    def test_round_trip_with_other_line_endings(self, newline):
        text = MARKDOWN_PAGE.replace("\n", newline)
        regions = list(scan(text, "page.md"))

        assert "".join(r.raw for r in regions) == _strip(text, FENCE_LINE)

    @pytest.mark.parametrize("newline", ["\r\n", "\r"])
    def test_other_line_endings_scan_like_unix(self, newline):
        unix = scan_document(MARKDOWN_PAGE, "page.md")
        other = scan_document(MARKDOWN_PAGE.replace("\n", newline), "page.md")

        assert other.violations == ()
        assert [type(r).__name__ for r in other.regions] == [type(r).__name__ for r in unix.regions]
        assert [s.lines for s in other.samples] == [s.lines for s in unix.samples]
        assert other.headings[0].text == "Title"

    def test_bare_carriage_return_fence(self):
        document = scan_document("```raku\rsay 1;\r```\r", "mac.md")

        assert document.violations == ()
        assert [(line.number, line.text) for line in document.samples[0].lines] == [(2, "say 1;")]

    def test_unclosed_fence_with_carriage_returns(self):
        document = scan_document("```raku\r\nsay 1;\r\n", "page.md")

        assert [(v.kind, v.line) for v in document.violations] == [(ViolationKind.UNTERMINATED_BLOCK, 1)]

    def test_explicit_syntax_overrides_suffix(self):
        document = scan_document("=begin code\nsay 1;\n=end code\n", "notes.md", syntax="pod")

        assert len(document.samples) == 1
        assert document.syntax == "pod"

    def test_unknown_syntax_rejected(self):
        with pytest.raises(ValueError, match="Unknown markup syntax"):
            scan("text", "a.txt", syntax="rst")


class TestHelpers:
    def test_parse_flags(self):
        flags = parse_flags(' :skip-test<needs network> :lang<raku> :!solo :preamble("use v6;") :must-fail')

        assert [f.name for f in flags] == ["skip-test", "lang", "solo", "preamble", "must-fail"]
        assert flags[0].value == "needs network"
        assert flags[2].negated
        assert flags[3].value == "use v6;"
        assert flags[4].value is None
        assert flags[1].raw == ":lang<raku>"

    def test_unknown_flags_preserved(self):
        flags = parse_flags(":frobnicate<x> :skip")

        assert [f.raw for f in flags] == [":frobnicate<x>", ":skip"]

    def test_split_lines_keeps_every_terminator(self):
        assert split_lines("a\r\nb\rc\nd") == ("a\r\n", "b\r", "c\n", "d")
        assert split_lines("\r\r\n") == ("\r", "\r\n")

    def test_unbalanced_inline_span_is_text(self):
        assert find_inline_spans("see C<foo and more", 1) == ()

    def test_nested_inline_span(self):
        spans = find_inline_spans("C<Array[Int]<x>> tail", 7)

        assert [(s.text, s.line, s.column) for s in spans] == [("Array[Int]<x>", 7, 1)]

    @pytest.mark.parametrize("doc_id,expected", [
        ("doc/Type/List.rakudoc", "pod"),
        ("doc/Language/list.pod6", "pod"),
        ("README.md", "markdown"),
        ("notes.MARKDOWN", "markdown"),
    ])
    def test_detect_syntax(self, doc_id, expected):
        assert detect_syntax(doc_id) == expected
