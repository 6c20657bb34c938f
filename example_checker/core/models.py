"""
Data models shared by every pipeline stage.

Everything here is a frozen dataclass: a stage builds new values from the
previous stage's output and never edits them in place.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union


class ViolationKind(Enum):
    """Finding categories reported by the checker."""
    UNMATCHED_DIRECTIVE = "UnmatchedDirective"
    UNTERMINATED_BLOCK = "UnterminatedBlock"
    MALFORMED_ASSERTION = "MalformedAssertion"
    MISSING_ASSERTION = "MissingAssertion"
    EMPTY_ASSERTION_AMBIGUOUS = "EmptyAssertionAmbiguous"
    CONFLICTING_FLAGS = "ConflictingFlags"
    EXCESSIVE_NESTING = "ExcessiveNesting"
    INCOMPLETE = "Incomplete"
    IO_FAILURE = "IOFailure"


class Severity(Enum):
    """Severity of a violation once config has been applied."""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class Multiplicity(Enum):
    """Whether an expected output fits on one comment or spans several."""
    SINGLE = "single"
    CONTINUATION = "continuation"


# Flags that turn a code sample into a non-verified example
SKIP_FLAGS: frozenset[str] = frozenset({"skip", "skip-test"})


@dataclass(frozen=True)
class Flag:
    """
    A single block configuration option

    Attributes:
        name: option name without the leading colon
        value: option value (``:lang<raku>`` -> ``raku``), None for bare flags
        negated: True for ``:!name``
        raw: option text exactly as written in the source
    """
    name: str
    value: Optional[str] = None
    negated: bool = False
    raw: str = ""


@dataclass(frozen=True)
class SourceLine:
    """One physical line of a code sample (1-based document line number)."""
    number: int
    text: str


@dataclass(frozen=True)
class InlineSpan:
    """Inline code span found inside prose, e.g. ``C<say 1>``."""
    line: int
    column: int
    marker: str
    text: str


@dataclass(frozen=True)
class Prose:
    """Free text between directives."""
    raw: str
    start_line: int
    spans: tuple[InlineSpan, ...] = ()
    depth: int = 0


@dataclass(frozen=True)
class Heading:
    """A heading line; ``=TITLE`` is level 0."""
    level: int
    text: str
    raw: str
    line: int
    depth: int = 0


@dataclass(frozen=True)
class CodeSample:
    """
    A code sample delimited by directives

    Attributes:
        lines: body lines, without the delimiting directives
        flags: configuration options in source order, unknown ones included
        start_line: line of the opening directive
        end_line: line of the closing directive (or of the last body line
            for paragraph blocks)
        raw: body text exactly as it appears in the document
        depth: directive nesting depth of the sample itself
    """
    lines: tuple[SourceLine, ...]
    flags: tuple[Flag, ...] = ()
    start_line: int = 1
    end_line: int = 1
    raw: str = ""
    depth: int = 1

    def has_flag(self, name: str) -> bool:
        return any(f.name == name and not f.negated for f in self.flags)

    def flag_value(self, name: str) -> Optional[str]:
        for f in self.flags:
            if f.name == name and not f.negated:
                return f.value
        return None

    @property
    def is_skip(self) -> bool:
        return any(self.has_flag(name) for name in SKIP_FLAGS)

    @property
    def language(self) -> Optional[str]:
        return self.flag_value("lang")

    @property
    def first_line(self) -> int:
        """Line reported for sample-wide findings."""
        return self.lines[0].number if self.lines else self.start_line


Region = Union[Prose, Heading, CodeSample]


@dataclass(frozen=True)
class OutputAssertion:
    """
    An expected-output claim attached to a statement line

    Attributes:
        text: decoded expected output
        line: line where the ``# OUTPUT:`` marker appears
        attached_to: statement line the claim is about
        multiplicity: single comment or continuation block
        informational: True when the owning sample is skip-flagged
        sentinel: True for the explicit no-output marker
    """
    text: str
    line: int
    attached_to: SourceLine
    multiplicity: Multiplicity = Multiplicity.SINGLE
    informational: bool = False
    sentinel: bool = False


@dataclass(frozen=True)
class Violation:
    """A finding with its source position."""
    kind: ViolationKind
    doc_id: str
    line: int
    message: str

    @property
    def key(self) -> tuple[str, int, ViolationKind]:
        return (self.doc_id, self.line, self.kind)

    def to_dict(self) -> dict[str, Any]:
        return {
            "doc_id": self.doc_id,
            "line": self.line,
            "kind": self.kind.value,
            "message": self.message,
        }


@dataclass(frozen=True)
class ParsedSample:
    """A code sample with its output assertions pulled out."""
    sample: CodeSample
    assertions: tuple[OutputAssertion, ...] = ()
    statements: tuple[SourceLine, ...] = ()
    malformed: tuple[Violation, ...] = ()


@dataclass(frozen=True)
class Document:
    """
    A fully scanned document

    Attributes:
        doc_id: path-like identifier
        regions: regions in document order
        violations: structural findings of the scan
        max_depth: deepest directive nesting seen
        deepest_line: line of the directive that reached ``max_depth``
        syntax: markup flavour used to scan ("pod" or "markdown")
    """
    doc_id: str
    regions: tuple[Region, ...] = ()
    violations: tuple[Violation, ...] = ()
    max_depth: int = 0
    deepest_line: int = 0
    syntax: str = "pod"

    @property
    def samples(self) -> tuple[CodeSample, ...]:
        return tuple(r for r in self.regions if isinstance(r, CodeSample))

    @property
    def headings(self) -> tuple[Heading, ...]:
        return tuple(r for r in self.regions if isinstance(r, Heading))


@dataclass(frozen=True)
class IOFailure:
    """A document that could not be read."""
    doc_id: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "doc_id": self.doc_id,
            "kind": ViolationKind.IO_FAILURE.value,
            "message": self.message,
        }


@dataclass(frozen=True)
class DocumentResult:
    """Outcome of one document's scan -> parse -> check run."""
    doc_id: str
    violations: tuple[Violation, ...] = ()
    sample_count: int = 0
    assertion_count: int = 0
    incomplete: bool = False
    failure: Optional[IOFailure] = None
