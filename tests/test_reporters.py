"""
Tests for example_checker.reporters
"""
import io
import json

from rich.console import Console

from example_checker.core.models import IOFailure, Violation, ViolationKind
from example_checker.reporters import JsonReporter, RichReporter
from example_checker.verification import aggregate


def _report():
    return aggregate(
        [
            Violation(ViolationKind.MISSING_ASSERTION, "doc/List.rakudoc", 120, "no assertion"),
            Violation(ViolationKind.CONFLICTING_FLAGS, "doc/List.rakudoc", 7, "flags clash"),
        ],
        documents=["doc/List.rakudoc", "doc/Array.rakudoc"],
        failures=[IOFailure("doc/Gone.rakudoc", "No such file")],
    )


def test_rich_reporter_prints_compiler_style_lines():
    buffer = io.StringIO()
    console = Console(file=buffer, width=200, color_system=None)

    RichReporter(console).report(_report(), "doc/")

    output = buffer.getvalue()
    lines = output.splitlines()
    assert lines[0] == "doc/List.rakudoc:7: [ConflictingFlags] flags clash"
    assert lines[1] == "doc/List.rakudoc:120: [MissingAssertion] no assertion"
    assert "doc/Gone.rakudoc: [IOFailure] No such file" in output
    assert "FAIL" in output
    assert "Target: doc/" in output


def test_rich_reporter_document_table():
    buffer = io.StringIO()
    console = Console(file=buffer, width=200, color_system=None)

    RichReporter(console, show_documents=True).report(_report(), "doc/")

    output = buffer.getvalue()
    assert "doc/Array.rakudoc" in output
    assert "io-failure" in output


def test_json_reporter():
    buffer = io.StringIO()

    JsonReporter(buffer).report(_report(), "doc/")

    data = json.loads(buffer.getvalue())
    assert data["target"] == "doc/"
    assert data["passed"] is False
    assert [v["line"] for v in data["results"]["doc/List.rakudoc"]] == [7, 120]
    assert data["results"]["doc/Array.rakudoc"] == []
    assert data["failures"] == [{"doc_id": "doc/Gone.rakudoc", "kind": "IOFailure", "message": "No such file"}]
    assert data["statuses"]["doc/Gone.rakudoc"] == "io-failure"
