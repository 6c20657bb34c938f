"""Shared fixtures."""

from pathlib import Path

import pytest

from example_checker.core.models import CodeSample, Flag, SourceLine


@pytest.fixture
def make_sample():
    """Build a CodeSample whose body starts on the line after ``start``."""
    def _make(*lines: str, flags: tuple[str, ...] = (), start: int = 1, depth: int = 1) -> CodeSample:
        body = tuple(SourceLine(start + 1 + i, text) for i, text in enumerate(lines))
        return CodeSample(
            lines=body,
            flags=tuple(Flag(name=name, raw=f":{name}") for name in flags),
            start_line=start,
            end_line=start + len(lines) + 1,
            raw="".join(f"{text}\n" for text in lines),
            depth=depth,
        )
    return _make


@pytest.fixture
def write_doc(tmp_path: Path):
    """Write a document under tmp_path and return its path."""
    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path
    return _write

