"""Pathspec-based document discovery.

Directories are walked recursively; files are kept when their suffix is one
of the configured documentation suffixes and no ignore rule matches them.
Ignore rules come from the root ``.gitignore`` (or built-in defaults when
there is none) plus any nested ``.gitignore`` files.
"""

import logging
from pathlib import Path
from typing import Iterable

import pathspec

from example_checker.errors import SourceError

logger = logging.getLogger(__name__)


# Default ignore patterns when no .gitignore exists
DEFAULT_IGNORE_PATTERNS: list[str] = [
    ".git/",
    "node_modules/",
    "venv/",
    ".venv/",
    "__pycache__/",
    ".precomp/",
    ".tox/",
    ".pytest_cache/",
    "build/",
    "dist/",
    "html/",
]


def _read_spec(gitignore_path: Path) -> pathspec.PathSpec:
    with open(gitignore_path, encoding="utf-8") as f:
        return pathspec.PathSpec.from_lines("gitwildmatch", f.readlines())


class PathspecFilter:
    """Document filter with nested gitignore support."""

    def __init__(self, root: Path, suffixes: Iterable[str], include_nested: bool = True):
        """
        Initialize the filter.

        Args:
            root: Directory being scanned
            suffixes: Documentation file suffixes to keep (e.g. ".rakudoc")
            include_nested: Whether to honour nested .gitignore files
        """
        self.root = root
        self.suffixes = frozenset(s.lower() for s in suffixes)
        self._root_spec = self._load_root_spec()
        self._nested_specs: dict[Path, pathspec.PathSpec] = {}
        if include_nested:
            self._load_nested_gitignores()

    def _load_root_spec(self) -> pathspec.PathSpec:
        gitignore_path = self.root / ".gitignore"
        if gitignore_path.is_file():
            try:
                return _read_spec(gitignore_path)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Cannot read {gitignore_path}, using default ignore patterns: {e}")
        return pathspec.PathSpec.from_lines("gitwildmatch", DEFAULT_IGNORE_PATTERNS)

    def _load_nested_gitignores(self) -> None:
        for gitignore_path in self.root.rglob(".gitignore"):
            if gitignore_path.parent == self.root:
                continue
            try:
                self._nested_specs[gitignore_path.parent] = _read_spec(gitignore_path)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Skipping unreadable {gitignore_path}: {e}")

    def should_ignore(self, path: Path) -> bool:
        """
        Check if a file should be ignored.

        The root spec applies to every file; a nested spec applies to files
        under its own directory, deepest directory first.
        """
        try:
            relative = path.relative_to(self.root)
        except ValueError:
            relative = path

        if self._root_spec.match_file(relative.as_posix()):
            return True

        for directory in sorted(self._nested_specs, key=lambda p: len(p.parts), reverse=True):
            try:
                inner = path.resolve().relative_to(directory.resolve())
            except ValueError:
                continue
            if self._nested_specs[directory].match_file(inner.as_posix()):
                return True
        return False

    def is_document(self, path: Path) -> bool:
        return path.suffix.lower() in self.suffixes

    def iter_documents(self) -> list[Path]:
        """All documentation files under the root, sorted by path."""
        return sorted(
            p for p in self.root.rglob("*")
            if p.is_file() and self.is_document(p) and not self.should_ignore(p)
        )


def collect_documents(paths: Iterable[Path], suffixes: Iterable[str]) -> list[Path]:
    """
    Expand the given paths into a deduplicated list of document files

    Files named explicitly are kept whatever their suffix; directories are
    walked with PathspecFilter.

    Raises:
        SourceError: a path does not exist
    """
    suffixes = tuple(suffixes)
    documents: list[Path] = []
    seen: set[Path] = set()
    for path in paths:
        if not path.exists():
            raise SourceError(f"Path does not exist: {path}")
        found = PathspecFilter(path, suffixes).iter_documents() if path.is_dir() else [path]
        for document in found:
            key = document.resolve()
            if key not in seen:
                seen.add(key)
                documents.append(document)
    logger.debug(f"Collected {len(documents)} document(s)")
    return documents
