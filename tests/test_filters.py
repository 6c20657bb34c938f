"""
Tests for example_checker.filters
"""
import pytest

from example_checker.config import DEFAULT_SUFFIXES
from example_checker.errors import SourceError
from example_checker.filters import PathspecFilter, collect_documents


@pytest.fixture
def docs_tree(write_doc, tmp_path):
    write_doc("doc/Type/List.rakudoc", "text\n")
    write_doc("doc/Language/intro.pod6", "text\n")
    write_doc("README.md", "text\n")
    write_doc("notes.txt", "text\n")
    write_doc("node_modules/pkg/README.md", "text\n")
    return tmp_path


def _names(paths, root):
    return sorted(p.relative_to(root).as_posix() for p in paths)


def test_directory_walk_uses_default_ignores(docs_tree):
    documents = collect_documents([docs_tree], DEFAULT_SUFFIXES)

    assert _names(documents, docs_tree) == [
        "README.md",
        "doc/Language/intro.pod6",
        "doc/Type/List.rakudoc",
    ]


def test_root_gitignore_replaces_defaults(docs_tree, write_doc):
    write_doc(".gitignore", "doc/Language/\n")

    documents = PathspecFilter(docs_tree, DEFAULT_SUFFIXES).iter_documents()

    assert _names(documents, docs_tree) == [
        "README.md",
        "doc/Type/List.rakudoc",
        "node_modules/pkg/README.md",
    ]


def test_nested_gitignore(docs_tree, write_doc):
    write_doc("doc/.gitignore", "Type/\n")

    documents = collect_documents([docs_tree], DEFAULT_SUFFIXES)

    assert _names(documents, docs_tree) == ["README.md", "doc/Language/intro.pod6"]


def test_explicit_file_kept_whatever_suffix(docs_tree):
    notes = docs_tree / "notes.txt"

    assert collect_documents([notes], DEFAULT_SUFFIXES) == [notes]


def test_duplicates_removed(docs_tree):
    readme = docs_tree / "README.md"

    documents = collect_documents([readme, docs_tree], DEFAULT_SUFFIXES)

    assert documents.count(readme) == 1
    assert documents[0] == readme


def test_missing_path(tmp_path):
    with pytest.raises(SourceError, match="does not exist"):
        collect_documents([tmp_path / "nope"], DEFAULT_SUFFIXES)
