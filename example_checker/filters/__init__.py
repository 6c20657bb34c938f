"""Document discovery.

Walks directories for documentation files, honouring gitignore rules via
the pathspec library.
"""

from example_checker.filters.pathspec_filter import (
    PathspecFilter,
    DEFAULT_IGNORE_PATTERNS,
    collect_documents,
)

__all__ = [
    "PathspecFilter",
    "DEFAULT_IGNORE_PATTERNS",
    "collect_documents",
]
