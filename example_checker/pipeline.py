"""
Run pipeline - scan -> parse -> check per document, aggregate once

Documents are independent, so they are checked on a bounded thread pool.
Within a document the stages run strictly in order. Each document produces
an immutable DocumentResult; the results are merged into the Report in a
single pass after every worker has finished.

A CancelToken is consulted between stages. A document stopped early is
reported as Incomplete, never as passing.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Union

from example_checker.config import CheckerConfig
from example_checker.core.models import DocumentResult, IOFailure, Violation, ViolationKind
from example_checker.core.scanner import scan_document
from example_checker.verification.aggregator import Report, aggregate
from example_checker.verification.checker import check_document

logger = logging.getLogger(__name__)


class CancelToken:
    """Thread-safe stop request shared by all workers of a run."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass(frozen=True)
class InMemoryDocument:
    """Document text supplied directly instead of read from disk."""
    doc_id: str
    text: str


Source = Union[Path, InMemoryDocument]


def _incomplete(doc_id: str, stage: str, partial: tuple[Violation, ...] = ()) -> DocumentResult:
    logger.debug(f"{doc_id}: stopped before {stage}")
    marker = Violation(
        kind=ViolationKind.INCOMPLETE,
        doc_id=doc_id,
        line=0,
        message=f"Checking was cancelled before {stage}",
    )
    return DocumentResult(doc_id=doc_id, violations=partial + (marker,), incomplete=True)


def check_text(
    text: str,
    doc_id: str,
    config: Optional[CheckerConfig] = None,
    cancel: Optional[CancelToken] = None,
    syntax: Optional[str] = None,
) -> DocumentResult:
    """Run scan, parse and check over one document's text."""
    config = config or CheckerConfig()
    if cancel is not None and cancel.cancelled:
        return _incomplete(doc_id, "scanning")

    document = scan_document(text, doc_id, syntax)
    if cancel is not None and cancel.cancelled:
        return _incomplete(doc_id, "parsing", document.violations)

    parsed, violations = check_document(document, config)
    return DocumentResult(
        doc_id=doc_id,
        violations=violations,
        sample_count=len(parsed),
        assertion_count=sum(len(p.assertions) for p in parsed),
    )


def check_path(
    path: Path,
    config: Optional[CheckerConfig] = None,
    cancel: Optional[CancelToken] = None,
    doc_id: Optional[str] = None,
) -> DocumentResult:
    """Read one file and check it; an unreadable file becomes an IOFailure."""
    doc_id = doc_id or path.as_posix()
    if cancel is not None and cancel.cancelled:
        return _incomplete(doc_id, "reading")
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Cannot read {doc_id}: {e}")
        return DocumentResult(doc_id=doc_id, failure=IOFailure(doc_id=doc_id, message=str(e)))
    return check_text(text, doc_id, config, cancel)


def _check_source(source: Source, config: CheckerConfig, cancel: CancelToken) -> DocumentResult:
    try:
        if isinstance(source, InMemoryDocument):
            return check_text(source.text, source.doc_id, config, cancel)
        return check_path(Path(source), config, cancel)
    except Exception as e:
        # Failure stays with this document
        doc_id = _doc_id_of(source)
        logger.error(f"{doc_id}: checking failed: {e!r}")
        marker = Violation(
            kind=ViolationKind.INCOMPLETE,
            doc_id=doc_id,
            line=0,
            message=f"Checking stopped by an internal error: {e!r}",
        )
        return DocumentResult(doc_id=doc_id, violations=(marker,), incomplete=True)


def _doc_id_of(source: Source) -> str:
    if isinstance(source, InMemoryDocument):
        return source.doc_id
    return Path(source).as_posix()


def _settle(source: Source, future: Future) -> DocumentResult:
    if future.done() and not future.cancelled():
        return future.result()
    future.cancel()
    return _incomplete(_doc_id_of(source), "completion")


def check_documents(
    sources: Iterable[Source],
    config: Optional[CheckerConfig] = None,
    cancel: Optional[CancelToken] = None,
) -> list[DocumentResult]:
    """
    Check every source, concurrently when ``config.parallelism`` > 1

    Results come back in source order. On KeyboardInterrupt the run is
    cancelled: queued documents and documents still in flight are returned
    as Incomplete.
    """
    config = config or CheckerConfig()
    cancel = cancel or CancelToken()
    sources = list(sources)
    if not sources:
        return []

    workers = min(config.parallelism, len(sources))
    logger.info(f"Checking {len(sources)} document(s) with {workers} worker(s)")

    if workers == 1:
        results: list[DocumentResult] = []
        for source in sources:
            try:
                results.append(_check_source(source, config, cancel))
            except KeyboardInterrupt:
                cancel.cancel()
                results.append(_incomplete(_doc_id_of(source), "completion"))
        return results

    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures: list[Future] = [pool.submit(_check_source, s, config, cancel) for s in sources]
        try:
            return [future.result() for future in futures]
        except KeyboardInterrupt:
            logger.warning("Interrupted, abandoning unfinished documents")
            cancel.cancel()
            return [_settle(source, future) for source, future in zip(sources, futures)]


def build_report(results: Iterable[DocumentResult], config: Optional[CheckerConfig] = None) -> Report:
    """Merge per-document results into one Report."""
    results = list(results)
    return aggregate(
        (v for result in results for v in result.violations),
        documents=[result.doc_id for result in results],
        failures=[result.failure for result in results if result.failure is not None],
        config=config,
    )


def run(
    sources: Iterable[Source],
    config: Optional[CheckerConfig] = None,
    cancel: Optional[CancelToken] = None,
) -> Report:
    """Check ``sources`` and return the aggregated Report."""
    config = config or CheckerConfig()
    return build_report(check_documents(sources, config, cancel), config)
