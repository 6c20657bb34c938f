"""
Rich terminal reporter

One line per violation in compiler style, so editors and CI log parsers can
jump to the location:

    doc/Type/List.rakudoc:120: [MissingAssertion] Code sample starting at ...

followed by a summary panel.
"""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from example_checker.core.models import Severity
from example_checker.verification.aggregator import DocumentStatus, Report, ReportedViolation


SEVERITY_STYLES: dict[Severity, str] = {
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
    Severity.INFO: "dim",
}

STATUS_STYLES: dict[DocumentStatus, str] = {
    DocumentStatus.PASS: "green",
    DocumentStatus.FAIL: "red",
    DocumentStatus.INCOMPLETE: "yellow",
    DocumentStatus.IO_FAILURE: "red",
}


def format_violation(reported: ReportedViolation) -> str:
    """``<docId>:<line>: [<kind>] <message>``"""
    v = reported.violation
    return f"{v.doc_id}:{v.line}: [{v.kind.value}] {v.message}"


class RichReporter:
    """Rich terminal reporter"""

    def __init__(self, console: Console | None = None, show_documents: bool = False):
        self.console = console or Console()
        self.show_documents = show_documents

    def report(self, result: Report, target: str) -> None:
        """Print every violation, every unreadable document, then a summary."""
        for reported in result.violations:
            self.console.print(
                Text(format_violation(reported), style=SEVERITY_STYLES[reported.severity]),
                soft_wrap=True,
            )

        for failure in result.failures:
            self.console.print(
                Text(f"{failure.doc_id}: [IOFailure] {failure.message}", style="bold red"),
                soft_wrap=True,
            )

        if self.show_documents and result.document_statuses:
            self._print_documents(result)

        self._print_summary(result, target)

    def _print_documents(self, result: Report) -> None:
        self.console.print()
        table = Table(show_header=True, header_style="bold cyan", box=None)
        table.add_column("Document", style="cyan")
        table.add_column("Status")
        table.add_column("Findings", justify="right")

        counts: dict[str, int] = {}
        for reported in result.violations:
            doc_id = reported.violation.doc_id
            counts[doc_id] = counts.get(doc_id, 0) + 1

        for doc_id, status in result.document_statuses:
            table.add_row(
                doc_id,
                Text(status.value, style=STATUS_STYLES[status]),
                str(counts.get(doc_id, 0)),
            )
        self.console.print(table)

    def _print_summary(self, result: Report, target: str) -> None:
        color = "green" if result.passed else "red"
        verdict = "PASS" if result.passed else "FAIL"

        content = Text()
        content.append(f"{verdict}\n", style=f"bold {color}")
        content.append(f"{result.document_count} document(s), ", style="dim")
        content.append(f"{result.violation_count} violation(s): ")
        content.append(f"{result.error_count} error(s)", style="red" if result.error_count else "dim")
        content.append(", ")
        content.append(f"{result.warning_count} warning(s)", style="yellow" if result.warning_count else "dim")
        if result.failures:
            content.append(f"\n{len(result.failures)} document(s) could not be read", style="bold red")
        if result.incomplete:
            content.append(f"\n{len(result.incomplete)} document(s) incomplete", style="yellow")
        content.append(f"\nTarget: {target}", style="dim")

        self.console.print()
        self.console.print(Panel(content, title="[bold]Example check[/bold]", border_style=color))
