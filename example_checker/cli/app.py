"""
CLI entry point - built with Typer

Check flow:
1. Load configuration (pyproject.toml / --config, then options)
2. Collect documents from the given files and directories
3. Scan, parse and check every document on a worker pool
4. Aggregate and print the report
5. Exit 0 (pass), 1 (fail) or 2 (input error)
"""

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from example_checker.config import load_config
from example_checker.errors import ExampleCheckerError
from example_checker.filters import collect_documents
from example_checker.logging_config import setup_logging
from example_checker.pipeline import run
from example_checker.reporters import JsonReporter, RichReporter

app = typer.Typer(
    name="example-checker",
    help="Example-Checker: verify the code examples in your documentation pages.",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)

EXIT_INPUT_ERROR = 2


@app.command()
def check(
    paths: List[Path] = typer.Argument(
        ...,
        help="Documents or directories to check (directories are scanned recursively)",
    ),
    max_nesting: Optional[int] = typer.Option(
        None,
        "--max-nesting",
        help="Deepest allowed directive nesting [default: 20]",
    ),
    strict: Optional[bool] = typer.Option(
        None,
        "--strict/--no-strict",
        help="Promote warnings to errors",
    ),
    parallelism: Optional[int] = typer.Option(
        None,
        "--parallelism",
        "-j",
        help="Documents checked concurrently [default: CPU count]",
    ),
    format: Optional[str] = typer.Option(
        None,
        "--format",
        "-f",
        help="Output format: text (default) or json",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="TOML config file [default: nearest pyproject.toml with a [tool.example-checker] table]",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show detailed output",
    ),
) -> None:
    """
    Check code samples and their '# OUTPUT: «...»' annotations.

    Examples:
        example-checker check doc/
        example-checker check doc/Type/List.rakudoc --strict
        example-checker check doc/ README.md --format json -j 8
    """
    setup_logging(verbose)

    try:
        config = load_config(config_file).with_overrides(
            max_nesting=max_nesting,
            strict=strict,
            parallelism=parallelism,
            output_format=format,
        )
        documents = collect_documents(paths, config.suffixes)
    except ExampleCheckerError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(EXIT_INPUT_ERROR)

    if verbose:
        err_console.print(f"[dim]Checking {len(documents)} document(s)...[/dim]")

    report = run(documents, config)

    target = " ".join(str(p) for p in paths)
    if config.output_format == "json":
        reporter = JsonReporter()
    else:
        reporter = RichReporter(console, show_documents=verbose)
    reporter.report(report, target)

    raise typer.Exit(report.exit_code)


@app.command()
def version() -> None:
    """Show the version of Example-Checker."""
    from example_checker import __version__
    console.print(f"[bold]Example-Checker[/bold] v{__version__}")


if __name__ == "__main__":
    app()
