"""CLI entry point for dependency-policy."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Literal, Optional, cast

import click
from rich.console import Console

from dependency_policy import __version__
from dependency_policy.analysis.clarify import DirectoryLicenseTextSource
from dependency_policy.analysis.engine import run_check
from dependency_policy.config import load_policy
from dependency_policy.constants import EXIT_ERROR, EXIT_ISSUES, EXIT_SUCCESS
from dependency_policy.exceptions import ConfigurationError, DependencyPolicyError
from dependency_policy.logging import configure_logging, get_logger
from dependency_policy.models.graph import DependencyGraph
from dependency_policy.models.options import CheckOptions, Verbosity
from dependency_policy.models.policy import PolicyDocument
from dependency_policy.models.report import Report, Severity
from dependency_policy.output.report_json import ReportJsonFormatter
from dependency_policy.output.report_markdown import ReportMarkdownFormatter
from dependency_policy.output.terminal import TerminalFormatter
from dependency_policy.resolvers import BaseGraphSource, EnvironmentSource, GraphFileSource

# Module-level console for consistent output
_console = Console()
# Separate console for error output (writes to stderr)
_error_console = Console(stderr=True)

log = get_logger(__name__)


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """Dependency Policy - Enforce license and duplicate-version rules.

    Evaluates a resolved dependency graph against a deny.toml style
    policy and reports every package that breaks it.

    \b
    Examples:
        dependency-policy check
        dependency-policy check --graph metadata.json --policy deny.toml
        dependency-policy check --format json
    """


@main.command()
@click.option(
    "--policy",
    "-p",
    "policy_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to policy file (default: discover deny.toml in the current directory).",
)
@click.option(
    "--graph",
    "-g",
    "graph_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="JSON dependency graph or cargo metadata output "
    "(default: the installed Python environment).",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["terminal", "markdown", "json"], case_sensitive=False),
    default="terminal",
    help="Output format for the report (default: terminal).",
)
@click.option(
    "--output",
    "-o",
    "output_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write report to file instead of stdout.",
)
@click.option(
    "--verbose",
    "-v",
    "verbose_flag",
    is_flag=True,
    default=False,
    help="Show passing checks and skip-tree details.",
)
@click.option(
    "--quiet",
    "-q",
    "quiet_flag",
    is_flag=True,
    default=False,
    help="Show only the verdict and denials.",
)
@click.option(
    "--json-log",
    "json_log",
    is_flag=True,
    default=False,
    help="Emit diagnostic logs as JSON lines on stderr.",
)
def check(
    policy_path: str | None,
    graph_path: str | None,
    output_format: str,
    output_path: str | None,
    verbose_flag: bool,
    quiet_flag: bool,
    json_log: bool,
) -> None:
    """Check a dependency graph against the policy.

    Exits with 0 when the graph passes (warnings allowed), 1 when any
    rule denies it and 2 when the policy or graph cannot be used.

    \b
    Examples:
        dependency-policy check
        dependency-policy check --graph metadata.json
        dependency-policy check --policy deny.toml --format markdown
        dependency-policy check --output report.json --format json
        dependency-policy check --verbose
        dependency-policy check --quiet
    """
    # Validate mutual exclusivity
    if verbose_flag and quiet_flag:
        raise click.UsageError("--verbose and --quiet are mutually exclusive.")

    # Determine verbosity
    if quiet_flag:
        verbosity = Verbosity.QUIET
    elif verbose_flag:
        verbosity = Verbosity.VERBOSE
    else:
        verbosity = Verbosity.NORMAL

    configure_logging(verbose=verbose_flag, quiet=quiet_flag, json_log=json_log)

    format_value = cast(Literal["terminal", "markdown", "json"], output_format.lower())
    options = CheckOptions(format=format_value, verbosity=verbosity)

    try:
        policy = load_policy(policy_path)
        graph = _graph_source(graph_path).load()
        report = _run_check(graph, policy)
        _display_report(report, options, output_path)

        if report.verdict == Severity.DENY:
            sys.exit(EXIT_ISSUES)
        sys.exit(EXIT_SUCCESS)

    except DependencyPolicyError as e:
        _display_error(e, options.format)
        sys.exit(EXIT_ERROR)


def _graph_source(graph_path: Optional[str]) -> BaseGraphSource:
    """Pick the graph source for the run.

    Args:
        graph_path: Optional path to a JSON graph file.

    Returns:
        A file-backed source if a path was given, else the installed
        environment.
    """
    if graph_path is not None:
        return GraphFileSource(Path(graph_path))
    return EnvironmentSource()


def _run_check(graph: DependencyGraph, policy: PolicyDocument) -> Report:
    """Evaluate the policy, locating license files through the graph.

    Args:
        graph: Dependency graph to evaluate.
        policy: Loaded policy document.

    Returns:
        The finished report.
    """
    license_texts = DirectoryLicenseTextSource.from_graph(graph)
    report = run_check(graph, policy, license_texts)
    log.debug(
        "policy check finished",
        verdict=report.verdict.value,
        packages=report.total_packages,
        findings=len(report.findings),
    )
    return report


def _write_output_to_file(content: str, path: str) -> None:
    """Write report content to file.

    Args:
        content: The report content to write.
        path: The file path to write to.

    Raises:
        ConfigurationError: If file cannot be written.
    """
    file_path = Path(path)

    try:
        if file_path.exists():
            _console.print(
                f"[yellow]Warning: Overwriting existing file: {path}[/yellow]"
            )

        file_path.write_text(content, encoding="utf-8")
        file_path.chmod(0o644)
    except OSError as e:
        raise ConfigurationError(f"Cannot write to file '{path}': {e}") from e

    _console.print(f"[green]Report written to {path}[/green]")


def _display_report(
    report: Report, options: CheckOptions, output_path: str | None = None
) -> None:
    """Display the report in the specified format.

    Args:
        report: The report to display.
        options: Check options including format.
        output_path: Optional file path to write output to.
    """
    if options.format == "json":
        content = ReportJsonFormatter().format_report(report)
    elif options.format == "markdown":
        content = ReportMarkdownFormatter().format_report(report)
    else:  # terminal
        if output_path:
            # Terminal format to file uses markdown instead
            content = ReportMarkdownFormatter().format_report(report)
        else:
            TerminalFormatter(
                console=_console, verbosity=options.verbosity
            ).format_report(report)
            return

    if output_path:
        _write_output_to_file(content, output_path)
    else:
        click.echo(content)


def _display_error(error: DependencyPolicyError, format_type: str) -> None:
    """Display error message to user.

    All errors are written to stderr for consistent CI/CD behavior.

    Args:
        error: The exception that occurred.
        format_type: Output format type for styling.
    """
    error_type = type(error).__name__
    message = f"Error: {error_type}: {error}"

    if format_type == "terminal":
        _error_console.print(f"[red bold]{message}[/red bold]")
    else:
        click.echo(message, err=True)


if __name__ == "__main__":
    main()
