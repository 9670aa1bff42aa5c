"""Terminal output formatter using Rich."""
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from dependency_policy.models.options import Verbosity
from dependency_policy.models.report import Finding, Report, Severity

_SEVERITY_STYLES = {
    Severity.PASS: "green",
    Severity.WARN: "yellow",
    Severity.DENY: "red",
}


class TerminalFormatter:
    """Format policy reports for terminal display using Rich.

    A passing report prints nothing unless verbosity is VERBOSE. Reports
    with warnings or denials get a summary panel followed by the findings.
    """

    def __init__(
        self,
        console: Optional[Console] = None,
        verbosity: Verbosity = Verbosity.NORMAL,
    ) -> None:
        """Initialize the formatter with a Rich console.

        Args:
            console: Optional Rich Console instance. If not provided,
                a new Console will be created.
            verbosity: Output verbosity level.
        """
        self._console = console if console is not None else Console()
        self._verbosity = verbosity

    def format_report(self, report: Report) -> None:
        """Format and display a policy report.

        Args:
            report: The report to display.
        """
        if report.verdict == Severity.PASS and self._verbosity != Verbosity.VERBOSE:
            return

        if self._verbosity == Verbosity.QUIET:
            self._print_quiet_output(report)
            return

        self._print_summary(report)

        issues = [f for f in report.findings if f.severity != Severity.PASS]
        if issues:
            self._print_findings_table(issues, "Policy Findings")

        if self._verbosity == Verbosity.VERBOSE:
            passing = report.findings_at(Severity.PASS)
            if passing:
                self._print_findings_table(passing, "Passing Checks")
            self._print_details(report)

    def _print_quiet_output(self, report: Report) -> None:
        """Print one line per deny finding.

        Args:
            report: The report to display.
        """
        style = _SEVERITY_STYLES[report.verdict]
        self._console.print(f"[{style}]{report.verdict.value.upper()}[/{style}]")
        for finding in report.findings_at(Severity.DENY):
            self._console.print(
                f"  - {finding.display_package()}: [red]{finding.reason}[/red]"
            )

    def _print_summary(self, report: Report) -> None:
        """Print the summary panel.

        Args:
            report: The report to summarize.
        """
        style = _SEVERITY_STYLES[report.verdict]
        denials = len(report.findings_at(Severity.DENY))
        warnings = len(report.findings_at(Severity.WARN))

        summary_lines = [
            f"Total Packages: {report.total_packages}",
            f"Denied: {denials}",
            f"Warnings: {warnings}",
            f"Duplicate Groups: {len(report.duplicate_groups)}",
        ]
        if report.excluded:
            summary_lines.append(f"Excluded by skip-tree: {len(report.excluded)}")
        if report.invalid_clarifications:
            summary_lines.append(
                "Invalid Clarifications: "
                + ", ".join(report.invalid_clarifications)
            )
        summary_lines.extend([
            "",
            f"Verdict: [{style}]{report.verdict.value.upper()}[/{style}]",
        ])

        panel = Panel(
            "\n".join(summary_lines),
            title="[bold]POLICY CHECK[/bold]",
            border_style=style,
        )
        self._console.print(panel)
        self._console.print("")

    def _print_findings_table(self, findings: list[Finding], title: str) -> None:
        """Print findings as a table.

        Args:
            findings: Findings to list, already ordered.
            title: Table title.
        """
        table = Table(title=title)
        table.add_column("Package", style="cyan", no_wrap=True)
        table.add_column("Severity")
        table.add_column("Kind", style="magenta")
        table.add_column("Reason")

        for finding in findings:
            style = _SEVERITY_STYLES[finding.severity]
            table.add_row(
                finding.display_package(),
                f"[{style}]{finding.severity.value}[/{style}]",
                finding.kind.value,
                finding.reason,
            )
        self._console.print(table)

    def _print_details(self, report: Report) -> None:
        """Print skip-tree exclusions and unused ban entries.

        Args:
            report: The report to display.
        """
        if report.excluded:
            self._console.print("")
            self._console.print(
                f"[bold]Excluded by skip-tree ({len(report.excluded)})[/bold]"
            )
            for ref in report.excluded:
                self._console.print(f"  {ref.display()}")

        if report.unused_skips:
            self._console.print("")
            self._console.print(
                f"[bold yellow]Unused ban entries ({len(report.unused_skips)})"
                "[/bold yellow]"
            )
            for entry in report.unused_skips:
                self._console.print(f"  {entry}")
