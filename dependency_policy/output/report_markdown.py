"""Markdown output formatter for policy reports."""

from datetime import datetime, timezone

from dependency_policy.models.report import Finding, Report, Severity

_VERDICT_BADGES = {
    Severity.PASS: "✅ PASS",
    Severity.WARN: "⚠️ WARN",
    Severity.DENY: "❌ DENY",
}


class ReportMarkdownFormatter:
    """Format policy reports as Markdown output.

    Suitable for attaching to pull requests or review documents.
    """

    def format_report(self, report: Report) -> str:
        """Format a report as a Markdown string.

        Args:
            report: The report to format.

        Returns:
            Markdown string representation of the report.
        """
        lines: list[str] = []

        lines.append("# Dependency Policy Report")
        lines.append("")

        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        lines.append(f"*Generated: {timestamp}*")
        lines.append("")

        lines.extend(self._format_summary(report))
        lines.append("")

        issues = [f for f in report.findings if f.severity != Severity.PASS]
        if issues:
            lines.extend(self._format_findings(issues))
            lines.append("")

        if report.duplicate_groups:
            lines.extend(self._format_duplicates(report))
            lines.append("")

        if report.excluded:
            lines.append(f"## Excluded by skip-tree ({len(report.excluded)})")
            lines.append("")
            for ref in report.excluded:
                lines.append(f"- `{ref.display()}`")
            lines.append("")

        return "\n".join(lines)

    def _format_summary(self, report: Report) -> list[str]:
        """Format the summary table.

        Args:
            report: The report.

        Returns:
            List of Markdown lines.
        """
        lines = [
            "## Summary",
            "",
            f"**Verdict: {_VERDICT_BADGES[report.verdict]}**",
            "",
            "| Metric | Value |",
            "|--------|-------|",
            f"| Total Packages | {report.total_packages} |",
            f"| Denied | {len(report.findings_at(Severity.DENY))} |",
            f"| Warnings | {len(report.findings_at(Severity.WARN))} |",
            f"| Duplicate Groups | {len(report.duplicate_groups)} |",
        ]
        if report.invalid_clarifications:
            lines.append(
                "| Invalid Clarifications | "
                f"{', '.join(report.invalid_clarifications)} |"
            )
        return lines

    def _format_findings(self, findings: list[Finding]) -> list[str]:
        lines = [
            "## Findings",
            "",
            "| Package | Severity | Kind | Reason |",
            "|---------|----------|------|--------|",
        ]
        for finding in findings:
            reason = finding.reason.replace("|", "\\|")
            lines.append(
                f"| {finding.display_package()} | {finding.severity.value} "
                f"| {finding.kind.value} | {reason} |"
            )
        return lines

    def _format_duplicates(self, report: Report) -> list[str]:
        lines = [
            "## Duplicate Versions",
            "",
            "| Package | Versions | Skipped | Severity |",
            "|---------|----------|---------|----------|",
        ]
        for group in report.duplicate_groups:
            skipped = ", ".join(group.skipped_versions) or "-"
            lines.append(
                f"| {group.name} | {', '.join(group.versions)} | {skipped} "
                f"| {group.severity.value} |"
            )
        return lines
