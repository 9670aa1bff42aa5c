"""JSON output formatter for policy reports."""
import json
from datetime import datetime, timezone
from typing import Any

from dependency_policy import __version__
from dependency_policy.models.report import Report, Severity


class ReportJsonFormatter:
    """Format policy reports as JSON output.

    Provides a structured representation of the report for programmatic
    processing and CI/CD integration.
    """

    def format_report(self, report: Report) -> str:
        """Format a report as a JSON string.

        Args:
            report: The report to format.

        Returns:
            JSON string representation of the report.
        """
        output = self._build_output(report)
        return json.dumps(output, indent=2)

    def _build_output(self, report: Report) -> dict[str, Any]:
        """Build the output dictionary structure.

        Args:
            report: The report to convert.

        Returns:
            Dictionary ready for JSON serialization.
        """
        return {
            "check_metadata": self._build_metadata(),
            "summary": self._build_summary(report),
            "findings": [
                finding.model_dump(mode="json") for finding in report.findings
            ],
            "duplicate_groups": [
                group.model_dump(mode="json") for group in report.duplicate_groups
            ],
            "excluded": [ref.display() for ref in report.excluded],
            "invalid_clarifications": list(report.invalid_clarifications),
            "unused_skips": list(report.unused_skips),
        }

    def _build_metadata(self) -> dict[str, Any]:
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        return {
            "generated_at": timestamp,
            "tool_version": __version__,
        }

    def _build_summary(self, report: Report) -> dict[str, Any]:
        """Build the summary section.

        Args:
            report: The report.

        Returns:
            Dictionary with counts and the verdict.
        """
        return {
            "verdict": report.verdict.value,
            "total_packages": report.total_packages,
            "denied": len(report.findings_at(Severity.DENY)),
            "warnings": len(report.findings_at(Severity.WARN)),
            "duplicate_groups": len(report.duplicate_groups),
            "excluded": len(report.excluded),
            "has_denials": report.has_denials,
        }
