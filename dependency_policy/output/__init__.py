"""Output formatters for dependency-policy."""

from dependency_policy.output.report_json import ReportJsonFormatter
from dependency_policy.output.report_markdown import ReportMarkdownFormatter
from dependency_policy.output.terminal import TerminalFormatter

__all__ = [
    "ReportJsonFormatter",
    "ReportMarkdownFormatter",
    "TerminalFormatter",
]
