"""Report models produced by a policy check."""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, Field, computed_field


class Severity(Enum):
    """Outcome of a check, ordered pass < warn < deny."""

    PASS = "pass"
    WARN = "warn"
    DENY = "deny"

    @property
    def rank(self) -> int:
        """Numeric rank used for ordering (higher is worse)."""
        return _RANKS[self]

    @classmethod
    def worst(cls, severities: Iterable[Severity]) -> Severity:
        """Return the most severe value, or PASS for an empty iterable."""
        return max(severities, key=lambda s: s.rank, default=cls.PASS)

    @classmethod
    def best(cls, severities: Iterable[Severity]) -> Severity:
        """Return the least severe value, or DENY for an empty iterable."""
        return min(severities, key=lambda s: s.rank, default=cls.DENY)


_RANKS = {Severity.PASS: 0, Severity.WARN: 1, Severity.DENY: 2}


class FindingKind(Enum):
    """Kind of per-package finding."""

    LICENSE_DENY = "license-deny"
    LICENSE_WARN = "license-warn"
    UNLICENSED_DENY = "unlicensed-deny"
    UNLICENSED_WARN = "unlicensed-warn"
    DUPLICATE_VERSION = "duplicate-version"
    PASS = "pass"


class PackageRef(BaseModel):
    """Name and version of a package referenced by a report."""

    model_config = {"extra": "forbid", "frozen": True}

    name: str = Field(description="Package name")
    version: str = Field(description="Package version")

    def display(self) -> str:
        """Format as ``name@version``."""
        return f"{self.name}@{self.version}"


class Finding(BaseModel):
    """A single diagnostic about a package or a duplicate-version group."""

    model_config = {"extra": "forbid", "frozen": True}

    package_name: str = Field(description="Package the finding is about")
    package_version: Optional[str] = Field(
        default=None,
        description="Package version (None for a duplicate-version group)",
    )
    kind: FindingKind = Field(description="Kind of finding")
    severity: Severity = Field(description="Severity of the finding")
    reason: str = Field(description="Human-readable explanation")

    def display_package(self) -> str:
        """Format the package as ``name@version`` or just ``name``."""
        if self.package_version is None:
            return self.package_name
        return f"{self.package_name}@{self.package_version}"


class DuplicateGroup(BaseModel):
    """Distinct resolved versions of one package present at the same time."""

    model_config = {"extra": "forbid", "frozen": True}

    name: str = Field(description="Package name")
    versions: list[str] = Field(
        default_factory=list,
        description="Reported versions, lowest first",
    )
    skipped_versions: list[str] = Field(
        default_factory=list,
        description="Versions removed from the group by skip entries",
    )
    severity: Severity = Field(
        default=Severity.PASS,
        description="Severity assigned by the multiple-versions rule",
    )


class Report(BaseModel):
    """Result of evaluating a policy against a dependency graph."""

    model_config = {"extra": "forbid"}

    verdict: Severity = Field(
        default=Severity.PASS,
        description="Worst severity among all findings",
    )
    total_packages: int = Field(default=0, ge=0, description="Packages evaluated")
    findings: list[Finding] = Field(
        default_factory=list,
        description="Findings, most severe first",
    )
    excluded: list[PackageRef] = Field(
        default_factory=list,
        description="Packages excluded from duplicate checks by skip-tree",
    )
    duplicate_groups: list[DuplicateGroup] = Field(
        default_factory=list,
        description="Packages resolved at more than one version",
    )
    invalid_clarifications: list[str] = Field(
        default_factory=list,
        description="Packages whose clarification failed its integrity check",
    )
    unused_skips: list[str] = Field(
        default_factory=list,
        description="skip and skip-tree entries that matched no package",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_denials(self) -> bool:
        """True if the check failed."""
        return self.verdict == Severity.DENY

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_warnings(self) -> bool:
        """True if any finding is a warning."""
        return any(f.severity == Severity.WARN for f in self.findings)

    def findings_at(self, severity: Severity) -> list[Finding]:
        """Get the findings with exactly the given severity.

        Args:
            severity: Severity to filter on.

        Returns:
            Matching findings in report order.
        """
        return [f for f in self.findings if f.severity == severity]
