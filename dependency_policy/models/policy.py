"""Policy document models for dependency-policy.

Field names follow the ``[licenses]`` and ``[bans]`` sections of a
``deny.toml`` file. Hyphenated keys (``multiple-versions``, ``skip-tree``,
``license-files``) are accepted through aliases, and so are the Python names.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from dependency_policy.models.report import Severity


class LintLevel(Enum):
    """How a rule class is enforced."""

    ALLOW = "allow"
    WARN = "warn"
    DENY = "deny"

    def to_severity(self) -> Severity:
        """Map the lint level to the severity it produces."""
        return {
            LintLevel.ALLOW: Severity.PASS,
            LintLevel.WARN: Severity.WARN,
            LintLevel.DENY: Severity.DENY,
        }[self]


class LicenseException(BaseModel):
    """Extra allowed licenses for a single package."""

    model_config = {"extra": "forbid", "frozen": True}

    name: str = Field(description="Package the exception applies to")
    version: Optional[str] = Field(
        default=None,
        description="Restrict the exception to one version (None = any)",
    )
    allow: list[str] = Field(
        default_factory=list,
        description="License identifiers allowed for this package only",
    )


class LicenseFile(BaseModel):
    """A license file whose content must match a known hash."""

    model_config = {"extra": "forbid", "frozen": True}

    path: str = Field(description="Path relative to the package root")
    hash: int = Field(description="CRC-32 of the file content")


class Clarification(BaseModel):
    """Policy-supplied license expression overriding detection.

    The clarification only applies while every listed license file still
    hashes to the recorded value.
    """

    model_config = {"extra": "forbid", "frozen": True, "populate_by_name": True}

    name: str = Field(description="Package being clarified")
    version: Optional[str] = Field(
        default=None,
        description="Restrict the clarification to one version (None = any)",
    )
    expression: str = Field(description="SPDX expression to use instead")
    license_files: list[LicenseFile] = Field(
        default_factory=list,
        alias="license-files",
        description="License files guarding the clarification",
    )

    @field_validator("expression")
    @classmethod
    def _expression_parses(cls, value: str) -> str:
        # Lazy import to avoid circular dependency
        from dependency_policy.analysis.expression import parse_expression

        parsed = parse_expression(value)
        if parsed is None or not parsed.is_well_formed():
            raise ValueError(f"invalid license expression '{value}'")
        return value

    def applies_to(self, name: str, version: str) -> bool:
        """Check whether the clarification targets the given package."""
        return self.name == name and self.version in (None, version)


class LicensesPolicy(BaseModel):
    """The ``[licenses]`` section."""

    model_config = {"extra": "forbid", "frozen": True}

    unlicensed: LintLevel = Field(
        default=LintLevel.DENY,
        description="Lint level for packages without a usable license",
    )
    copyleft: LintLevel = Field(
        default=LintLevel.WARN,
        description="Lint level for copyleft licenses not explicitly allowed",
    )
    allow: list[str] = Field(
        default_factory=list,
        description="Allowed SPDX license identifiers",
    )
    deny: list[str] = Field(
        default_factory=list,
        description="Denied SPDX license identifiers (beats allow)",
    )
    exceptions: list[LicenseException] = Field(
        default_factory=list,
        description="Per-package additions to the allow list",
    )
    clarify: list[Clarification] = Field(
        default_factory=list,
        description="License clarifications by package",
    )

    def exception_ids(self, name: str, version: str) -> list[str]:
        """Collect the identifiers allowed by exceptions for one package.

        Args:
            name: Package name.
            version: Package version.

        Returns:
            Identifiers from every exception matching the package.
        """
        result: list[str] = []
        for exception in self.exceptions:
            if exception.name == name and exception.version in (None, version):
                result.extend(exception.allow)
        return result


class SkipEntry(BaseModel):
    """A ``(name, version)`` pair exempt from duplicate-version reporting."""

    model_config = {"extra": "forbid", "frozen": True}

    name: str = Field(description="Package name")
    version: str = Field(description="Exact version to skip")

    def display(self) -> str:
        """Format the entry as ``name@version``."""
        return f"{self.name}@{self.version}"


class SkipTreeEntry(BaseModel):
    """A package whose dependency subtree is excluded from duplicate checks."""

    model_config = {"extra": "forbid", "frozen": True}

    name: str = Field(description="Package name")
    version: Optional[str] = Field(
        default=None,
        description="Exact version to match (None = every version)",
    )
    depth: Optional[int] = Field(
        default=None,
        ge=0,
        description="Edges below the root to exclude (None = whole subtree)",
    )

    def display(self) -> str:
        """Format the entry as ``name`` or ``name@version``."""
        if self.version is None:
            return self.name
        return f"{self.name}@{self.version}"


class BansPolicy(BaseModel):
    """The ``[bans]`` section."""

    model_config = {"extra": "forbid", "frozen": True, "populate_by_name": True}

    multiple_versions: LintLevel = Field(
        default=LintLevel.WARN,
        alias="multiple-versions",
        description="Lint level for packages resolved at several versions",
    )
    skip: list[SkipEntry] = Field(
        default_factory=list,
        description="Versions exempt from duplicate-version reporting",
    )
    skip_tree: list[SkipTreeEntry] = Field(
        default_factory=list,
        alias="skip-tree",
        description="Packages whose subtrees are excluded from duplicate checks",
    )


class PolicyDocument(BaseModel):
    """Complete policy for one evaluation run.

    Constructed once from static configuration and passed explicitly to
    every component. Sections other than ``licenses`` and ``bans`` (for
    example ``advisories`` or ``sources``) are ignored.
    """

    model_config = {"extra": "ignore", "frozen": True}

    licenses: LicensesPolicy = Field(
        default_factory=LicensesPolicy,
        description="License rules",
    )
    bans: BansPolicy = Field(
        default_factory=BansPolicy,
        description="Duplicate-version rules",
    )
