"""Pydantic data models for dependency-policy."""

from dependency_policy.models.graph import DependencyEdge, DependencyGraph, PackageNode
from dependency_policy.models.options import CheckOptions, Verbosity
from dependency_policy.models.policy import (
    BansPolicy,
    Clarification,
    LicenseException,
    LicenseFile,
    LicensesPolicy,
    LintLevel,
    PolicyDocument,
    SkipEntry,
    SkipTreeEntry,
)
from dependency_policy.models.report import (
    DuplicateGroup,
    Finding,
    FindingKind,
    PackageRef,
    Report,
    Severity,
)

__all__ = [
    "BansPolicy",
    "CheckOptions",
    "Clarification",
    "DependencyEdge",
    "DependencyGraph",
    "DuplicateGroup",
    "Finding",
    "FindingKind",
    "LicenseException",
    "LicenseFile",
    "LicensesPolicy",
    "LintLevel",
    "PackageNode",
    "PackageRef",
    "PolicyDocument",
    "Report",
    "Severity",
    "SkipEntry",
    "SkipTreeEntry",
    "Verbosity",
]
