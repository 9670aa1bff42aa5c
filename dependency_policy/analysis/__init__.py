"""Policy evaluation logic for dependency-policy."""
from dependency_policy.analysis.bans import (
    is_excluded,
    match_skip,
    match_skip_tree,
    unused_skip_entries,
)
from dependency_policy.analysis.clarify import (
    ClarificationResult,
    DirectoryLicenseTextSource,
    LicenseTextSource,
    check_clarifications,
    hash_license_text,
)
from dependency_policy.analysis.classification import (
    LicenseCategory,
    get_license_category,
    is_copyleft,
)
from dependency_policy.analysis.engine import run_check
from dependency_policy.analysis.expression import (
    LicenseAnd,
    LicenseExpression,
    LicenseLeaf,
    LicenseOr,
    normalize_identifier,
    parse_expression,
)
from dependency_policy.analysis.graph import GraphAnalysis, analyze
from dependency_policy.analysis.licenses import LicenseVerdict, evaluate_license

__all__ = [
    "ClarificationResult",
    "DirectoryLicenseTextSource",
    "GraphAnalysis",
    "LicenseAnd",
    "LicenseCategory",
    "LicenseExpression",
    "LicenseLeaf",
    "LicenseOr",
    "LicenseTextSource",
    "LicenseVerdict",
    "analyze",
    "check_clarifications",
    "evaluate_license",
    "get_license_category",
    "hash_license_text",
    "is_copyleft",
    "is_excluded",
    "match_skip",
    "match_skip_tree",
    "normalize_identifier",
    "parse_expression",
    "run_check",
    "unused_skip_entries",
]
