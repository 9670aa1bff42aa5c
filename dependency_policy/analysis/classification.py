"""Copyleft classification for dependency-policy.

A fixed taxonomy mapping license identifiers to a category. The policy
engine only asks whether an identifier is copyleft; the finer categories
are kept for display.
"""
from enum import Enum
from functools import lru_cache
from typing import Optional

from dependency_policy.analysis.expression import normalize_identifier


class LicenseCategory(Enum):
    """Categories of licenses by restriction level."""

    PERMISSIVE = "permissive"
    WEAK_COPYLEFT = "weak_copyleft"
    COPYLEFT = "copyleft"
    OTHER = "other"


# Permissive licenses
PERMISSIVE_LICENSES: set[str] = {
    "0BSD",
    "Apache-2.0",
    "BSD-2-Clause",
    "BSD-3-Clause",
    "BSL-1.0",
    "CC0-1.0",
    "ISC",
    "MIT",
    "MIT-0",
    "OpenSSL",
    "PSF-2.0",
    "Unicode-DFS-2016",
    "Unicode-3.0",
    "Unlicense",
    "Zlib",
}

# Strong copyleft licenses - GPL and AGPL variants
COPYLEFT_LICENSES: set[str] = {
    "GPL-1.0-only",
    "GPL-1.0-or-later",
    "GPL-2.0",
    "GPL-2.0-only",
    "GPL-2.0-or-later",
    "GPL-2.0+",
    "GPL-3.0",
    "GPL-3.0-only",
    "GPL-3.0-or-later",
    "GPL-3.0+",
    "AGPL-1.0-only",
    "AGPL-1.0-or-later",
    "AGPL-3.0",
    "AGPL-3.0-only",
    "AGPL-3.0-or-later",
    "CC-BY-SA-4.0",
    "EUPL-1.2",
    "OSL-3.0",
    "SSPL-1.0",
}

# Weak copyleft licenses - file or library level
WEAK_COPYLEFT_LICENSES: set[str] = {
    "LGPL-2.0",
    "LGPL-2.0-only",
    "LGPL-2.0-or-later",
    "LGPL-2.1",
    "LGPL-2.1-only",
    "LGPL-2.1-or-later",
    "LGPL-3.0",
    "LGPL-3.0-only",
    "LGPL-3.0-or-later",
    "MPL-1.1",
    "MPL-2.0",
    "EPL-1.0",
    "EPL-2.0",
    "CDDL-1.0",
    "CDDL-1.1",
}


def _normalize_license_id(license_id: Optional[str]) -> str:
    """Normalize license ID for comparison.

    Args:
        license_id: SPDX license identifier or None.

    Returns:
        Canonical identifier, or empty string for None.
    """
    if license_id is None:
        return ""
    return normalize_identifier(license_id)


_TABLES: dict[LicenseCategory, set[str]] = {
    LicenseCategory.PERMISSIVE: PERMISSIVE_LICENSES,
    LicenseCategory.WEAK_COPYLEFT: WEAK_COPYLEFT_LICENSES,
    LicenseCategory.COPYLEFT: COPYLEFT_LICENSES,
}


@lru_cache(maxsize=None)
def _normalized_table(category: LicenseCategory) -> frozenset[str]:
    """Table entries as written plus their normalized forms."""
    entries = _TABLES[category]
    return frozenset(entries) | frozenset(normalize_identifier(e) for e in entries)


def get_license_category(license_id: Optional[str]) -> LicenseCategory:
    """Categorize a license by its restriction level.

    Args:
        license_id: SPDX license identifier or None.

    Returns:
        LicenseCategory indicating the type of license.
    """
    normalized = _normalize_license_id(license_id)
    if not normalized:
        return LicenseCategory.OTHER

    for category in _TABLES:
        if normalized in _normalized_table(category):
            return category

    return LicenseCategory.OTHER


def is_copyleft(license_id: Optional[str]) -> bool:
    """Check if a license is copyleft (strong or weak).

    Args:
        license_id: SPDX license identifier or None.

    Returns:
        True if the license is in either copyleft table.
    """
    return get_license_category(license_id) in (
        LicenseCategory.COPYLEFT,
        LicenseCategory.WEAK_COPYLEFT,
    )
