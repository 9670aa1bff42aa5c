"""License expression trees for dependency-policy.

SPDX expressions are parsed with the license-expression library and
converted into a small tagged tree::

    LicenseLeaf(identifier, exception) | LicenseAnd(children) | LicenseOr(children)

The evaluator walks this tree recursively instead of working on strings.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Union

from license_expression import (
    ExpressionError,
    LicenseSymbol,
    LicenseWithExceptionSymbol,
    get_spdx_licensing,
)

# Initialize SPDX licensing for parsing
_licensing = get_spdx_licensing()

# Tokens between whitespace and parentheses
_LEGACY_TOKEN = re.compile(r"[^\s()]+")
_REF_PREFIX = re.compile(r"(?:LicenseRef|DocumentRef)-", re.IGNORECASE)


@dataclass(frozen=True)
class LicenseLeaf:
    """A single license identifier, optionally with a WITH exception.

    Attributes:
        identifier: Normalized SPDX identifier (e.g. ``"MIT"``).
        exception: Exception identifier from a ``WITH`` clause, if any.
    """

    identifier: str
    exception: Optional[str] = None

    def __str__(self) -> str:
        if self.exception:
            return f"{self.identifier} WITH {self.exception}"
        return self.identifier

    def is_well_formed(self) -> bool:
        return bool(self.identifier)


@dataclass(frozen=True)
class LicenseAnd:
    """Conjunction: every child must be acceptable."""

    children: tuple[LicenseExpression, ...]

    def __str__(self) -> str:
        return " AND ".join(_wrap(child) for child in self.children)

    def is_well_formed(self) -> bool:
        return len(self.children) > 0 and all(
            child.is_well_formed() for child in self.children
        )


@dataclass(frozen=True)
class LicenseOr:
    """Disjunction: at least one child must be acceptable."""

    children: tuple[LicenseExpression, ...]

    def __str__(self) -> str:
        return " OR ".join(_wrap(child) for child in self.children)

    def is_well_formed(self) -> bool:
        return len(self.children) > 0 and all(
            child.is_well_formed() for child in self.children
        )


LicenseExpression = Union[LicenseLeaf, LicenseAnd, LicenseOr]


def _wrap(node: LicenseExpression) -> str:
    if isinstance(node, LicenseLeaf):
        return str(node)
    return f"({node})"


def parse_expression(text: Optional[str]) -> Optional[LicenseExpression]:
    """Parse an SPDX license expression into a tree.

    Legacy ``/`` separators (``MIT/Apache-2.0``) are read as OR, except
    inside ``LicenseRef-`` and ``DocumentRef-`` identifiers. Identifiers
    are normalized to their canonical SPDX keys where the library knows them;
    unknown identifiers are kept as written.

    Args:
        text: License expression string or None.

    Returns:
        Root of the expression tree, or None if the text is empty or cannot
        be parsed.
    """
    if text is None:
        return None
    cleaned = _LEGACY_TOKEN.sub(_split_legacy_or, text.strip())
    if not cleaned:
        return None

    try:
        parsed = _licensing.parse(cleaned, validate=False)
        if parsed is None:
            return None
        return _convert(parsed)
    except (ExpressionError, TypeError, IndexError):
        # boolean.py raises TypeError or IndexError on some malformed input
        return None


def _split_legacy_or(match: re.Match[str]) -> str:
    token = match.group(0)
    if _REF_PREFIX.match(token):
        return token
    return token.replace("/", " OR ")


def _convert(node: object) -> LicenseExpression:
    """Convert a license-expression AST node into the local tree."""
    if isinstance(node, LicenseWithExceptionSymbol):
        return LicenseLeaf(
            identifier=str(node.license_symbol.key),
            exception=str(node.exception_symbol.key),
        )
    if isinstance(node, LicenseSymbol):
        return LicenseLeaf(identifier=str(node.key))
    if isinstance(node, _licensing.AND):
        return LicenseAnd(tuple(_convert(arg) for arg in node.args))
    if isinstance(node, _licensing.OR):
        return LicenseOr(tuple(_convert(arg) for arg in node.args))
    raise ExpressionError(f"Unsupported expression element: {node!r}")


@lru_cache(maxsize=1024)
def normalize_identifier(identifier: str) -> str:
    """Normalize a single license identifier the same way expressions are.

    Policy lists go through this so that ``GPL-3.0`` in a deny list still
    matches an expression the library canonicalizes to ``GPL-3.0-only``.

    Args:
        identifier: License identifier as written in the policy.

    Returns:
        Canonical SPDX key, or the stripped input if it is not a single
        recognizable identifier.
    """
    stripped = identifier.strip()
    parsed = parse_expression(stripped)
    if isinstance(parsed, LicenseLeaf) and parsed.exception is None:
        return parsed.identifier
    return stripped

