"""License evaluation for a single package.

Grades a node's effective license expression against the policy's
allow, deny, exception, copyleft and unlicensed rules.
"""
from __future__ import annotations

from typing import NamedTuple, Optional

from dependency_policy.analysis.classification import is_copyleft
from dependency_policy.analysis.expression import (
    LicenseAnd,
    LicenseExpression,
    LicenseLeaf,
    normalize_identifier,
    parse_expression,
)
from dependency_policy.models.graph import PackageNode
from dependency_policy.models.policy import Clarification, LintLevel, PolicyDocument
from dependency_policy.models.report import FindingKind, Severity


class LicenseVerdict(NamedTuple):
    """Result of evaluating one package's license.

    Attributes:
        severity: Pass, warn or deny.
        kind: Finding kind matching the severity and the unlicensed case.
        reason: Human-readable explanation.
        expression: The effective expression that was evaluated, if any.
    """

    severity: Severity
    kind: FindingKind
    reason: str
    expression: Optional[str]


class _Outcome(NamedTuple):
    severity: Severity
    notes: tuple[str, ...]


class _Rules(NamedTuple):
    allow: frozenset[str]
    deny: frozenset[str]
    copyleft: LintLevel


def evaluate_license(
    node: PackageNode,
    policy: PolicyDocument,
    clarification: Optional[Clarification] = None,
) -> LicenseVerdict:
    """Evaluate a package's license against the policy.

    Args:
        node: The package to evaluate.
        policy: The policy document.
        clarification: A clarification that already passed its integrity
            check. Its expression replaces the declared license.

    Returns:
        LicenseVerdict for the package.
    """
    if clarification is not None:
        text: Optional[str] = clarification.expression
        source = "clarified"
    else:
        text = node.license
        source = "declared"

    expression = parse_expression(text)
    if expression is None or not expression.is_well_formed():
        if text and text.strip():
            detail = f"unparseable license expression '{text}'"
        else:
            detail = "no license expression"
        return _unlicensed(policy, detail)

    rules = _Rules(
        allow=_normalized(
            list(policy.licenses.allow)
            + policy.licenses.exception_ids(node.name, node.version)
        ),
        deny=_normalized(policy.licenses.deny),
        copyleft=policy.licenses.copyleft,
    )
    outcome = _evaluate(expression, rules)
    expression_text = str(expression)

    if outcome.severity == Severity.DENY:
        kind = FindingKind.LICENSE_DENY
    elif outcome.severity == Severity.WARN:
        kind = FindingKind.LICENSE_WARN
    else:
        kind = FindingKind.PASS

    if outcome.notes:
        reason = f"{source} license '{expression_text}': " + "; ".join(outcome.notes)
    else:
        reason = f"{source} license '{expression_text}' is allowed"

    return LicenseVerdict(
        severity=outcome.severity,
        kind=kind,
        reason=reason,
        expression=expression_text,
    )


def _unlicensed(policy: PolicyDocument, detail: str) -> LicenseVerdict:
    severity = policy.licenses.unlicensed.to_severity()
    if severity == Severity.DENY:
        kind = FindingKind.UNLICENSED_DENY
    elif severity == Severity.WARN:
        kind = FindingKind.UNLICENSED_WARN
    else:
        kind = FindingKind.PASS
    return LicenseVerdict(
        severity=severity,
        kind=kind,
        reason=f"unlicensed: {detail}",
        expression=None,
    )


def _normalized(identifiers: list[str]) -> frozenset[str]:
    return frozenset(normalize_identifier(i) for i in identifiers)


def _evaluate(expression: LicenseExpression, rules: _Rules) -> _Outcome:
    if isinstance(expression, LicenseLeaf):
        return _evaluate_leaf(expression, rules)

    outcomes = [_evaluate(child, rules) for child in expression.children]

    if isinstance(expression, LicenseAnd):
        # Deny is absorbing: the worst child decides
        severity = Severity.worst(o.severity for o in outcomes)
        notes = tuple(
            note for o in outcomes if o.severity != Severity.PASS for note in o.notes
        )
        return _Outcome(severity, notes)

    best = min(outcomes, key=lambda o: o.severity.rank)
    if best.severity == Severity.PASS:
        return _Outcome(Severity.PASS, ())
    if best.severity == Severity.WARN:
        return best
    # No acceptable alternative: report every rejected branch
    return _Outcome(
        Severity.DENY, tuple(note for o in outcomes for note in o.notes)
    )


def _evaluate_leaf(leaf: LicenseLeaf, rules: _Rules) -> _Outcome:
    identifier = leaf.identifier
    if identifier in rules.deny:
        return _Outcome(Severity.DENY, (f"{identifier} is explicitly denied",))
    if identifier in rules.allow:
        return _Outcome(Severity.PASS, ())
    if is_copyleft(identifier):
        severity = rules.copyleft.to_severity()
        if severity == Severity.PASS:
            return _Outcome(Severity.PASS, ())
        if severity == Severity.WARN:
            return _Outcome(Severity.WARN, (f"{identifier} is copyleft",))
        return _Outcome(Severity.DENY, (f"{identifier} is copyleft and not allowed",))
    return _Outcome(Severity.DENY, (f"{identifier} is not in the allow list",))
