"""Policy engine: evaluates a policy against a resolved dependency graph."""
from __future__ import annotations

from typing import Optional

from dependency_policy.analysis.bans import is_excluded, unused_skip_entries
from dependency_policy.analysis.clarify import LicenseTextSource, check_clarifications
from dependency_policy.analysis.graph import analyze, version_sort_key
from dependency_policy.analysis.licenses import evaluate_license
from dependency_policy.logging import get_logger
from dependency_policy.models.graph import DependencyGraph
from dependency_policy.models.policy import PolicyDocument
from dependency_policy.models.report import (
    DuplicateGroup,
    Finding,
    FindingKind,
    PackageRef,
    Report,
    Severity,
)

log = get_logger(__name__)


def run_check(
    graph: DependencyGraph,
    policy: PolicyDocument,
    license_texts: Optional[LicenseTextSource] = None,
) -> Report:
    """Evaluate the policy against a dependency graph.

    License checks run on every node, including nodes excluded by
    skip-tree; skip-tree only affects duplicate-version reporting.

    Args:
        graph: The resolved dependency graph.
        policy: The policy document.
        license_texts: Source of license file hashes used to validate
            clarifications.

    Returns:
        Report with per-package findings and the aggregate verdict.

    Raises:
        ConfigurationError: If a clarification cannot be validated.
        GraphIntegrityError: If the graph contains a cycle.
    """
    clarifications = check_clarifications(graph, policy, license_texts)
    analysis = analyze(graph, policy)

    findings: list[Finding] = []
    for index, node in enumerate(graph.nodes):
        verdict = evaluate_license(node, policy, clarifications.valid.get(index))
        findings.append(
            Finding(
                package_name=node.name,
                package_version=node.version,
                kind=verdict.kind,
                severity=verdict.severity,
                reason=verdict.reason,
            )
        )

    for group in analysis.duplicate_groups:
        findings.append(_duplicate_finding(group))

    findings.sort(key=_finding_order)
    verdict = Severity.worst(f.severity for f in findings)

    excluded = sorted(
        (
            node
            for index, node in enumerate(graph.nodes)
            if is_excluded(index, analysis.excluded)
        ),
        key=lambda n: (n.name, version_sort_key(n.version)),
    )
    unused = unused_skip_entries(graph, policy)
    for entry in unused:
        log.debug("unused ban entry", entry=entry)

    log.debug(
        "policy check complete",
        packages=len(graph.nodes),
        verdict=verdict.value,
        duplicates=len(analysis.duplicate_groups),
        excluded=len(excluded),
    )

    return Report(
        verdict=verdict,
        total_packages=graph.total_count,
        findings=findings,
        excluded=[PackageRef(name=n.name, version=n.version) for n in excluded],
        duplicate_groups=analysis.duplicate_groups,
        invalid_clarifications=clarifications.invalid,
        unused_skips=unused,
    )


def _duplicate_finding(group: DuplicateGroup) -> Finding:
    reason = f"multiple versions resolved: {', '.join(group.versions)}"
    if group.skipped_versions:
        reason += f" (skipped: {', '.join(group.skipped_versions)})"
    return Finding(
        package_name=group.name,
        package_version=None,
        kind=FindingKind.DUPLICATE_VERSION,
        severity=group.severity,
        reason=reason,
    )


def _finding_order(finding: Finding) -> tuple[object, ...]:
    version = finding.package_version or ""
    return (
        -finding.severity.rank,
        finding.package_name,
        version_sort_key(version),
        finding.kind.value,
    )
