"""Ban rule matching for duplicate-version checks.

Only exact-pair and name matches happen here. The skip-tree exclusion
closure is computed by the graph analyzer from the seeds matched below.
"""
from __future__ import annotations

from typing import AbstractSet, Optional

from dependency_policy.models.graph import DependencyGraph, PackageNode
from dependency_policy.models.policy import PolicyDocument, SkipTreeEntry


def match_skip(node: PackageNode, policy: PolicyDocument) -> bool:
    """Check if a node is exempt from duplicate-version reporting.

    Args:
        node: The package to check.
        policy: The policy document.

    Returns:
        True if ``(name, version)`` exactly matches a skip entry.
    """
    return any(
        entry.name == node.name and entry.version == node.version
        for entry in policy.bans.skip
    )


def match_skip_tree(
    node: PackageNode, policy: PolicyDocument
) -> list[SkipTreeEntry]:
    """Find the skip-tree entries that seed an exclusion at this node.

    An entry without a version matches the named package at every version,
    wherever it appears in the graph.

    Args:
        node: The package to check.
        policy: The policy document.

    Returns:
        Matching entries, in policy order.
    """
    return [
        entry
        for entry in policy.bans.skip_tree
        if entry.name == node.name and entry.version in (None, node.version)
    ]


def is_excluded(
    node_index: int,
    closure: AbstractSet[int],
) -> bool:
    """Check if a node falls inside the skip-tree exclusion closure.

    Args:
        node_index: Arena index of the node.
        closure: Excluded node indices computed by the graph analyzer.

    Returns:
        True if the node is excluded from duplicate-version analysis.
    """
    return node_index in closure


def unused_skip_entries(graph: DependencyGraph, policy: PolicyDocument) -> list[str]:
    """List skip and skip-tree entries that match no package in the graph.

    Args:
        graph: The dependency graph.
        policy: The policy document.

    Returns:
        Display strings of unmatched entries, skip entries first.
    """
    unused: list[str] = []
    for entry in policy.bans.skip:
        if graph.index_of(entry.name, entry.version) is None:
            unused.append(f"skip {entry.display()}")

    for tree_entry in policy.bans.skip_tree:
        if not any(
            tree_entry in match_skip_tree(node, policy) for node in graph.nodes
        ):
            unused.append(f"skip-tree {tree_entry.display()}")
    return unused


def skip_tree_depth(entries: list[SkipTreeEntry]) -> Optional[int]:
    """Combine the depth limits of several entries seeding the same node.

    Args:
        entries: Entries matching one seed node.

    Returns:
        The deepest limit, or None if any entry is unlimited.
    """
    depths = [entry.depth for entry in entries]
    if any(depth is None for depth in depths):
        return None
    return max((d for d in depths if d is not None), default=None)
