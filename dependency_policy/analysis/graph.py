"""Graph analysis: cycle detection, skip-tree closure and duplicate versions.

All functions here are pure. The dependency graph is only read; the
adjacency list and reachability sets are derived per call.
"""
from __future__ import annotations

from collections import deque
from typing import NamedTuple, Optional, Union

from packaging.version import InvalidVersion, Version

from dependency_policy.analysis.bans import match_skip, match_skip_tree, skip_tree_depth
from dependency_policy.exceptions import GraphIntegrityError
from dependency_policy.models.graph import DependencyGraph
from dependency_policy.models.policy import PolicyDocument
from dependency_policy.models.report import DuplicateGroup

# DFS colours
_WHITE, _GREY, _BLACK = 0, 1, 2


class GraphAnalysis(NamedTuple):
    """Result of analyzing a dependency graph.

    Attributes:
        excluded: Node indices removed from duplicate-version analysis.
        duplicate_groups: Reportable duplicate-version groups, by name.
    """

    excluded: frozenset[int]
    duplicate_groups: list[DuplicateGroup]


def analyze(graph: DependencyGraph, policy: PolicyDocument) -> GraphAnalysis:
    """Analyze a dependency graph against the bans policy.

    Args:
        graph: The resolved dependency graph.
        policy: The policy document.

    Returns:
        GraphAnalysis with the exclusion set and duplicate groups. Group
        severities are taken from ``bans.multiple_versions``.

    Raises:
        GraphIntegrityError: If the graph contains a cycle.
    """
    adjacency = build_adjacency(graph)
    check_acyclic(graph, adjacency)
    excluded = skip_tree_closure(graph, policy, adjacency)
    groups = find_duplicate_groups(graph, policy, excluded)
    return GraphAnalysis(excluded=excluded, duplicate_groups=groups)


def build_adjacency(graph: DependencyGraph) -> list[list[int]]:
    """Build a sorted, de-duplicated child list for every node.

    Args:
        graph: The dependency graph.

    Returns:
        List indexed by node, holding child indices in ascending order.
    """
    children: list[set[int]] = [set() for _ in graph.nodes]
    for edge in graph.edges:
        children[edge.parent].add(edge.child)
    return [sorted(c) for c in children]


def check_acyclic(graph: DependencyGraph, adjacency: list[list[int]]) -> None:
    """Verify the graph has no cycles.

    Uses an iterative three-colour depth-first search so deep graphs do
    not hit the recursion limit.

    Args:
        graph: The dependency graph.
        adjacency: Child lists from :func:`build_adjacency`.

    Raises:
        GraphIntegrityError: On the first back edge found, naming the cycle.
    """
    colour = [_WHITE] * len(graph.nodes)
    parent: list[Optional[int]] = [None] * len(graph.nodes)

    for start in range(len(graph.nodes)):
        if colour[start] != _WHITE:
            continue
        colour[start] = _GREY
        stack: list[tuple[int, int]] = [(start, 0)]
        while stack:
            node, position = stack[-1]
            if position < len(adjacency[node]):
                stack[-1] = (node, position + 1)
                child = adjacency[node][position]
                if colour[child] == _GREY:
                    raise GraphIntegrityError(
                        "Dependency cycle detected: "
                        + _format_cycle(graph, parent, node, child)
                    )
                if colour[child] == _WHITE:
                    colour[child] = _GREY
                    parent[child] = node
                    stack.append((child, 0))
            else:
                colour[node] = _BLACK
                stack.pop()


def _format_cycle(
    graph: DependencyGraph,
    parent: list[Optional[int]],
    tail: int,
    head: int,
) -> str:
    path = [tail]
    current = tail
    while current != head:
        previous = parent[current]
        if previous is None:
            break
        path.append(previous)
        current = previous
    path.reverse()
    path.append(head)
    return " -> ".join(graph.nodes[i].display() for i in path)


def skip_tree_closure(
    graph: DependencyGraph,
    policy: PolicyDocument,
    adjacency: list[list[int]],
) -> frozenset[int]:
    """Compute every node excluded by a skip-tree entry.

    Each seed node is excluded together with everything reachable from it,
    up to the entry's depth limit. Overlapping subtrees are unioned.

    Args:
        graph: The dependency graph.
        policy: The policy document.
        adjacency: Child lists from :func:`build_adjacency`.

    Returns:
        Frozen set of excluded node indices.
    """
    excluded: set[int] = set()
    for seed, node in enumerate(graph.nodes):
        entries = match_skip_tree(node, policy)
        if not entries:
            continue
        excluded |= _reachable(seed, adjacency, skip_tree_depth(entries))
    return frozenset(excluded)


def _reachable(
    seed: int, adjacency: list[list[int]], max_depth: Optional[int]
) -> set[int]:
    # Breadth-first so every node is reached at its shortest depth
    seen = {seed}
    queue: deque[tuple[int, int]] = deque([(seed, 0)])
    while queue:
        node, depth = queue.popleft()
        if max_depth is not None and depth >= max_depth:
            continue
        for child in adjacency[node]:
            if child not in seen:
                seen.add(child)
                queue.append((child, depth + 1))
    return seen


def find_duplicate_groups(
    graph: DependencyGraph,
    policy: PolicyDocument,
    excluded: frozenset[int],
) -> list[DuplicateGroup]:
    """Group non-excluded nodes by name and keep multi-version groups.

    Versions listed in ``bans.skip`` are removed before the size check; a
    group is reportable while two or more distinct versions remain.

    Args:
        graph: The dependency graph.
        policy: The policy document.
        excluded: Node indices from :func:`skip_tree_closure`.

    Returns:
        Duplicate groups sorted by package name.
    """
    versions: dict[str, set[str]] = {}
    skipped: dict[str, set[str]] = {}
    for index, node in enumerate(graph.nodes):
        if index in excluded:
            continue
        if match_skip(node, policy):
            skipped.setdefault(node.name, set()).add(node.version)
        else:
            versions.setdefault(node.name, set()).add(node.version)

    severity = policy.bans.multiple_versions.to_severity()
    groups: list[DuplicateGroup] = []
    for name in sorted(versions):
        remaining = versions[name]
        if len(remaining) < 2:
            continue
        groups.append(
            DuplicateGroup(
                name=name,
                versions=sort_versions(remaining),
                skipped_versions=sort_versions(skipped.get(name, set())),
                severity=severity,
            )
        )
    return groups


def sort_versions(versions: set[str]) -> list[str]:
    """Sort version strings, lowest first.

    Versions are compared as PEP 440 versions where possible; anything that
    does not parse sorts after them, by string.

    Args:
        versions: Version strings.

    Returns:
        Sorted list.
    """
    return sorted(versions, key=version_sort_key)


def version_sort_key(version: str) -> tuple[int, Union[Version, str], str]:
    """Sort key placing PEP 440 versions first, then other strings."""
    try:
        return (0, Version(version), version)
    except InvalidVersion:
        return (1, version, version)
