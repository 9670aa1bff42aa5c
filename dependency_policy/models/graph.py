"""Dependency graph models for dependency-policy.

The graph is an arena of package nodes addressed by index, with directed
parent → child edges between indices. It is supplied once per run by a
resolver and never mutated afterwards.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, model_validator


class PackageNode(BaseModel):
    """A single resolved package.

    Identity is the ``(name, version)`` pair. The same name may appear
    several times in a graph at different versions.
    """

    model_config = {"extra": "forbid", "frozen": True}

    name: str = Field(description="Package name")
    version: str = Field(description="Resolved package version")
    license: Optional[str] = Field(
        default=None,
        description="Declared SPDX license expression (None if unlicensed)",
    )
    source_dir: Optional[str] = Field(
        default=None,
        description="Directory holding the package's license files",
    )

    @property
    def key(self) -> tuple[str, str]:
        """Identity of the node as a ``(name, version)`` tuple."""
        return (self.name, self.version)

    def display(self) -> str:
        """Format the node as ``name@version``."""
        return f"{self.name}@{self.version}"


class DependencyEdge(BaseModel):
    """Directed edge from a parent node to one of its dependencies."""

    model_config = {"extra": "forbid", "frozen": True}

    parent: int = Field(ge=0, description="Index of the depending node")
    child: int = Field(ge=0, description="Index of the dependency")


class DependencyGraph(BaseModel):
    """Arena of package nodes plus index-based dependency edges.

    Diamonds (a package reachable through several paths) are expected.
    Cycles are not rejected here; the graph analyzer detects them.
    """

    model_config = {"extra": "forbid", "frozen": True}

    nodes: list[PackageNode] = Field(
        default_factory=list,
        description="All resolved packages",
    )
    edges: list[DependencyEdge] = Field(
        default_factory=list,
        description="Parent to child relations between node indices",
    )

    @model_validator(mode="after")
    def _check_integrity(self) -> DependencyGraph:
        seen: set[tuple[str, str]] = set()
        for node in self.nodes:
            if node.key in seen:
                raise ValueError(f"duplicate package identity {node.display()}")
            seen.add(node.key)

        count = len(self.nodes)
        for edge in self.edges:
            if edge.parent >= count or edge.child >= count:
                raise ValueError(
                    f"edge {edge.parent} -> {edge.child} references a missing node"
                )
        return self

    @property
    def total_count(self) -> int:
        """Total number of packages in the graph."""
        return len(self.nodes)

    def index_of(self, name: str, version: str) -> Optional[int]:
        """Find the arena index of a package.

        Args:
            name: Package name.
            version: Package version.

        Returns:
            Index of the node, or None if the package is not in the graph.
        """
        for index, node in enumerate(self.nodes):
            if node.name == name and node.version == version:
                return index
        return None

    @classmethod
    def from_dependencies(
        cls,
        nodes: list[PackageNode],
        dependencies: dict[tuple[str, str], list[tuple[str, str]]],
    ) -> DependencyGraph:
        """Build a graph from nodes and identity-keyed dependency lists.

        Args:
            nodes: All packages in the graph.
            dependencies: Mapping of ``(name, version)`` to the identities of
                its direct dependencies.

        Returns:
            DependencyGraph with index-based edges.

        Raises:
            ValueError: If a dependency names a package that is not a node.
        """
        index = {node.key: i for i, node in enumerate(nodes)}
        edges: list[DependencyEdge] = []
        for parent_key, child_keys in dependencies.items():
            if parent_key not in index:
                raise ValueError(f"unknown package {parent_key[0]}@{parent_key[1]}")
            for child_key in child_keys:
                if child_key not in index:
                    raise ValueError(
                        f"unknown dependency {child_key[0]}@{child_key[1]}"
                    )
                edges.append(
                    DependencyEdge(parent=index[parent_key], child=index[child_key])
                )
        return cls(nodes=nodes, edges=edges)
