"""Graph source for ``cargo metadata`` output.

Reads the JSON written by ``cargo metadata --format-version 1`` and builds a
DependencyGraph from its ``packages`` and ``resolve.nodes`` sections.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from dependency_policy.exceptions import GraphIntegrityError, GraphLoadError
from dependency_policy.logging import get_logger
from dependency_policy.models.graph import DependencyEdge, DependencyGraph, PackageNode
from dependency_policy.resolvers.base import BaseGraphSource

log = get_logger(__name__)


class CargoMetadataSource(BaseGraphSource):
    """Loads a dependency graph from a saved ``cargo metadata`` document."""

    def __init__(self, path: Path) -> None:
        """Initialize the source.

        Args:
            path: Path to the JSON file produced by ``cargo metadata``.
        """
        self._path = path

    def load(self) -> DependencyGraph:
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except OSError as e:
            raise GraphLoadError(f"Cannot read '{self._path}': {e}") from e
        except json.JSONDecodeError as e:
            raise GraphLoadError(f"Invalid JSON in '{self._path}': {e}") from e
        return graph_from_cargo_metadata(data)


def is_cargo_metadata(data: Any) -> bool:
    """Check whether a parsed JSON document looks like ``cargo metadata``."""
    return isinstance(data, dict) and "packages" in data and "resolve" in data


def graph_from_cargo_metadata(data: dict[str, Any]) -> DependencyGraph:
    """Build a DependencyGraph from parsed ``cargo metadata`` JSON.

    Only packages present in the resolve graph become nodes. The directory
    of each package's ``Cargo.toml`` is recorded as its source directory so
    clarification license files can be located.

    Args:
        data: Parsed ``cargo metadata`` document.

    Returns:
        DependencyGraph of the resolved packages.

    Raises:
        GraphLoadError: If required keys are missing or mistyped.
        GraphIntegrityError: If edges reference unknown packages or two
            packages share a name and version.
    """
    resolve = data.get("resolve")
    if not isinstance(resolve, dict):
        raise GraphLoadError(
            "cargo metadata has no resolve section (was it run with --no-deps?)"
        )

    try:
        packages = {pkg["id"]: pkg for pkg in data["packages"]}
        resolved_ids = [node["id"] for node in resolve["nodes"]]
    except (KeyError, TypeError) as e:
        raise GraphLoadError(f"Malformed cargo metadata: missing {e}") from e

    index: dict[str, int] = {}
    nodes: list[PackageNode] = []
    for package_id in sorted(resolved_ids):
        package = packages.get(package_id)
        if package is None:
            raise GraphIntegrityError(
                f"Resolved package '{package_id}' is missing from packages"
            )
        index[package_id] = len(nodes)
        nodes.append(_package_node(package))

    edges: list[DependencyEdge] = []
    for node in resolve["nodes"]:
        parent = index[node["id"]]
        for dependency_id in node.get("dependencies", []):
            if dependency_id not in index:
                raise GraphIntegrityError(
                    f"'{node['id']}' depends on unknown package '{dependency_id}'"
                )
            edges.append(DependencyEdge(parent=parent, child=index[dependency_id]))

    log.debug("loaded cargo metadata", packages=len(nodes), edges=len(edges))
    try:
        return DependencyGraph(nodes=nodes, edges=edges)
    except ValidationError as e:
        raise GraphIntegrityError(f"Invalid dependency graph: {e}") from e


def _package_node(package: dict[str, Any]) -> PackageNode:
    try:
        name = package["name"]
        version = package["version"]
    except KeyError as e:
        raise GraphLoadError(f"Malformed cargo metadata package: missing {e}") from e

    license_text = package.get("license")
    manifest = package.get("manifest_path")
    return PackageNode(
        name=name,
        version=version,
        license=license_text or None,
        source_dir=str(Path(manifest).parent) if manifest else None,
    )
