"""Graph source for the installed Python environment.

Builds a DependencyGraph from the distributions visible to
``importlib.metadata``. Every installed distribution becomes a node, and
each requirement that applies to the current environment becomes an edge.
"""
from importlib.metadata import Distribution, distributions
from typing import Iterable, Optional

from packaging.requirements import InvalidRequirement, Requirement
from pydantic import ValidationError

from dependency_policy.exceptions import GraphIntegrityError
from dependency_policy.logging import get_logger
from dependency_policy.models.graph import DependencyEdge, DependencyGraph, PackageNode
from dependency_policy.resolvers.base import BaseGraphSource

log = get_logger(__name__)

# Mapping of trove classifiers to SPDX identifiers
CLASSIFIER_TO_SPDX: dict[str, str] = {
    "License :: OSI Approved :: MIT License": "MIT",
    "License :: OSI Approved :: Apache Software License": "Apache-2.0",
    "License :: OSI Approved :: BSD License": "BSD-3-Clause",
    "License :: OSI Approved :: GNU General Public License v3 (GPLv3)": "GPL-3.0",
    "License :: OSI Approved :: GNU General Public License v2 (GPLv2)": "GPL-2.0",
    "License :: OSI Approved :: GNU Lesser General Public License v3 (LGPLv3)": (
        "LGPL-3.0"
    ),
    "License :: OSI Approved :: GNU Lesser General Public License v2 (LGPLv2)": (
        "LGPL-2.0"
    ),
    "License :: OSI Approved :: ISC License (ISCL)": "ISC",
    "License :: OSI Approved :: Mozilla Public License 2.0 (MPL 2.0)": "MPL-2.0",
    "License :: OSI Approved :: Python Software Foundation License": "PSF-2.0",
    "License :: OSI Approved :: The Unlicense (Unlicense)": "Unlicense",
    "License :: OSI Approved :: zlib/libpng License": "Zlib",
}

# Longest free-text License field still treated as an identifier
MAX_LICENSE_FIELD_LENGTH = 100


class EnvironmentSource(BaseGraphSource):
    """Reads the dependency graph of installed Python distributions."""

    def __init__(self, dists: Optional[Iterable[Distribution]] = None) -> None:
        """Initialize the source.

        Args:
            dists: Distributions to use. Defaults to every distribution
                installed in the running interpreter's environment.
        """
        self._dists = list(dists) if dists is not None else None

    @staticmethod
    def _normalize(name: str) -> str:
        """Normalize package name per PEP 503.

        Args:
            name: Package name to normalize.

        Returns:
            Normalized package name (lowercase, underscores).
        """
        return name.lower().replace("-", "_").replace(".", "_")

    def load(self) -> DependencyGraph:
        dists = self._dists if self._dists is not None else list(distributions())

        # Index of installed packages for requirement lookup
        installed: dict[str, tuple[int, Distribution]] = {}
        nodes: list[PackageNode] = []
        for dist in sorted(dists, key=lambda d: str(d.metadata.get("Name", "")).lower()):
            name = dist.metadata.get("Name")
            version = dist.metadata.get("Version")
            # Skip packages with missing metadata
            if not name or not version:
                continue
            normalized = self._normalize(name)
            if normalized in installed:
                continue  # Shadowed by an earlier path entry
            installed[normalized] = (len(nodes), dist)
            nodes.append(
                PackageNode(name=name, version=version, license=extract_license(dist))
            )

        edges: list[DependencyEdge] = []
        for parent, dist in installed.values():
            for req_str in dist.requires or []:
                child = self._resolve_requirement(req_str, installed)
                if child is not None and child != parent:
                    edges.append(DependencyEdge(parent=parent, child=child))
                elif child == parent:
                    log.debug("ignoring self-requirement", package=nodes[parent].name)

        log.debug("loaded installed environment", packages=len(nodes), edges=len(edges))
        try:
            return DependencyGraph(nodes=nodes, edges=edges)
        except ValidationError as e:
            raise GraphIntegrityError(f"Invalid dependency graph: {e}") from e

    def _resolve_requirement(
        self,
        req_str: str,
        installed: dict[str, tuple[int, Distribution]],
    ) -> Optional[int]:
        """Parse a requirement string and find the installed package.

        Args:
            req_str: Requirement string (e.g., "requests>=2.0.0").
            installed: Installed packages by normalized name.

        Returns:
            Node index of the required package, or None if the requirement
            does not apply or is not installed.
        """
        try:
            req = Requirement(req_str)
        except InvalidRequirement:
            # Skip malformed requirements
            return None

        # Extras-only dependencies apply only when the extra is requested
        if self._is_extras_only_marker(req.marker):
            return None
        if req.marker and not req.marker.evaluate():
            return None

        entry = installed.get(self._normalize(req.name))
        return entry[0] if entry is not None else None

    @staticmethod
    def _is_extras_only_marker(marker: Optional[object]) -> bool:
        """Check if marker indicates an extras-only dependency.

        Args:
            marker: Parsed marker object from Requirement.

        Returns:
            True if this is an extras-only dependency.
        """
        if marker is None:
            return False
        return "extra" in str(marker)


def extract_license(dist: Distribution) -> Optional[str]:
    """Extract a license expression from distribution metadata.

    Checks ``License-Expression`` (PEP 639), then a short single-line
    ``License`` field, then trove classifiers.

    Args:
        dist: Installed distribution.

    Returns:
        License expression string, or None if none is declared.
    """
    metadata = dist.metadata
    expression = metadata.get("License-Expression")
    if expression and expression.strip():
        return str(expression).strip()

    license_str = metadata.get("License")
    if license_str and license_str.strip():
        cleaned = str(license_str).strip()
        # Skip common "no license" values and full license texts
        if (
            cleaned.upper() not in ("UNKNOWN", "NONE")
            and "\n" not in cleaned
            and len(cleaned) <= MAX_LICENSE_FIELD_LENGTH
        ):
            return cleaned

    classifiers = metadata.get_all("Classifier") or []
    for classifier in classifiers:
        if classifier in CLASSIFIER_TO_SPDX:
            return CLASSIFIER_TO_SPDX[classifier]

    return None
