"""License clarifications and their integrity checks.

A clarification replaces a package's detected license with a policy-supplied
expression, but only while the package's license files still hash to the
values recorded in the policy.
"""
from __future__ import annotations

import zlib
from abc import ABC, abstractmethod
from pathlib import Path
from typing import NamedTuple, Optional

from dependency_policy.exceptions import ConfigurationError
from dependency_policy.logging import get_logger
from dependency_policy.models.graph import DependencyGraph, PackageNode
from dependency_policy.models.policy import Clarification, PolicyDocument

log = get_logger(__name__)


class LicenseTextSource(ABC):
    """Abstract source of license file hashes.

    Implementations locate a package's license file and return a content
    hash comparable to the ``hash`` recorded in a clarification.
    """

    @abstractmethod
    def content_hash(self, package: PackageNode, path: str) -> Optional[int]:
        """Hash a package's license file.

        Args:
            package: Package whose files are read.
            path: License file path relative to the package root.

        Returns:
            Content hash, or None if the file cannot be found.
        """


def hash_license_text(data: bytes) -> int:
    """Compute the CRC-32 of license file content.

    Args:
        data: Raw file content.

    Returns:
        Unsigned 32-bit checksum.
    """
    return zlib.crc32(data) & 0xFFFFFFFF


class DirectoryLicenseTextSource(LicenseTextSource):
    """Reads license files from per-package source directories."""

    def __init__(self, directories: dict[tuple[str, str], Path]) -> None:
        """Initialize the source.

        Args:
            directories: ``(name, version)`` to the directory holding that
                package's files.
        """
        self._directories = dict(directories)

    @classmethod
    def from_graph(cls, graph: DependencyGraph) -> DirectoryLicenseTextSource:
        """Build a source from the ``source_dir`` of each graph node.

        Args:
            graph: Dependency graph whose nodes may carry a source directory.

        Returns:
            DirectoryLicenseTextSource covering every node with a directory.
        """
        directories = {
            node.key: Path(node.source_dir)
            for node in graph.nodes
            if node.source_dir is not None
        }
        return cls(directories)

    def content_hash(self, package: PackageNode, path: str) -> Optional[int]:
        directory = self._directories.get(package.key)
        if directory is None:
            return None
        file_path = directory / path
        try:
            return hash_license_text(file_path.read_bytes())
        except OSError:
            return None


class ClarificationResult(NamedTuple):
    """Outcome of checking every applicable clarification.

    Attributes:
        valid: Clarification to use, keyed by node index.
        invalid: ``name@version`` of packages whose clarification failed
            its integrity check.
    """

    valid: dict[int, Clarification]
    invalid: list[str]


def check_clarifications(
    graph: DependencyGraph,
    policy: PolicyDocument,
    license_texts: Optional[LicenseTextSource] = None,
) -> ClarificationResult:
    """Validate clarifications against the packages they target.

    Args:
        graph: Dependency graph being evaluated.
        policy: Policy holding the clarifications.
        license_texts: Source of license file hashes.

    Returns:
        ClarificationResult with valid clarifications per node and the
        packages whose hashes no longer match.

    Raises:
        ConfigurationError: If a clarification names a license file that
            cannot be found, or lists files but no text source was given.
    """
    valid: dict[int, Clarification] = {}
    invalid: list[str] = []

    for index, node in enumerate(graph.nodes):
        clarification = _find_clarification(policy, node.name, node.version)
        if clarification is None:
            continue

        if _hashes_match(clarification, node, license_texts):
            valid[index] = clarification
        else:
            log.warning(
                "clarification ignored, license text changed",
                package=node.display(),
            )
            invalid.append(node.display())

    return ClarificationResult(valid=valid, invalid=invalid)


def _find_clarification(
    policy: PolicyDocument, name: str, version: str
) -> Optional[Clarification]:
    for clarification in policy.licenses.clarify:
        if clarification.applies_to(name, version):
            return clarification
    return None


def _hashes_match(
    clarification: Clarification,
    package: PackageNode,
    license_texts: Optional[LicenseTextSource],
) -> bool:
    if not clarification.license_files:
        return True
    if license_texts is None:
        raise ConfigurationError(
            f"Clarification for '{package.display()}' lists license files "
            "but no license text source is available"
        )

    matches = True
    for license_file in clarification.license_files:
        actual = license_texts.content_hash(package, license_file.path)
        if actual is None:
            raise ConfigurationError(
                f"Clarification for '{package.display()}' references license file "
                f"'{license_file.path}' which was not found"
            )
        if actual != license_file.hash:
            matches = False
    return matches
