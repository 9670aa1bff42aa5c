"""Base graph source interface."""

from abc import ABC, abstractmethod

from dependency_policy.models.graph import DependencyGraph


class BaseGraphSource(ABC):
    """Abstract base class for dependency graph sources.

    A graph source reads the output of an external resolver and turns it
    into a DependencyGraph. It never performs version solving itself.
    """

    @abstractmethod
    def load(self) -> DependencyGraph:
        """Load the resolved dependency graph.

        Returns:
            DependencyGraph with every resolved package and edge.

        Raises:
            GraphLoadError: If the input cannot be read or is malformed.
            GraphIntegrityError: If the input describes an invalid graph.
        """
