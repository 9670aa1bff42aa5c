"""Graph source for JSON graph files."""
from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from dependency_policy.exceptions import GraphIntegrityError, GraphLoadError
from dependency_policy.models.graph import DependencyGraph
from dependency_policy.resolvers.base import BaseGraphSource
from dependency_policy.resolvers.cargo import graph_from_cargo_metadata, is_cargo_metadata


class GraphFileSource(BaseGraphSource):
    """Loads a graph from a JSON file.

    Accepts either a serialized DependencyGraph (``nodes`` and ``edges``)
    or a ``cargo metadata`` document.
    """

    def __init__(self, path: Path) -> None:
        """Initialize the source.

        Args:
            path: Path to the JSON graph file.
        """
        self._path = path

    def load(self) -> DependencyGraph:
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except OSError as e:
            raise GraphLoadError(f"Cannot read '{self._path}': {e}") from e
        except json.JSONDecodeError as e:
            raise GraphLoadError(f"Invalid JSON in '{self._path}': {e}") from e

        if is_cargo_metadata(data):
            return graph_from_cargo_metadata(data)

        try:
            return DependencyGraph.model_validate(data)
        except ValidationError as e:
            # Our own integrity checks raise plain value errors
            if all(err["type"] == "value_error" for err in e.errors()):
                raise GraphIntegrityError(
                    f"Invalid dependency graph in '{self._path}': {e}"
                ) from e
            raise GraphLoadError(f"Malformed graph file '{self._path}': {e}") from e
