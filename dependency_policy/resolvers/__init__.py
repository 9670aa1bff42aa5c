"""Dependency graph sources."""
from dependency_policy.resolvers.base import BaseGraphSource
from dependency_policy.resolvers.cargo import CargoMetadataSource, graph_from_cargo_metadata
from dependency_policy.resolvers.environment import EnvironmentSource
from dependency_policy.resolvers.graph_file import GraphFileSource

__all__ = [
    "BaseGraphSource",
    "CargoMetadataSource",
    "EnvironmentSource",
    "GraphFileSource",
    "graph_from_cargo_metadata",
]
