"""Custom exceptions for dependency-policy."""


class DependencyPolicyError(Exception):
    """Base exception for all dependency-policy errors."""

    pass


class ConfigurationError(DependencyPolicyError):
    """Exception raised when the policy document is invalid."""

    pass


class GraphIntegrityError(DependencyPolicyError):
    """Exception raised when the dependency graph is structurally invalid.

    Cycles, dangling edges and duplicate package identities all abort the
    run without producing a report.
    """

    pass


class GraphLoadError(DependencyPolicyError):
    """Exception raised when a dependency graph cannot be read."""

    pass
