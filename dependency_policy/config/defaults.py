"""Default policy values for dependency-policy."""

from __future__ import annotations

from dependency_policy.models.policy import PolicyDocument

# Policy file names to search for, in order of precedence
DEFAULT_POLICY_NAMES = [
    "deny.toml",
    ".dependency-policy.toml",
    ".dependency-policy.yaml",
    ".dependency-policy.yml",
]


def get_default_policy() -> PolicyDocument:
    """Get the default policy.

    Returns:
        PolicyDocument with every rule at its default: unlicensed packages
        denied, copyleft and duplicate versions warned, empty lists.
    """
    return PolicyDocument()
