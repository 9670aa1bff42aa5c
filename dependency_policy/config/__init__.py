"""Policy file handling for dependency-policy."""
from __future__ import annotations

from dependency_policy.config.defaults import DEFAULT_POLICY_NAMES, get_default_policy
from dependency_policy.config.loader import (
    find_policy_file,
    load_policy,
    load_policy_file,
)
from dependency_policy.models.policy import PolicyDocument

__all__ = [
    "DEFAULT_POLICY_NAMES",
    "PolicyDocument",
    "find_policy_file",
    "get_default_policy",
    "load_policy",
    "load_policy_file",
]
