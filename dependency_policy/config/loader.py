"""Policy file discovery and loading for dependency-policy."""
from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from dependency_policy.config.defaults import DEFAULT_POLICY_NAMES, get_default_policy
from dependency_policy.exceptions import ConfigurationError
from dependency_policy.logging import get_logger
from dependency_policy.models.policy import PolicyDocument

log = get_logger(__name__)


def find_policy_file(start_dir: Path | None = None) -> Path | None:
    """Find a policy file in the specified directory.

    Searches for ``deny.toml`` first, then the ``.dependency-policy`` files
    in TOML, YAML and YML form.

    Args:
        start_dir: Directory to search. Defaults to current working directory.

    Returns:
        Path to the policy file if found, None otherwise.
    """
    search_dir = start_dir or Path.cwd()
    for name in DEFAULT_POLICY_NAMES:
        policy_path = search_dir / name
        if policy_path.exists():
            return policy_path
    return None


def load_policy_file(path: Path) -> PolicyDocument:
    """Load and validate a policy from a TOML or YAML file.

    Files ending in ``.toml`` are parsed as TOML; anything else as YAML.

    Args:
        path: Path to the policy file.

    Returns:
        Validated PolicyDocument instance.

    Raises:
        ConfigurationError: If the file cannot be read, has invalid syntax,
            or fails validation.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, PermissionError) as e:
        raise ConfigurationError(f"Cannot read policy file '{path}': {e}") from e

    # Handle empty files - return default policy
    if not content.strip():
        return get_default_policy()

    if path.suffix.lower() == ".toml":
        data = _parse_toml(content, path)
    else:
        data = _parse_yaml(content, path)

    # Handle YAML that parses to None (empty or just comments)
    if data is None:
        return get_default_policy()

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Invalid policy in '{path}': "
            f"expected a mapping at root level, got {type(data).__name__}"
        )

    ignored = sorted(set(data) - set(PolicyDocument.model_fields))
    if ignored:
        log.debug("ignoring policy sections", path=str(path), sections=ignored)

    try:
        return PolicyDocument.model_validate(data)
    except ValidationError as e:
        error_messages = _format_validation_errors(e)
        raise ConfigurationError(
            f"Invalid policy in '{path}': {error_messages}"
        ) from e


def _parse_toml(content: str, path: Path) -> dict[str, Any]:
    try:
        return tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML syntax in '{path}': {e}") from e


def _parse_yaml(content: str, path: Path) -> Any:
    try:
        return yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML syntax in '{path}': {e}") from e


def _format_validation_errors(error: ValidationError) -> str:
    """Format Pydantic validation errors into a readable string.

    Args:
        error: The Pydantic ValidationError.

    Returns:
        Formatted error message string.
    """
    messages: list[str] = []
    for err in error.errors():
        loc = ".".join(str(x) for x in err["loc"]) if err["loc"] else "root"
        msg = err["msg"]
        messages.append(f"{loc}: {msg}")
    return "; ".join(messages)


def load_policy(policy_path: str | None = None) -> PolicyDocument:
    """Load a policy from file or use defaults.

    If a policy_path is provided, loads from that file. Otherwise, searches
    for a policy file in the current directory. If no file is found,
    returns the default policy.

    Args:
        policy_path: Optional path to the policy file.
            If provided, must exist and be valid.

    Returns:
        PolicyDocument with loaded or default values.

    Raises:
        ConfigurationError: If the specified or discovered file is invalid.
    """
    if policy_path is not None:
        return load_policy_file(Path(policy_path))

    discovered = find_policy_file()
    if discovered is not None:
        log.debug("using discovered policy file", path=str(discovered))
        return load_policy_file(discovered)

    return get_default_policy()
