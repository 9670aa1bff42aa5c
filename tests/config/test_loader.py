"""Tests for policy file loader."""
from __future__ import annotations

from pathlib import Path

import pytest

from dependency_policy.config.loader import (
    find_policy_file,
    load_policy,
    load_policy_file,
)
from dependency_policy.exceptions import ConfigurationError
from dependency_policy.models.policy import LintLevel, PolicyDocument

DENY_TOML = """\
[advisories]
vulnerability = "deny"

[licenses]
unlicensed = "deny"
copyleft = "warn"
allow = ["MIT", "Apache-2.0", "ISC"]
deny = ["GPL-3.0-only"]
exceptions = [
    { allow = ["OpenSSL"], name = "ring" },
]

[[licenses.clarify]]
name = "ring"
expression = "MIT AND ISC AND OpenSSL"
license-files = [
    { path = "LICENSE", hash = 0xbd0eed23 },
]

[bans]
multiple-versions = "deny"
skip = [
    { name = "ansi_term", version = "0.11.0" },
]
skip-tree = [
    { name = "crossbeam", version = "0.7.0", depth = 2 },
]
"""

POLICY_YAML = """\
licenses:
  allow:
    - MIT
  copyleft: deny
bans:
  multiple-versions: allow
  skip-tree:
    - name: windows-sys
"""


class TestFindPolicyFile:
    """Tests for find_policy_file function."""

    def test_finds_deny_toml(self, tmp_path: Path) -> None:
        """Test that deny.toml is found."""
        policy_file = tmp_path / "deny.toml"
        policy_file.write_text(DENY_TOML)

        assert find_policy_file(tmp_path) == policy_file

    def test_finds_yaml(self, tmp_path: Path) -> None:
        """Test that the YAML policy name is found."""
        policy_file = tmp_path / ".dependency-policy.yaml"
        policy_file.write_text(POLICY_YAML)

        assert find_policy_file(tmp_path) == policy_file

    def test_deny_toml_takes_precedence(self, tmp_path: Path) -> None:
        """Test that deny.toml wins over other policy files."""
        toml_file = tmp_path / "deny.toml"
        toml_file.write_text(DENY_TOML)
        (tmp_path / ".dependency-policy.yaml").write_text(POLICY_YAML)

        assert find_policy_file(tmp_path) == toml_file

    def test_returns_none_when_not_found(self, tmp_path: Path) -> None:
        """Test that None is returned when no policy file exists."""
        assert find_policy_file(tmp_path) is None

    def test_uses_cwd_when_no_start_dir(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that current working directory is used when start_dir is None."""
        policy_file = tmp_path / "deny.toml"
        policy_file.write_text(DENY_TOML)
        monkeypatch.chdir(tmp_path)

        assert find_policy_file() == policy_file


class TestLoadPolicyFile:
    """Tests for load_policy_file function."""

    def test_loads_deny_toml(self, tmp_path: Path) -> None:
        """Test loading a cargo-deny style TOML policy."""
        policy_file = tmp_path / "deny.toml"
        policy_file.write_text(DENY_TOML)

        policy = load_policy_file(policy_file)

        assert isinstance(policy, PolicyDocument)
        assert policy.licenses.allow == ["MIT", "Apache-2.0", "ISC"]
        assert policy.licenses.deny == ["GPL-3.0-only"]
        assert policy.licenses.exceptions[0].name == "ring"
        assert policy.licenses.clarify[0].license_files[0].hash == 0xBD0EED23
        assert policy.bans.multiple_versions == LintLevel.DENY
        assert policy.bans.skip[0].version == "0.11.0"
        assert policy.bans.skip_tree[0].depth == 2

    def test_loads_yaml(self, tmp_path: Path) -> None:
        """Test loading the same keys from YAML."""
        policy_file = tmp_path / ".dependency-policy.yaml"
        policy_file.write_text(POLICY_YAML)

        policy = load_policy_file(policy_file)

        assert policy.licenses.copyleft == LintLevel.DENY
        assert policy.bans.multiple_versions == LintLevel.ALLOW
        assert policy.bans.skip_tree[0].name == "windows-sys"
        assert policy.bans.skip_tree[0].version is None

    @pytest.mark.parametrize("name", ["deny.toml", "policy.yaml"])
    def test_empty_file_returns_default(self, tmp_path: Path, name: str) -> None:
        """Test that an empty file gives the default policy."""
        policy_file = tmp_path / name
        policy_file.write_text("  \n")

        assert load_policy_file(policy_file) == PolicyDocument()

    def test_comment_only_yaml_returns_default(self, tmp_path: Path) -> None:
        """Test that YAML holding only comments gives the default policy."""
        policy_file = tmp_path / "policy.yaml"
        policy_file.write_text("# nothing configured yet\n")

        assert load_policy_file(policy_file) == PolicyDocument()

    def test_invalid_toml_syntax(self, tmp_path: Path) -> None:
        """Test that TOML syntax errors raise ConfigurationError."""
        policy_file = tmp_path / "deny.toml"
        policy_file.write_text("[licenses\nallow = [")

        with pytest.raises(ConfigurationError, match="Invalid TOML syntax"):
            load_policy_file(policy_file)

    def test_invalid_yaml_syntax(self, tmp_path: Path) -> None:
        """Test that YAML syntax errors raise ConfigurationError."""
        policy_file = tmp_path / "policy.yaml"
        policy_file.write_text("licenses: [unclosed\n")

        with pytest.raises(ConfigurationError, match="Invalid YAML syntax"):
            load_policy_file(policy_file)

    def test_non_mapping_root(self, tmp_path: Path) -> None:
        """Test that a list at the root is rejected."""
        policy_file = tmp_path / "policy.yaml"
        policy_file.write_text("- MIT\n- Apache-2.0\n")

        with pytest.raises(ConfigurationError, match="expected a mapping"):
            load_policy_file(policy_file)

    def test_invalid_lint_level_names_field(self, tmp_path: Path) -> None:
        """Test that validation errors name the offending field."""
        policy_file = tmp_path / "deny.toml"
        policy_file.write_text('[licenses]\nunlicensed = "maybe"\n')

        with pytest.raises(ConfigurationError, match="licenses.unlicensed"):
            load_policy_file(policy_file)

    def test_unknown_licenses_key(self, tmp_path: Path) -> None:
        """Test that typos inside a known section are rejected."""
        policy_file = tmp_path / "deny.toml"
        policy_file.write_text('[licenses]\nallowed = ["MIT"]\n')

        with pytest.raises(ConfigurationError, match="licenses.allowed"):
            load_policy_file(policy_file)

    @pytest.mark.parametrize("expression", ["MIT AND AND ISC", "()"])
    def test_invalid_clarify_expression(
        self, tmp_path: Path, expression: str
    ) -> None:
        """Test that clarify expressions are checked at load time."""
        policy_file = tmp_path / "deny.toml"
        policy_file.write_text(
            '[[licenses.clarify]]\nname = "ring"\n'
            f'expression = "{expression}"\n'
        )

        with pytest.raises(ConfigurationError, match="invalid license expression"):
            load_policy_file(policy_file)

    def test_unreadable_file(self, tmp_path: Path) -> None:
        """Test that a missing file raises ConfigurationError."""
        with pytest.raises(ConfigurationError, match="Cannot read policy file"):
            load_policy_file(tmp_path / "missing.toml")


class TestLoadPolicy:
    """Tests for load_policy function."""

    def test_explicit_path(self, tmp_path: Path) -> None:
        """Test loading from an explicit path."""
        policy_file = tmp_path / "custom.toml"
        policy_file.write_text(DENY_TOML)

        policy = load_policy(str(policy_file))
        assert policy.bans.multiple_versions == LintLevel.DENY

    def test_discovers_policy(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that a policy in the current directory is used."""
        (tmp_path / "deny.toml").write_text(DENY_TOML)
        monkeypatch.chdir(tmp_path)

        assert load_policy().licenses.deny == ["GPL-3.0-only"]

    def test_defaults_without_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that the default policy is used when nothing is found."""
        monkeypatch.chdir(tmp_path)

        assert load_policy() == PolicyDocument()
