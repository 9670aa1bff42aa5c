"""Tests for policy document models."""

import pytest
from pydantic import ValidationError

from dependency_policy.models.policy import (
    BansPolicy,
    Clarification,
    LicensesPolicy,
    LintLevel,
    PolicyDocument,
    SkipEntry,
    SkipTreeEntry,
)
from dependency_policy.models.report import Severity


class TestLintLevel:
    """Tests for LintLevel enum."""

    @pytest.mark.parametrize(
        ("level", "severity"),
        [
            (LintLevel.ALLOW, Severity.PASS),
            (LintLevel.WARN, Severity.WARN),
            (LintLevel.DENY, Severity.DENY),
        ],
    )
    def test_to_severity(self, level: LintLevel, severity: Severity) -> None:
        """Test mapping of lint levels to severities."""
        assert level.to_severity() == severity


class TestPolicyDefaults:
    """Tests for default policy values."""

    def test_default_levels(self) -> None:
        """Test the default lint levels of an empty policy."""
        policy = PolicyDocument()
        assert policy.licenses.unlicensed == LintLevel.DENY
        assert policy.licenses.copyleft == LintLevel.WARN
        assert policy.bans.multiple_versions == LintLevel.WARN

    def test_default_lists_empty(self) -> None:
        """Test that all rule lists default to empty."""
        policy = PolicyDocument()
        assert policy.licenses.allow == []
        assert policy.licenses.deny == []
        assert policy.licenses.exceptions == []
        assert policy.licenses.clarify == []
        assert policy.bans.skip == []
        assert policy.bans.skip_tree == []


class TestBansPolicy:
    """Tests for BansPolicy aliases."""

    def test_accepts_hyphenated_keys(self) -> None:
        """Test that deny.toml style keys are accepted."""
        bans = BansPolicy.model_validate(
            {
                "multiple-versions": "deny",
                "skip-tree": [{"name": "windows-sys", "depth": 1}],
            }
        )
        assert bans.multiple_versions == LintLevel.DENY
        assert bans.skip_tree == [SkipTreeEntry(name="windows-sys", depth=1)]

    def test_accepts_python_names(self) -> None:
        """Test that field names work as well as aliases."""
        bans = BansPolicy(multiple_versions=LintLevel.ALLOW)
        assert bans.multiple_versions == LintLevel.ALLOW

    def test_rejects_unknown_level(self) -> None:
        """Test that invalid lint levels are rejected."""
        with pytest.raises(ValidationError):
            BansPolicy.model_validate({"multiple-versions": "sometimes"})

    def test_skip_requires_version(self) -> None:
        """Test that skip entries need an exact version."""
        with pytest.raises(ValidationError):
            SkipEntry.model_validate({"name": "rand"})

    def test_skip_tree_depth_non_negative(self) -> None:
        """Test that skip-tree depth cannot be negative."""
        with pytest.raises(ValidationError):
            SkipTreeEntry(name="rand", depth=-1)

    def test_entry_display(self) -> None:
        """Test display forms of skip entries."""
        assert SkipEntry(name="rand", version="0.7.3").display() == "rand@0.7.3"
        assert SkipTreeEntry(name="rand").display() == "rand"
        assert SkipTreeEntry(name="rand", version="0.7.3").display() == "rand@0.7.3"


class TestLicensesPolicy:
    """Tests for LicensesPolicy."""

    def test_rejects_unknown_field(self) -> None:
        """Test that typos in the licenses section are rejected."""
        with pytest.raises(ValidationError):
            LicensesPolicy.model_validate({"allowed": ["MIT"]})

    def test_exception_ids_scoped_to_package(self) -> None:
        """Test that exceptions only apply to the named package."""
        licenses = LicensesPolicy.model_validate(
            {
                "exceptions": [
                    {"name": "ring", "allow": ["OpenSSL"]},
                    {"name": "ring", "version": "0.16.20", "allow": ["ISC"]},
                    {"name": "webpki", "allow": ["MPL-2.0"]},
                ]
            }
        )
        assert licenses.exception_ids("ring", "0.16.20") == ["OpenSSL", "ISC"]
        assert licenses.exception_ids("ring", "0.17.0") == ["OpenSSL"]
        assert licenses.exception_ids("other", "1.0.0") == []


class TestClarification:
    """Tests for Clarification model."""

    def test_accepts_license_files_alias(self) -> None:
        """Test the hyphenated license-files key."""
        clarification = Clarification.model_validate(
            {
                "name": "ring",
                "expression": "MIT AND ISC AND OpenSSL",
                "license-files": [{"path": "LICENSE", "hash": 0xBD0EED23}],
            }
        )
        assert clarification.license_files[0].path == "LICENSE"
        assert clarification.license_files[0].hash == 0xBD0EED23

    def test_rejects_invalid_expression(self) -> None:
        """Test that unparseable expressions are rejected at load time."""
        with pytest.raises(ValidationError, match="invalid license expression"):
            Clarification(name="ring", expression="MIT AND AND ISC")

    def test_applies_to(self) -> None:
        """Test version matching of clarifications."""
        any_version = Clarification(name="ring", expression="MIT")
        pinned = Clarification(name="ring", version="0.16.20", expression="MIT")

        assert any_version.applies_to("ring", "0.17.0")
        assert not any_version.applies_to("rings", "0.17.0")
        assert pinned.applies_to("ring", "0.16.20")
        assert not pinned.applies_to("ring", "0.17.0")


class TestPolicyDocument:
    """Tests for PolicyDocument."""

    def test_ignores_other_sections(self) -> None:
        """Test that advisories and sources sections are ignored."""
        policy = PolicyDocument.model_validate(
            {
                "advisories": {"vulnerability": "deny"},
                "sources": {"unknown-registry": "warn"},
                "licenses": {"allow": ["MIT"]},
            }
        )
        assert policy.licenses.allow == ["MIT"]

    def test_is_frozen(self) -> None:
        """Test that a loaded policy cannot be mutated."""
        policy = PolicyDocument()
        with pytest.raises(ValidationError):
            policy.licenses = LicensesPolicy()  # type: ignore[misc]
