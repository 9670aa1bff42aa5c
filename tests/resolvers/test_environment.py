"""Tests for the installed-environment graph source."""

from typing import Any, Optional

from dependency_policy.analysis.graph import build_adjacency
from dependency_policy.resolvers.environment import EnvironmentSource, extract_license


class MockMetadata:
    """Mock of the email.message-like metadata object."""

    def __init__(self, fields: dict[str, str], classifiers: list[str]) -> None:
        """Initialize mock metadata."""
        self._fields = fields
        self._classifiers = classifiers

    def get(self, key: str, default: Any = None) -> Any:
        """Return a single header value."""
        return self._fields.get(key, default)

    def get_all(self, key: str) -> Optional[list[str]]:
        """Return every value of a repeated header."""
        if key == "Classifier":
            return list(self._classifiers)
        return None


class MockDistribution:
    """Mock distribution for testing importlib.metadata.Distribution."""

    def __init__(
        self,
        name: str,
        version: str,
        requires: Optional[list[str]] = None,
        classifiers: Optional[list[str]] = None,
        **fields: str,
    ) -> None:
        """Initialize mock distribution."""
        headers = {"Name": name, "Version": version}
        headers.update({key.replace("_", "-"): value for key, value in fields.items()})
        self._metadata = MockMetadata(headers, classifiers or [])
        self._requires = requires

    @property
    def metadata(self) -> MockMetadata:
        """Return metadata (mimics Distribution.metadata)."""
        return self._metadata

    @property
    def requires(self) -> Optional[list[str]]:
        """Return requirements list (mimics Distribution.requires)."""
        return self._requires


def load(*dists: MockDistribution) -> Any:
    """Load a graph from mock distributions."""
    return EnvironmentSource(dists=dists).load()  # type: ignore[arg-type]


class TestNormalization:
    """Tests for package name normalization."""

    def test_normalize(self) -> None:
        """Test PEP 503 style normalization."""
        assert EnvironmentSource._normalize("Flask") == "flask"
        assert EnvironmentSource._normalize("typing-extensions") == "typing_extensions"
        assert EnvironmentSource._normalize("zope.interface") == "zope_interface"


class TestEnvironmentSource:
    """Tests for EnvironmentSource.load."""

    def test_nodes_sorted_by_name(self) -> None:
        """Test that every distribution becomes a node, sorted by name."""
        graph = load(
            MockDistribution("requests", "2.31.0", License="Apache-2.0"),
            MockDistribution("Click", "8.1.7", License="BSD-3-Clause"),
        )
        assert [n.name for n in graph.nodes] == ["Click", "requests"]
        assert graph.nodes[0].license == "BSD-3-Clause"

    def test_requirements_become_edges(self) -> None:
        """Test that installed requirements are linked."""
        graph = load(
            MockDistribution("flask", "3.0.0", requires=["click>=8.1", "Jinja2"]),
            MockDistribution("click", "8.1.7"),
            MockDistribution("jinja2", "3.1.2"),
        )
        flask = graph.index_of("flask", "3.0.0")
        assert flask is not None
        children = {graph.nodes[i].name for i in build_adjacency(graph)[flask]}
        assert children == {"click", "jinja2"}

    def test_name_normalization_in_requirements(self) -> None:
        """Test that requirement names are matched after normalization."""
        graph = load(
            MockDistribution("pydantic", "2.5.0", requires=["Typing-Extensions>=4"]),
            MockDistribution("typing_extensions", "4.9.0"),
        )
        assert len(graph.edges) == 1

    def test_extras_only_requirement_ignored(self) -> None:
        """Test that requirements behind an extra are skipped."""
        graph = load(
            MockDistribution("httpx", "0.27.0", requires=['h2 ; extra == "http2"']),
            MockDistribution("h2", "4.1.0"),
        )
        assert graph.edges == []

    def test_non_matching_marker_ignored(self) -> None:
        """Test that requirements for other environments are skipped."""
        graph = load(
            MockDistribution("six-user", "1.0", requires=['six ; python_version < "3"']),
            MockDistribution("six", "1.16.0"),
        )
        assert graph.edges == []

    def test_missing_and_malformed_requirements_ignored(self) -> None:
        """Test that uninstalled and unparseable requirements are skipped."""
        graph = load(
            MockDistribution("app", "1.0", requires=["not-installed", "!!!bad"]),
        )
        assert graph.total_count == 1
        assert graph.edges == []

    def test_self_requirement_ignored(self) -> None:
        """Test that a package requiring itself does not create a cycle."""
        graph = load(MockDistribution("app", "1.0", requires=["App"]))
        assert graph.edges == []

    def test_incomplete_metadata_skipped(self) -> None:
        """Test that distributions without a version are skipped."""
        graph = load(
            MockDistribution("broken", ""),
            MockDistribution("ok", "1.0"),
        )
        assert [n.name for n in graph.nodes] == ["ok"]

    def test_shadowed_distribution_skipped(self) -> None:
        """Test that a second copy of the same package is ignored."""
        graph = load(
            MockDistribution("six", "1.16.0"),
            MockDistribution("six", "1.15.0"),
        )
        assert graph.total_count == 1
        assert graph.nodes[0].version == "1.16.0"


class TestExtractLicense:
    """Tests for extract_license function."""

    def test_license_expression_preferred(self) -> None:
        """Test that License-Expression wins over other fields."""
        dist = MockDistribution(
            "a", "1", License_Expression="MIT OR Apache-2.0", License="BSD"
        )
        assert extract_license(dist) == "MIT OR Apache-2.0"  # type: ignore[arg-type]

    def test_short_license_field(self) -> None:
        """Test that a short License field is used as-is."""
        dist = MockDistribution("a", "1", License=" MIT ")
        assert extract_license(dist) == "MIT"  # type: ignore[arg-type]

    def test_unknown_falls_back_to_classifier(self) -> None:
        """Test that UNKNOWN defers to trove classifiers."""
        dist = MockDistribution(
            "a",
            "1",
            classifiers=["License :: OSI Approved :: MIT License"],
            License="UNKNOWN",
        )
        assert extract_license(dist) == "MIT"  # type: ignore[arg-type]

    def test_full_license_text_ignored(self) -> None:
        """Test that multi-line license texts are not used as expressions."""
        dist = MockDistribution(
            "a",
            "1",
            classifiers=["License :: OSI Approved :: Apache Software License"],
            License="Apache License\nVersion 2.0, January 2004",
        )
        assert extract_license(dist) == "Apache-2.0"  # type: ignore[arg-type]

    def test_no_license_information(self) -> None:
        """Test that None is returned when nothing is declared."""
        dist = MockDistribution("a", "1")
        assert extract_license(dist) is None  # type: ignore[arg-type]
