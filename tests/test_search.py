"""Tests for the repository search helpers."""

from unittest.mock import patch

import pytest

from registry.maven.search import (
    SearchResult,
    is_stable_version,
    latest_stable_version,
    search_by_artifact_id,
)


@pytest.mark.parametrize(
    "version,stable",
    [
        ("3.12.0", True),
        ("31.1-jre", True),
        ("1.0-SNAPSHOT", False),
        ("2.0.0-RC1", False),
        ("1.0-alpha-2", False),
        ("5.0.0-beta", False),
        ("6.0.0-M3", False),
        ("1.0.Final", True),
    ],
)
def test_is_stable_version(version, stable):
    assert is_stable_version(version) is stable


class TestSearchByArtifactId:
    """Artifact search by name."""

    @patch("registry.maven.search.get_json")
    def test_parses_docs(self, mock_get_json):
        mock_get_json.return_value = (200, {"response": {"docs": [
            {"g": "com.google.guava", "a": "guava", "latestVersion": "33.0.0-jre"},
            {"g": "incomplete", "a": "guava"},
        ]}})

        results = search_by_artifact_id("guava", rows=5)

        assert results == [SearchResult("com.google.guava", "guava", "33.0.0-jre")]
        assert str(results[0]) == "com.google.guava:guava (v33.0.0-jre)"
        params = mock_get_json.call_args.kwargs["params"]
        assert params["q"] == "a:guava"
        assert params["rows"] == 5

    @patch("registry.maven.search.get_json")
    def test_failure_returns_empty(self, mock_get_json):
        mock_get_json.return_value = (503, None)
        assert search_by_artifact_id("guava") == []

    @pytest.mark.parametrize("body", [[], "oops", {"response": None}, {"response": {"docs": "x"}}, {}])
    @patch("registry.maven.search.get_json")
    def test_unexpected_shape_returns_empty(self, mock_get_json, body):
        mock_get_json.return_value = (200, body)
        assert search_by_artifact_id("guava") == []

    @patch("registry.maven.search.get_json")
    def test_non_text_fields_are_skipped(self, mock_get_json):
        mock_get_json.return_value = (200, {"response": {"docs": [
            "not-a-doc",
            {"g": "g", "a": "a", "latestVersion": 3},
            {"g": "g", "a": "a", "latestVersion": "3.0"},
        ]}})
        assert search_by_artifact_id("a") == [SearchResult("g", "a", "3.0")]


class TestLatestStableVersion:
    """Highest stable version from the GAV core."""

    @patch("registry.maven.search.get_json")
    def test_skips_unstable_and_picks_highest(self, mock_get_json):
        mock_get_json.return_value = (200, {"response": {"docs": [
            {"v": "5.9.3"},
            {"v": "5.10.0"},
            {"v": "6.0.0-M1"},
            {"v": "5.11.0-RC1"},
            {"v": "5.9.10"},
        ]}})
        assert latest_stable_version("org.junit.jupiter", "junit-jupiter") == "5.10.0"

    @patch("registry.maven.search.get_json")
    def test_no_stable_versions(self, mock_get_json):
        mock_get_json.return_value = (200, {"response": {"docs": [{"v": "1.0-SNAPSHOT"}]}})
        assert latest_stable_version("g", "a") is None

    @patch("registry.maven.search.get_json")
    def test_failure_returns_none(self, mock_get_json):
        mock_get_json.return_value = (0, None)
        assert latest_stable_version("g", "a") is None

    @pytest.mark.parametrize("body", [["5.9.3"], {"response": []}, {"response": {"docs": None}}])
    @patch("registry.maven.search.get_json")
    def test_unexpected_shape_returns_none(self, mock_get_json, body):
        mock_get_json.return_value = (200, body)
        assert latest_stable_version("g", "a") is None

    @patch("registry.maven.search.get_json")
    def test_non_string_versions_are_skipped(self, mock_get_json):
        mock_get_json.return_value = (200, {"response": {"docs": [{"v": 7}, {"v": None}, {"v": "1.2"}]}})
        assert latest_stable_version("g", "a") == "1.2"
