"""Tests for semantic-version resolution."""

from __future__ import annotations

import pytest

from releasecore import (
    ArgumentError,
    ResolutionError,
    Resource,
    ResourceVersionSummary,
    VersionResolver,
    is_greater,
    latest_version,
    normalize_version,
    resolve_max_satisfying,
)
from releasecore.versioning import is_valid_range, is_valid_version


class TestNormalizeVersion:
    """Tests for version normalization."""

    def test_strips_leading_v(self) -> None:
        assert normalize_version("v1.2.3") == "1.2.3"

    def test_strips_whitespace_and_equals(self) -> None:
        assert normalize_version("  =1.2.3 ") == "1.2.3"

    def test_drops_build_metadata(self) -> None:
        assert normalize_version("1.2.3+build.7") == "1.2.3"

    def test_keeps_prerelease(self) -> None:
        assert normalize_version("1.2.3-beta.1") == "1.2.3-beta.1"

    def test_invalid_raises_argument_error(self) -> None:
        with pytest.raises(ArgumentError):
            normalize_version("one.two")

    def test_validity_helpers(self) -> None:
        assert is_valid_version("1.0.0")
        assert not is_valid_version("1.0")
        assert is_valid_range("^1.0.0")
        assert not is_valid_range("not a range")


class TestResolveMaxSatisfying:
    """Tests for max-satisfying selection."""

    def test_greater_than_picks_highest(self) -> None:
        """'>v1' must select v3, never v2."""
        match = resolve_max_satisfying(["1.0.0", "2.0.0", "3.0.0"], ">1.0.0")
        assert match.matched is True
        assert match.version == "3.0.0"

    def test_caret_range_stays_in_major(self) -> None:
        match = resolve_max_satisfying(["1.0.0", "1.1.0", "2.0.0"], "^1.0.0")
        assert match.version == "1.1.0"

    def test_tilde_range(self) -> None:
        match = resolve_max_satisfying(["1.2.0", "1.2.9", "1.3.0"], "~1.2.0")
        assert match.version == "1.2.9"

    def test_candidate_order_irrelevant(self) -> None:
        match = resolve_max_satisfying(["2.0.0", "1.1.0", "1.0.0"], "^1.0.0")
        assert match.version == "1.1.0"

    def test_no_match(self) -> None:
        match = resolve_max_satisfying(["1.0.0"], "^2.0.0")
        assert match.matched is False
        assert match.version is None

    def test_invalid_range_matches_nothing(self) -> None:
        assert resolve_max_satisfying(["1.0.0"], "garbage!").matched is False

    def test_empty_candidates(self) -> None:
        assert resolve_max_satisfying([], "*").matched is False


class TestVersionResolver:
    """Tests for resolving against a catalog resource."""

    @pytest.fixture
    def resource(self) -> Resource:
        return Resource(
            resource_id="b",
            resource_name="alice/b",
            resource_type="image",
            resource_versions=[
                ResourceVersionSummary(version="1.0.0", version_id="b1"),
                ResourceVersionSummary(version="1.1.0", version_id="b2"),
                ResourceVersionSummary(version="2.0.0", version_id="b3"),
            ],
        )

    def test_returns_summary_with_version_id(self, resource: Resource) -> None:
        summary = VersionResolver().resolve(resource, "^1.0.0")
        assert summary.version == "1.1.0"
        assert summary.version_id == "b2"

    def test_unsatisfiable_raises_resolution_error(self, resource: Resource) -> None:
        with pytest.raises(ResolutionError) as exc_info:
            VersionResolver().resolve(resource, "^3.0.0")
        assert exc_info.value.details["resource_id"] == "b"
        assert exc_info.value.details["version_range"] == "^3.0.0"


class TestOrdering:
    """Tests for comparisons and latest-version selection."""

    def test_is_greater(self) -> None:
        assert is_greater("2.0.0", "1.0.0")
        assert not is_greater("1.0.0", "1.0.0")
        assert not is_greater("1.0.0", "1.0.1")

    def test_semver_not_lexicographic(self) -> None:
        assert is_greater("1.10.0", "1.9.0")

    def test_latest_version(self) -> None:
        assert latest_version(["1.9.0", "1.10.0", "v1.2.0"]) == "1.10.0"

    def test_latest_version_empty(self) -> None:
        assert latest_version([]) is None
