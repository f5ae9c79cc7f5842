"""Tests for reference resolution against resource sets."""

from __future__ import annotations

import os

import pytest

from bundle2docx.model.options import MatchPolicy
from bundle2docx.resolve.matcher import (
    clean_reference,
    expected_path,
    is_external_reference,
    resolve_reference,
)
from bundle2docx.types import ResourceSet

pytestmark = pytest.mark.skipif(os.name == "nt", reason="POSIX path fixtures")


@pytest.fixture
def resources() -> ResourceSet:
    return ResourceSet.from_paths(
        [
            "/base/a.png",
            "/base/img/Photo.JPG",
            "/base/css/site.css",
            "/base/my image.png",
        ]
    )


class TestExactPolicy:
    def test_resolves_relative_to_base(self, resources: ResourceSet) -> None:
        binding = resolve_reference("a.png", resources, "/base", MatchPolicy.EXACT)
        assert binding.resolved
        assert str(binding.resource.path) == "/base/a.png"
        assert binding.expected_path == "/base/a.png"

    def test_case_insensitive(self, resources: ResourceSet) -> None:
        binding = resolve_reference("IMG/photo.jpg", resources, "/base", MatchPolicy.EXACT)
        assert binding.resolved
        assert str(binding.resource.path) == "/base/img/Photo.JPG"

    def test_dot_segments_in_reference(self, resources: ResourceSet) -> None:
        binding = resolve_reference("./img/../css/site.css", resources, "/base", MatchPolicy.EXACT)
        assert binding.resolved

    def test_not_found_is_a_value(self, resources: ResourceSet) -> None:
        binding = resolve_reference("missing.png", resources, "/base", MatchPolicy.EXACT)
        assert not binding.resolved
        assert binding.resource is None
        assert binding.expected_path == "/base/missing.png"

    def test_exact_does_not_match_bare_filename_in_subdir(self, resources: ResourceSet) -> None:
        binding = resolve_reference("Photo.JPG", resources, "/base", MatchPolicy.EXACT)
        assert not binding.resolved

    def test_percent_encoding_and_query_are_ignored(self, resources: ResourceSet) -> None:
        binding = resolve_reference("my%20image.png?v=2#top", resources, "/base", MatchPolicy.EXACT)
        assert binding.resolved
        assert str(binding.resource.path) == "/base/my image.png"

    def test_first_match_in_set_order_wins(self) -> None:
        dupes = ResourceSet.from_paths(["/base/A.png", "/base/a.png"])
        binding = resolve_reference("a.png", dupes, "/base", MatchPolicy.EXACT)
        assert str(binding.resource.path) == "/base/A.png"


class TestSuffixPolicy:
    def test_matches_bare_filename_anywhere(self, resources: ResourceSet) -> None:
        binding = resolve_reference("photo.jpg", resources, "/ignored", MatchPolicy.SUFFIX)
        assert binding.resolved
        assert str(binding.resource.path) == "/base/img/Photo.JPG"

    def test_matches_partial_path(self, resources: ResourceSet) -> None:
        binding = resolve_reference("css/site.css", resources, "", MatchPolicy.SUFFIX)
        assert binding.resolved

    def test_not_found(self, resources: ResourceSet) -> None:
        binding = resolve_reference("nope.gif", resources, "/base", MatchPolicy.SUFFIX)
        assert not binding.resolved

    def test_empty_reference_never_matches(self, resources: ResourceSet) -> None:
        binding = resolve_reference("#anchor", resources, "/base", MatchPolicy.SUFFIX)
        assert not binding.resolved


class TestExternalReferences:
    @pytest.mark.parametrize(
        "ref",
        ["http://example.com/a.png", "https://example.com/a.png", "data:image/png;base64,AAA", "//cdn/a.png"],
    )
    def test_external_references_never_resolve(self, resources: ResourceSet, ref: str) -> None:
        assert is_external_reference(ref)
        for policy in MatchPolicy:
            assert not resolve_reference(ref, resources, "/base", policy).resolved

    def test_local_references_are_not_external(self) -> None:
        assert not is_external_reference("img/a.png")
        assert not is_external_reference("C:/img/a.png")


def test_clean_reference() -> None:
    assert clean_reference(" img/a%20b.png?x=1#frag ") == "img/a b.png"


def test_expected_path_joins_base() -> None:
    assert expected_path("sub/../a.png", "/base") == "/base/a.png"
