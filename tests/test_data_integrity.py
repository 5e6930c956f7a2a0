"""Checks over the hymn data shipped in this repository."""

from pathlib import Path

import pytest

from nyimbo_zetu.bundle import generate_bundle
from nyimbo_zetu.library import HymnLibrary
from nyimbo_zetu.validator import check_index_consistency, check_integrity, validate_hymn

REPO_ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture(scope="module")
def repo_library():
    return HymnLibrary(data_dir=REPO_ROOT / "data", schema_path=REPO_ROOT / "schema.json")


class TestShippedData:
    def test_schema_loads(self, repo_library):
        assert repo_library.load_schema()["title"]

    def test_index_not_empty(self, repo_library):
        assert repo_library.load_index().hymns

    def test_every_record_is_valid(self, repo_library):
        for info in repo_library.list_hymns():
            result = validate_hymn(repo_library.load_record(info.id))
            assert result.is_valid, f"hymn {info.id}: {result.errors}"

    def test_every_record_matches_index(self, repo_library):
        assert check_integrity(repo_library) == []

    def test_index_is_consistent(self, repo_library):
        assert check_index_consistency(repo_library.load_index()) == []

    def test_praise_and_worship_present(self, repo_library):
        assert repo_library.get_hymns_by_category("praise")
        assert repo_library.get_hymns_by_tag("worship")
        assert repo_library.search_hymns_by_title("Mungu")

    def test_bundle_complete(self, repo_library):
        bundle = generate_bundle(repo_library)
        assert len(bundle.hymns) == bundle.total_hymns
