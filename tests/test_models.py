"""Tests for the hymn, index and bundle models."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from nyimbo_zetu.models import Category, Chorus, Hymn, HymnInfo

from conftest import make_hymn


class TestChorus:
    @pytest.mark.parametrize("position", ["after_each_verse", "at_end", "after_verse_2"])
    def test_valid_positions(self, position):
        assert Chorus(text=["Amina"], position=position).position == position

    @pytest.mark.parametrize("position", ["before_verse_1", "after_verse_0", "after_verse_", ""])
    def test_invalid_positions(self, position):
        with pytest.raises(PydanticValidationError):
            Chorus(text=["Amina"], position=position)

    def test_default_position(self):
        assert Chorus(text=["Amina"]).position == "after_each_verse"

    def test_after_verse_number(self):
        assert Chorus(text=["Amina"], position="after_verse_3").after_verse() == 3
        assert Chorus(text=["Amina"], position="at_end").after_verse() is None


class TestHymn:
    def test_derived_fields(self):
        hymn = Hymn.model_validate(make_hymn(1, "Mungu Ni Mwema", verses=3))
        assert hymn.verse_count == 3
        assert hymn.has_chorus
        assert hymn.category is Category.PRAISE

    def test_empty_chorus_is_not_a_chorus(self):
        record = make_hymn(1, "X", chorus=False)
        record["chorus"] = {"text": []}
        assert not Hymn.model_validate(record).has_chorus

    def test_unknown_category_rejected(self):
        record = make_hymn(1, "X")
        record["category"] = "dance"
        with pytest.raises(PydanticValidationError):
            Hymn.model_validate(record)

    def test_to_dict_preserves_source_fields(self):
        record = make_hymn(1, "X")
        record["language"] = "sw"
        out = Hymn.model_validate(record).to_dict()
        assert out == record

    def test_verse_numbers_need_not_be_sequential(self):
        record = make_hymn(1, "X", verses=2)
        record["verses"][1]["number"] = 1
        assert Hymn.model_validate(record).verse_count == 2


class TestLyrics:
    def _labels(self, hymn):
        return [s["label"] for s in hymn.lyrics()]

    def test_chorus_after_each_verse(self):
        hymn = Hymn.model_validate(make_hymn(1, "X", verses=2))
        assert self._labels(hymn) == ["Verse 1", "Chorus", "Verse 2", "Chorus"]

    def test_chorus_at_end(self):
        hymn = Hymn.model_validate(make_hymn(1, "X", verses=2, chorus_position="at_end"))
        assert self._labels(hymn) == ["Verse 1", "Verse 2", "Chorus"]

    def test_chorus_after_specific_verse(self):
        hymn = Hymn.model_validate(make_hymn(1, "X", verses=3, chorus_position="after_verse_2"))
        assert self._labels(hymn) == ["Verse 1", "Verse 2", "Chorus", "Verse 3"]

    def test_no_chorus(self):
        hymn = Hymn.model_validate(make_hymn(1, "X", verses=2, chorus=False))
        assert self._labels(hymn) == ["Verse 1", "Verse 2"]

    def test_lines_preserved(self):
        hymn = Hymn.model_validate(make_hymn(1, "X", verses=1))
        assert hymn.lyrics()[0]["lines"] == ["X mstari 1a", "X mstari 1b"]


class TestHymnInfo:
    def test_from_hymn_mirrors_record(self):
        hymn = Hymn.model_validate(
            make_hymn(5, "Tumsifu", category="worship", verses=4, chorus=False,
                      tags=["worship", "praise"], subtitle="Sifa")
        )
        info = HymnInfo.from_hymn(hymn, file="hymns/hymn_005.json")
        assert info.id == 5
        assert info.title == "Tumsifu"
        assert info.subtitle == "Sifa"
        assert info.category is Category.WORSHIP
        assert info.tags == ["worship", "praise"]
        assert info.verse_count == 4
        assert info.has_chorus is False
        assert info.file == "hymns/hymn_005.json"


class TestStrictRecords:
    def test_string_verse_number_rejected(self):
        record = make_hymn(1, "X")
        record["verses"][0]["number"] = "1"
        with pytest.raises(PydanticValidationError):
            Hymn.model_validate(record)

    def test_string_id_rejected(self):
        record = make_hymn(1, "X")
        record["id"] = "1"
        with pytest.raises(PydanticValidationError):
            Hymn.model_validate(record)

    def test_verses_required(self):
        record = make_hymn(1, "X")
        del record["verses"]
        with pytest.raises(PydanticValidationError):
            Hymn.model_validate(record)
        record["verses"] = []
        with pytest.raises(PydanticValidationError):
            Hymn.model_validate(record)

    def test_nested_extra_keys_preserved(self):
        record = make_hymn(1, "X")
        record["verses"][1]["language"] = "sw"
        record["chorus"]["repeat"] = 2
        assert Hymn.model_validate(record).to_dict() == record
