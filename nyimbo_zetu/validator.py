"""
Hymn validation.

Two passes:

* ``validate_hymn``: structural checks on a single record. Works on the raw
  JSON mapping so that records too broken to parse into :class:`Hymn` can
  still be reported on.
* ``check_integrity``: cross-checks every index entry against the record it
  points to. The index is denormalized, so this is the check that catches a
  record edited without regenerating the index.

Both collect messages into a list instead of raising on the first defect.
"""

from __future__ import annotations

from collections import Counter
from typing import Any, List, Mapping, Union

from loguru import logger

from .exceptions import NotFoundError, ValidationError
from .library import HymnLibrary
from .models import Hymn, HymnIndex, ValidationResult


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def has_nonempty_chorus(record: Mapping[str, Any]) -> bool:
    """True when the record has a chorus with at least one line of text."""
    chorus = record.get("chorus")
    if not isinstance(chorus, Mapping):
        return False
    text = chorus.get("text")
    return isinstance(text, list) and len(text) > 0


# ---------------------------------------------------------------------------
# Structural validation
# ---------------------------------------------------------------------------

def validate_hymn(record: Union[Mapping[str, Any], Hymn]) -> ValidationResult:
    """
    Check the shape of one hymn record.

    Verse errors are numbered by position in the ``verses`` list (1-based),
    not by the verse's own ``number`` field.
    """
    if isinstance(record, Hymn):
        record = record.model_dump(mode="json")
    elif not isinstance(record, Mapping):
        record = {}

    errors: List[str] = []

    if not _is_positive_int(record.get("id")):
        errors.append("Missing or invalid id")

    title = record.get("title")
    if not isinstance(title, str) or not title:
        errors.append("Missing or invalid title")

    verses = record.get("verses")
    if not isinstance(verses, list) or len(verses) == 0:
        errors.append("Missing or invalid verses")

    if isinstance(verses, list):
        for position, verse in enumerate(verses, start=1):
            if not isinstance(verse, Mapping):
                verse = {}
            if not _is_positive_int(verse.get("number")):
                errors.append(f"Verse {position}: missing or invalid number")
            text = verse.get("text")
            if not isinstance(text, list) or len(text) == 0:
                errors.append(f"Verse {position}: missing or invalid text")

    return ValidationResult(is_valid=not errors, errors=errors)


# ---------------------------------------------------------------------------
# Index <-> record integrity
# ---------------------------------------------------------------------------

def check_integrity(library: HymnLibrary) -> List[str]:
    """
    Compare every index entry with its record file.

    Checks id, title, verse count and chorus presence for the full index,
    not a sample. Returns one message per mismatch.
    """
    index = library.load_index()
    errors: List[str] = []

    for info in index.hymns:
        try:
            record = library.read_record(info)
        except NotFoundError as exc:
            errors.append(f"Hymn {info.id}: referenced in index but not found ({exc})")
            continue
        if not isinstance(record, Mapping):
            errors.append(f"Hymn {info.id}: record is not a JSON object")
            continue

        if record.get("id") != info.id:
            errors.append(f"Hymn {info.id}: id mismatch (record has {record.get('id')!r})")

        if record.get("title") != info.title:
            errors.append(
                f"Hymn {info.id}: title mismatch "
                f"(index {info.title!r} vs record {record.get('title')!r})"
            )

        verses = record.get("verses")
        verse_count = len(verses) if isinstance(verses, list) else 0
        if verse_count != info.verse_count:
            errors.append(
                f"Hymn {info.id}: verse count mismatch "
                f"(index {info.verse_count} vs record {verse_count})"
            )

        has_chorus = has_nonempty_chorus(record)
        if has_chorus != info.has_chorus:
            errors.append(
                f"Hymn {info.id}: chorus flag mismatch "
                f"(index {info.has_chorus} vs record {has_chorus})"
            )

    if errors:
        logger.warning(f"Integrity check found {len(errors)} problem(s)")
    else:
        logger.info(f"Integrity check passed for {len(index.hymns)} hymns")
    return errors


def check_index_consistency(index: HymnIndex) -> List[str]:
    """
    Internal consistency of the index document itself.

    Covers duplicate ids, the ``total_hymns`` count, and agreement between
    each entry's category/tags and the reverse lookup maps.
    """
    errors: List[str] = []
    ids = [info.id for info in index.hymns]
    known = set(ids)

    for hymn_id, count in Counter(ids).items():
        if count > 1:
            errors.append(f"Hymn {hymn_id}: listed {count} times in index")

    if index.total_hymns != len(index.hymns):
        errors.append(
            f"Index total_hymns is {index.total_hymns} but {len(index.hymns)} hymns are listed"
        )

    for kind, mapping in (("category", index.categories), ("tag", index.tags)):
        for name, hymn_ids in mapping.items():
            for hymn_id in hymn_ids:
                if hymn_id not in known:
                    errors.append(f"Hymn {hymn_id}: {kind} {name!r} references unknown hymn")

    for info in index.hymns:
        category = info.category.value
        listed = index.categories.get(category, [])
        if info.id not in listed:
            errors.append(f"Hymn {info.id}: missing from category {category!r} lookup")
        for tag in info.tags:
            if info.id not in index.tags.get(tag, []):
                errors.append(f"Hymn {info.id}: missing from tag {tag!r} lookup")

    by_id = {info.id: info for info in index.hymns}
    for name, hymn_ids in index.categories.items():
        for hymn_id in hymn_ids:
            info = by_id.get(hymn_id)
            if info is not None and info.category.value != name:
                errors.append(
                    f"Hymn {hymn_id}: listed under category {name!r} "
                    f"but entry says {info.category.value!r}"
                )
    for name, hymn_ids in index.tags.items():
        for hymn_id in hymn_ids:
            info = by_id.get(hymn_id)
            if info is not None and name not in info.tags:
                errors.append(f"Hymn {hymn_id}: listed under tag {name!r} but entry lacks it")

    return errors


def assert_integrity(library: HymnLibrary) -> None:
    """Run both index checks and raise ValidationError listing every defect."""
    errors = check_index_consistency(library.load_index())
    errors.extend(check_integrity(library))
    if errors:
        raise ValidationError(errors, message=f"Hymn data failed integrity check ({len(errors)} errors)")
