"""Shared fixtures: a small hymn data tree written into tmp_path."""

import json
import sys
from pathlib import Path

import pytest
from loguru import logger

from nyimbo_zetu.library import HymnLibrary


def make_hymn(id, title, category="praise", verses=2, chorus=True, tags=None,
              subtitle=None, chorus_position="after_each_verse"):
    record = {
        "id": id,
        "title": title,
        "category": category,
        "verses": [
            {"number": n, "text": [f"{title} mstari {n}a", f"{title} mstari {n}b"]}
            for n in range(1, verses + 1)
        ],
        "tags": tags if tags is not None else ["worship"],
        "scripture_references": [],
    }
    if subtitle is not None:
        record["subtitle"] = subtitle
    if chorus:
        record["chorus"] = {"text": ["Haleluya, Amina"], "position": chorus_position}
    return record


def make_index(records, version="1.0.0"):
    """Index whose entries mirror ``records`` exactly."""
    categories = {}
    tags = {}
    hymns = []
    for r in records:
        hymns.append({
            "id": r["id"],
            "title": r["title"],
            "subtitle": r.get("subtitle"),
            "category": r["category"],
            "file": f"hymns/hymn_{r['id']:03d}.json",
            "tags": list(r.get("tags", [])),
            "has_chorus": bool(r.get("chorus", {}).get("text")),
            "verse_count": len(r["verses"]),
        })
        categories.setdefault(r["category"], []).append(r["id"])
        for tag in r.get("tags", []):
            tags.setdefault(tag, []).append(r["id"])
    return {
        "version": version,
        "total_hymns": len(records),
        "last_updated": "2024-03-02T12:30:00Z",
        "hymns": hymns,
        "categories": categories,
        "tags": tags,
    }


def write_dataset(root: Path, records, index=None, schema=None) -> Path:
    """Write records, index and schema under ``root``; return the data dir."""
    data_dir = root / "data"
    (data_dir / "hymns").mkdir(parents=True, exist_ok=True)
    (data_dir / "indexes").mkdir(parents=True, exist_ok=True)
    for r in records:
        (data_dir / "hymns" / f"hymn_{r['id']:03d}.json").write_text(
            json.dumps(r, ensure_ascii=False), encoding="utf-8"
        )
    if index is None:
        index = make_index(records)
    (data_dir / "indexes" / "hymn_index.json").write_text(json.dumps(index), encoding="utf-8")
    if schema is None:
        schema = {"title": "Nyimbo Zetu Hymn", "type": "object"}
    (root / "schema.json").write_text(json.dumps(schema), encoding="utf-8")
    return data_dir


@pytest.fixture(autouse=True)
def _restore_logging():
    """Commands reconfigure loguru; put a late-binding stderr sink back afterwards."""
    yield
    logger.remove()
    logger.add(lambda message: sys.stderr.write(message), level="DEBUG")


@pytest.fixture
def sample_records():
    return [
        make_hymn(1, "Mungu Ni Mwema", category="praise", tags=["praise", "worship"],
                  subtitle="Wimbo wa Sifa"),
        make_hymn(2, "Bwana Yesu Asifiwe", category="thanksgiving", verses=3, chorus=False,
                  tags=["worship", "thanksgiving"], subtitle="Wimbo wa Shukrani"),
        make_hymn(3, "Usiku Umeingia", category="evening", tags=["prayer"],
                  subtitle="Sala ya Jioni kwa Mungu", chorus_position="at_end"),
        make_hymn(4, "Tumsifu Bwana", category="praise", verses=4, tags=["praise"]),
    ]


@pytest.fixture
def data_dir(tmp_path, sample_records):
    return write_dataset(tmp_path, sample_records)


@pytest.fixture
def library(tmp_path, data_dir):
    return HymnLibrary(data_dir=data_dir, schema_path=tmp_path / "schema.json")
