"""
Index Builder: regenerate ``hymn_index.json`` from the hymn record files.

Every HymnInfo field is derived from its record, so a freshly built index
always passes the integrity check. Category and tag lookups list ids in
ascending order; lookup names appear in first-seen order (records are read
in id order).
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List

import pydantic
from loguru import logger

from .config import HYMNS_DIRNAME
from .exceptions import ValidationError
from .library import pydantic_messages, read_json
from .models import Hymn, HymnIndex, HymnInfo


def _load_hymn_file(path: Path) -> Hymn:
    raw = read_json(path, "Hymn record")
    try:
        return Hymn.model_validate(raw)
    except pydantic.ValidationError as exc:
        raise ValidationError(
            pydantic_messages(exc, prefix=f"{path.name}: "),
            message=f"Hymn record {path} is malformed",
        ) from exc


def build_index(
    data_dir: Path,
    version: str = "1.0.0",
    hymn_dir: str = HYMNS_DIRNAME,
) -> HymnIndex:
    """Scan ``data_dir/hymn_dir/*.json`` and return a matching index."""
    data_dir = Path(data_dir)
    hymn_paths = sorted((data_dir / hymn_dir).glob("*.json"))

    entries: List[HymnInfo] = []
    seen: Dict[int, str] = {}
    duplicates: List[str] = []

    for path in hymn_paths:
        hymn = _load_hymn_file(path)
        rel = path.relative_to(data_dir).as_posix()
        if hymn.id in seen:
            duplicates.append(f"Hymn {hymn.id}: defined in both {seen[hymn.id]} and {rel}")
            continue
        seen[hymn.id] = rel
        entries.append(HymnInfo.from_hymn(hymn, file=rel))

    if duplicates:
        raise ValidationError(duplicates, message="Duplicate hymn ids")

    entries.sort(key=lambda info: info.id)

    categories: Dict[str, List[int]] = {}
    tags: Dict[str, List[int]] = {}
    for info in entries:
        categories.setdefault(info.category.value, []).append(info.id)
        for tag in info.tags:
            ids = tags.setdefault(tag, [])
            if info.id not in ids:
                ids.append(info.id)

    index = HymnIndex(
        version=version,
        total_hymns=len(entries),
        last_updated=datetime.now(timezone.utc).isoformat(),
        hymns=entries,
        categories=categories,
        tags=tags,
    )
    logger.info(
        f"Hymn index built: {index.total_hymns} hymns, "
        f"{len(categories)} categories, {len(tags)} tags"
    )
    return index


def write_index(index: HymnIndex, path: Path) -> Path:
    """Write the index as UTF-8 JSON and return the path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(index.to_dict(), indent=2, ensure_ascii=False) + "\n",
        encoding="utf-8",
    )
    logger.info(f"Hymn index written → {path}")
    return path
