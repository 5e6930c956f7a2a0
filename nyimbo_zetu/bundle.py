"""
Offline bundle generation for the mobile app.

The bundle is a single JSON document holding the index, every hymn record
keyed by the decimal string of its id, and the schema. It is a derived
artifact: regenerate it whenever a record or the index changes.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict

from loguru import logger

from .exceptions import ValidationError
from .library import HymnLibrary
from .models import Bundle, Hymn


def generate_bundle(library: HymnLibrary) -> Bundle:
    """
    Assemble the offline bundle.

    Every record listed in the index must load; the first missing file raises
    NotFoundError. A hymn count that disagrees with ``total_hymns`` raises
    ValidationError.
    """
    index = library.load_index()

    hymns: Dict[str, Hymn] = {}
    for info in index.hymns:
        hymns[str(info.id)] = library.load_hymn(info.id)

    if len(hymns) != index.total_hymns:
        raise ValidationError(
            [f"Bundle has {len(hymns)} hymns but index declares total_hymns={index.total_hymns}"],
            message="Bundle hymn count mismatch",
        )

    bundle = Bundle(
        version=index.version,
        last_updated=index.last_updated,
        total_hymns=index.total_hymns,
        index=index,
        hymns=hymns,
        schema=library.load_schema(),
    )
    logger.info(f"Offline bundle v{bundle.version} generated: {len(hymns)} hymns")
    return bundle


def bundle_json(bundle: Bundle) -> str:
    return json.dumps(bundle.to_dict(), indent=2, ensure_ascii=False)


def write_bundle(bundle: Bundle, path: Path) -> Path:
    """Write the bundle as UTF-8 JSON and return the path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(bundle_json(bundle) + "\n", encoding="utf-8")
    logger.info(f"Offline bundle written → {path}")
    return path
