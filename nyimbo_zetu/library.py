"""
Hymn Library: read-only query facade over the hymn index and record files.

The index (``data/indexes/hymn_index.json``) and the schema document are read
once and memoised for the lifetime of the instance; the files are not expected
to change while a process runs, so there is no invalidation. Hymn records are
read from disk on every request.

Usage:
    library = HymnLibrary()
    hymn    = library.load_hymn(1)
    praise  = library.get_hymns_by_category("praise")
    found   = library.search_hymns_by_title("mungu")
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import pydantic
from loguru import logger

from .config import DEFAULT_DATA_DIR, DEFAULT_SCHEMA_PATH, INDEX_RELPATH, Settings
from .exceptions import NotFoundError, ValidationError
from .models import Hymn, HymnIndex, HymnInfo


# ---------------------------------------------------------------------------
# JSON helpers
# ---------------------------------------------------------------------------

def read_json(path: Path, what: str) -> Any:
    """Parse a JSON file, raising NotFoundError if it is absent or malformed."""
    try:
        with path.open("r", encoding="utf-8") as fh:
            return json.load(fh)
    except FileNotFoundError as exc:
        raise NotFoundError(f"{what} not found at {path}") from exc
    except json.JSONDecodeError as exc:
        raise NotFoundError(f"{what} at {path} is not valid JSON: {exc}") from exc


def pydantic_messages(exc: pydantic.ValidationError, prefix: str = "") -> list[str]:
    """Flatten a pydantic error into ``loc: message`` strings."""
    messages = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        text = f"{loc}: {err.get('msg', 'invalid')}" if loc else err.get("msg", "invalid")
        messages.append(f"{prefix}{text}")
    return messages


# ---------------------------------------------------------------------------
# Library
# ---------------------------------------------------------------------------

class HymnLibrary:
    """
    Lookups by id, category, tag and title over the hymn index.

    Every query resolves ids through the index and then loads the referenced
    record files; a missing record is always fatal to the query.
    """

    def __init__(
        self,
        data_dir: Path = DEFAULT_DATA_DIR,
        schema_path: Path = DEFAULT_SCHEMA_PATH,
    ) -> None:
        self.data_dir = Path(data_dir)
        self.schema_path = Path(schema_path)
        self._index: Optional[HymnIndex] = None
        self._schema: Optional[dict] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "HymnLibrary":
        return cls(data_dir=settings.data_dir, schema_path=settings.schema_path)

    @property
    def index_path(self) -> Path:
        return self.data_dir / INDEX_RELPATH

    # ------------------------------------------------------------------
    # Cached documents
    # ------------------------------------------------------------------

    def load_index(self) -> HymnIndex:
        """Load the hymn index. Cached after the first call."""
        if self._index is not None:
            return self._index

        raw = read_json(self.index_path, "Hymn index")
        try:
            index = HymnIndex.model_validate(raw)
        except pydantic.ValidationError as exc:
            raise ValidationError(
                pydantic_messages(exc, prefix="index: "),
                message=f"Hymn index at {self.index_path} is malformed",
            ) from exc

        self._index = index
        logger.info(
            f"Hymn index v{index.version} loaded: {len(index.hymns)} hymns, "
            f"{len(index.categories)} categories, {len(index.tags)} tags"
        )
        return index

    def load_schema(self) -> dict:
        """Load the JSON Schema document. Cached after the first call."""
        if self._schema is None:
            self._schema = read_json(self.schema_path, "Hymn schema")
            logger.debug(f"Hymn schema loaded from {self.schema_path}")
        return self._schema

    # ------------------------------------------------------------------
    # Single hymn
    # ------------------------------------------------------------------

    def get_info(self, hymn_id: int) -> HymnInfo:
        """Index entry for ``hymn_id``."""
        info = self.load_index().get(hymn_id)
        if info is None:
            raise NotFoundError(f"Hymn with ID {hymn_id} not found")
        return info

    def record_path(self, info: HymnInfo) -> Path:
        return self.data_dir / info.file

    def read_record(self, info: HymnInfo) -> Any:
        """Raw JSON of the file an index entry points to, exactly as stored."""
        path = self.record_path(info)
        try:
            with path.open("r", encoding="utf-8") as fh:
                record = json.load(fh)
        except FileNotFoundError as exc:
            raise NotFoundError(
                f"Hymn with ID {info.id} referenced in index but file {info.file} is missing"
            ) from exc
        except json.JSONDecodeError as exc:
            raise NotFoundError(
                f"Hymn with ID {info.id}: file {info.file} is not valid JSON: {exc}"
            ) from exc
        logger.debug(f"Loaded hymn {info.id} from {path}")
        return record

    def load_record(self, hymn_id: int) -> Any:
        """Raw JSON of a hymn record. Usually a dict, but not checked here."""
        return self.read_record(self.get_info(hymn_id))

    def load_hymn(self, hymn_id: int) -> Hymn:
        """Load and parse a hymn record."""
        record = self.load_record(hymn_id)
        try:
            return Hymn.model_validate(record)
        except pydantic.ValidationError as exc:
            raise ValidationError(
                pydantic_messages(exc, prefix=f"Hymn {hymn_id}: "),
                message=f"Hymn with ID {hymn_id} is malformed",
            ) from exc

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_hymns(self) -> list[HymnInfo]:
        """Every index entry, in index order."""
        return list(self.load_index().hymns)

    def get_hymns_by_category(self, category: str) -> list[Hymn]:
        """Hymns listed under ``category``. Unknown categories yield []."""
        hymn_ids = self.load_index().categories.get(category, [])
        return [self.load_hymn(hymn_id) for hymn_id in hymn_ids]

    def get_hymns_by_tag(self, tag: str) -> list[Hymn]:
        """Hymns listed under ``tag``. Unknown tags yield []."""
        hymn_ids = self.load_index().tags.get(tag, [])
        return [self.load_hymn(hymn_id) for hymn_id in hymn_ids]

    def search_index_by_title(self, term: str) -> list[HymnInfo]:
        """
        Case-insensitive substring match on index title and subtitle.

        Matches metadata only, never verse text. An empty term matches
        nothing.
        """
        q = term.lower()
        if not q:
            return []
        return [
            info for info in self.load_index().hymns
            if q in info.title.lower()
            or (info.subtitle is not None and q in info.subtitle.lower())
        ]

    def search_hymns_by_title(self, term: str) -> list[Hymn]:
        """Full records for :meth:`search_index_by_title` matches."""
        return [self.load_hymn(info.id) for info in self.search_index_by_title(term)]

    def get_categories(self) -> list[str]:
        return list(self.load_index().categories)

    def get_tags(self) -> list[str]:
        return list(self.load_index().tags)

    def __repr__(self) -> str:
        state = "loaded" if self._index is not None else "not loaded"
        return f"HymnLibrary(data_dir={str(self.data_dir)!r}, index {state})"
