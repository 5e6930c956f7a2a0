"""
Data Models for Nyimbo Zetu

Hymn records, the denormalized hymn index, and the offline bundle handed to
the mobile client. Records and index documents are authored by hand (or by
``index_builder``) and loaded read-only; these models never write back.
"""

import re
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

class Category(str, Enum):
    """Closed set of hymn categories."""

    PRAISE = "praise"
    WORSHIP = "worship"
    THANKSGIVING = "thanksgiving"
    PRAYER = "prayer"
    SALVATION = "salvation"
    FAITH = "faith"
    CHRISTMAS = "christmas"
    EASTER = "easter"
    COMMUNION = "communion"
    BAPTISM = "baptism"
    WEDDING = "wedding"
    FUNERAL = "funeral"
    EVENING = "evening"
    GENERAL = "general"


CHORUS_AFTER_EACH_VERSE = "after_each_verse"
CHORUS_AT_END = "at_end"
_AFTER_VERSE_RE = re.compile(r"^after_verse_([1-9]\d*)$")


# ---------------------------------------------------------------------------
# Hymn record
# ---------------------------------------------------------------------------

class Verse(BaseModel):
    """One numbered verse. Numbers are usually sequential but need not be."""

    model_config = ConfigDict(extra="allow")

    number: int = Field(..., gt=0, strict=True, description="Verse number as printed")
    text: List[str] = Field(..., min_length=1, description="Lines of the verse")


class Chorus(BaseModel):
    """Refrain lines and where they are sung."""

    model_config = ConfigDict(extra="allow")

    text: List[str] = Field(default_factory=list, description="Lines of the chorus")
    position: str = Field(
        CHORUS_AFTER_EACH_VERSE,
        description="after_each_verse, after_verse_<N>, or at_end",
    )

    @field_validator("position")
    @classmethod
    def _check_position(cls, v: str) -> str:
        if v in (CHORUS_AFTER_EACH_VERSE, CHORUS_AT_END) or _AFTER_VERSE_RE.match(v):
            return v
        raise ValueError(f"invalid chorus position: {v!r}")

    def after_verse(self) -> Optional[int]:
        """Verse number for ``after_verse_<N>`` positions, else None."""
        m = _AFTER_VERSE_RE.match(self.position)
        return int(m.group(1)) if m else None


class Hymn(BaseModel):
    """A single hymn as stored in ``data/hymns/hymn_NNN.json``."""

    model_config = ConfigDict(extra="allow")

    id: int = Field(..., gt=0, strict=True, description="Unique hymn number")
    title: str = Field(..., min_length=1)
    subtitle: Optional[str] = None
    author: Optional[str] = None
    meter: Optional[str] = None
    category: Category
    verses: List[Verse] = Field(..., min_length=1)
    chorus: Optional[Chorus] = None
    tags: List[str] = Field(default_factory=list)
    scripture_references: List[str] = Field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def verse_count(self) -> int:
        return len(self.verses)

    @property
    def has_chorus(self) -> bool:
        return self.chorus is not None and len(self.chorus.text) > 0

    def lyrics(self) -> List[Dict[str, Any]]:
        """
        Lay the hymn out in singing order.

        Returns a list of ``{"label": str, "lines": [...]}`` sections with the
        chorus inserted according to its position directive.
        """
        chorus_section = (
            {"label": "Chorus", "lines": list(self.chorus.text)}
            if self.has_chorus else None
        )
        after = self.chorus.after_verse() if self.chorus else None

        sections: List[Dict[str, Any]] = []
        for verse in self.verses:
            sections.append({"label": f"Verse {verse.number}", "lines": list(verse.text)})
            if chorus_section is None:
                continue
            if self.chorus.position == CHORUS_AFTER_EACH_VERSE or after == verse.number:
                sections.append(dict(chorus_section))

        if chorus_section is not None and self.chorus.position == CHORUS_AT_END:
            sections.append(dict(chorus_section))
        return sections

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready dict containing only the fields present in the source."""
        data = self.model_dump(mode="json", exclude_unset=True)
        for key, value in (self.model_extra or {}).items():
            data.setdefault(key, value)
        return data


# ---------------------------------------------------------------------------
# Index
# ---------------------------------------------------------------------------

class HymnInfo(BaseModel):
    """Index entry mirroring derived fields of one hymn record."""

    model_config = ConfigDict(extra="allow")

    id: int = Field(..., gt=0, strict=True)
    title: str
    subtitle: Optional[str] = None
    category: Category
    file: str = Field(..., description="Record path relative to the data directory")
    tags: List[str] = Field(default_factory=list)
    has_chorus: bool = False
    verse_count: int = Field(0, ge=0)

    @classmethod
    def from_hymn(cls, hymn: Hymn, file: str) -> "HymnInfo":
        return cls(
            id=hymn.id,
            title=hymn.title,
            subtitle=hymn.subtitle,
            category=hymn.category,
            file=file,
            tags=list(hymn.tags),
            has_chorus=hymn.has_chorus,
            verse_count=hymn.verse_count,
        )


class HymnIndex(BaseModel):
    """Denormalized summary of every hymn plus category/tag reverse lookups."""

    model_config = ConfigDict(extra="allow")

    version: str
    total_hymns: int = Field(..., ge=0)
    last_updated: str
    hymns: List[HymnInfo] = Field(default_factory=list)
    categories: Dict[str, List[int]] = Field(default_factory=dict)
    tags: Dict[str, List[int]] = Field(default_factory=dict)

    _by_id: Dict[int, HymnInfo] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        # first entry wins; duplicates are reported by check_index_consistency
        for info in self.hymns:
            self._by_id.setdefault(info.id, info)

    def get(self, hymn_id: int) -> Optional[HymnInfo]:
        return self._by_id.get(hymn_id)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True)


# ---------------------------------------------------------------------------
# Bundle
# ---------------------------------------------------------------------------

class Bundle(BaseModel):
    """Offline dataset: the index, every record, and the schema document."""

    model_config = ConfigDict(populate_by_name=True)

    version: str
    last_updated: str
    total_hymns: int
    index: HymnIndex
    hymns: Dict[str, Hymn] = Field(default_factory=dict, description="Keyed by str(id)")
    schema_: Dict[str, Any] = Field(default_factory=dict, alias="schema")

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump(mode="json", by_alias=True, exclude_unset=True, exclude={"hymns"})
        data["hymns"] = {key: hymn.to_dict() for key, hymn in self.hymns.items()}
        return data


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

class ValidationResult(BaseModel):
    """Outcome of a structural check on one record."""

    is_valid: bool
    errors: List[str] = Field(default_factory=list)
