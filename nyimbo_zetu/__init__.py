"""Swahili hymn data for Nyimbo Zetu: queries, validation and offline bundles."""

from .bundle import generate_bundle, write_bundle
from .exceptions import NotFoundError, NyimboError, ValidationError
from .library import HymnLibrary
from .models import Bundle, Category, Chorus, Hymn, HymnIndex, HymnInfo, Verse
from .validator import assert_integrity, check_index_consistency, check_integrity, validate_hymn

__all__ = [
    "Bundle",
    "Category",
    "Chorus",
    "Hymn",
    "HymnIndex",
    "HymnInfo",
    "HymnLibrary",
    "NotFoundError",
    "NyimboError",
    "ValidationError",
    "Verse",
    "assert_integrity",
    "check_index_consistency",
    "check_integrity",
    "generate_bundle",
    "validate_hymn",
    "write_bundle",
]
