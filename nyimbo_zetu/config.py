"""
Runtime configuration for the hymn data tools.

Paths default to the layout of this repository and can be overridden with
environment variables:

    NYIMBO_DATA_DIR     directory holding ``indexes/`` and ``hymns/``
    NYIMBO_SCHEMA_PATH  JSON Schema embedded into offline bundles
    NYIMBO_LOG_LEVEL    loguru level for the stderr sink (default INFO)
"""

import os
import sys
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, Field

_REPO_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_DATA_DIR = _REPO_ROOT / "data"
DEFAULT_SCHEMA_PATH = _REPO_ROOT / "schema.json"

INDEX_RELPATH = Path("indexes") / "hymn_index.json"
HYMNS_DIRNAME = "hymns"


class Settings(BaseModel):
    """Filesystem locations and log level."""

    data_dir: Path = Field(DEFAULT_DATA_DIR, description="Root of the hymn data tree")
    schema_path: Path = Field(DEFAULT_SCHEMA_PATH, description="JSON Schema document")
    log_level: str = Field("INFO", description="loguru level name")

    @property
    def index_path(self) -> Path:
        return self.data_dir / INDEX_RELPATH

    @classmethod
    def from_env(cls, default_log_level: str = "INFO") -> "Settings":
        """Build settings from NYIMBO_* environment variables."""
        data_dir = os.environ.get("NYIMBO_DATA_DIR")
        schema_path = os.environ.get("NYIMBO_SCHEMA_PATH")
        return cls(
            data_dir=Path(data_dir) if data_dir else DEFAULT_DATA_DIR,
            schema_path=Path(schema_path) if schema_path else DEFAULT_SCHEMA_PATH,
            log_level=os.environ.get("NYIMBO_LOG_LEVEL", default_log_level).upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    """Replace loguru's default sink with a single stderr sink at ``level``."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper())
