"""
FastMCP Server for hymn lookups

Exposes the read-only hymn library as MCP tools so an assistant can find
hymns by number, category, tag or title and run the data checks.

To connect to Claude Desktop (stdio), add to claude_desktop_config.json:
{
  "mcpServers": {
    "nyimbo-zetu": {
      "command": "nyimbo-mcp",
      "env": {"NYIMBO_DATA_DIR": "/path/to/data"}
    }
  }
}

To run over HTTP (SSE):
  nyimbo-mcp --transport sse [--host 127.0.0.1] [--port 8000]
"""

import signal
import sys
from typing import Any, Dict, List, Optional

from fastmcp import FastMCP
from loguru import logger

from .config import Settings, configure_logging
from .exceptions import NyimboError, ValidationError
from .library import HymnLibrary
from .models import Hymn
from .validator import assert_integrity
from .validator import validate_hymn as _validate_record

# ---------------------------------------------------------------------------
# Global state
# ---------------------------------------------------------------------------

mcp = FastMCP("Nyimbo Zetu")

library: Optional[HymnLibrary] = None


def _ensure_initialized() -> HymnLibrary:
    """Lazy-initialize the library on first tool call."""
    global library
    if library is None:
        settings = Settings.from_env()
        library = HymnLibrary.from_settings(settings)
        index = library.load_index()
        logger.info(f"MCP server ready with {index.total_hymns} hymns from {settings.data_dir}")
    return library


def _error(exc: NyimboError) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"error": str(exc)}
    if isinstance(exc, ValidationError):
        payload["errors"] = exc.errors
    return payload


def _summary(hymn: Hymn) -> Dict[str, Any]:
    return {
        "id": hymn.id,
        "title": hymn.title,
        "subtitle": hymn.subtitle,
        "category": hymn.category.value,
        "tags": hymn.tags,
        "verse_count": hymn.verse_count,
        "has_chorus": hymn.has_chorus,
    }


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------

@mcp.tool()
async def list_hymns() -> List[Dict[str, Any]]:
    """List every hymn in the index: id, title, category, verse count."""
    try:
        lib = _ensure_initialized()
        return [info.model_dump(mode="json") for info in lib.list_hymns()]
    except NyimboError as exc:
        return [_error(exc)]


@mcp.tool()
async def get_hymn(hymn_id: int, lyrics: bool = True) -> Dict[str, Any]:
    """
    Fetch one hymn by number.

    With ``lyrics`` (default) the verses and chorus are returned in singing
    order; otherwise the raw record is returned.
    """
    try:
        lib = _ensure_initialized()
        hymn = lib.load_hymn(hymn_id)
    except NyimboError as exc:
        return _error(exc)
    if not lyrics:
        return hymn.to_dict()
    result = _summary(hymn)
    result["sections"] = hymn.lyrics()
    return result


@mcp.tool()
async def search_hymns(term: str) -> List[Dict[str, Any]]:
    """Case-insensitive search of hymn titles and subtitles (not verse text)."""
    try:
        return [_summary(h) for h in _ensure_initialized().search_hymns_by_title(term)]
    except NyimboError as exc:
        return [_error(exc)]


@mcp.tool()
async def hymns_by_category(category: str) -> List[Dict[str, Any]]:
    """Hymns in a category such as praise, worship, or funeral."""
    try:
        return [_summary(h) for h in _ensure_initialized().get_hymns_by_category(category)]
    except NyimboError as exc:
        return [_error(exc)]


@mcp.tool()
async def hymns_by_tag(tag: str) -> List[Dict[str, Any]]:
    """Hymns carrying a tag."""
    try:
        return [_summary(h) for h in _ensure_initialized().get_hymns_by_tag(tag)]
    except NyimboError as exc:
        return [_error(exc)]


@mcp.tool()
async def validate_hymn(hymn_id: int) -> Dict[str, Any]:
    """Structural validation of one hymn record."""
    try:
        record = _ensure_initialized().load_record(hymn_id)
    except NyimboError as exc:
        return _error(exc)
    return _validate_record(record).model_dump()


@mcp.tool()
async def check_integrity() -> Dict[str, Any]:
    """Cross-check every index entry against its hymn record."""
    try:
        lib = _ensure_initialized()
        assert_integrity(lib)
    except ValidationError as exc:
        return {"ok": False, "errors": exc.errors}
    except NyimboError as exc:
        return _error(exc)
    return {"ok": True, "total_hymns": lib.load_index().total_hymns}


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main():
    """Run the MCP server."""
    import argparse

    def handle_shutdown(sig, frame):
        logger.info("Shutting down MCP server...")
        sys.exit(0)

    signal.signal(signal.SIGINT, handle_shutdown)
    signal.signal(signal.SIGTERM, handle_shutdown)

    parser = argparse.ArgumentParser(prog="nyimbo-mcp")
    parser.add_argument("--transport", default="stdio", choices=["stdio", "sse"])
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args()

    configure_logging(Settings.from_env().log_level)
    logger.info("Starting Nyimbo Zetu MCP Server...")

    if args.transport == "sse":
        mcp.run(transport="sse", host=args.host, port=args.port)
    else:
        mcp.run()


if __name__ == "__main__":
    main()
