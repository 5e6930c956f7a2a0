"""Tests for the MCP tool functions."""

import asyncio

import pytest

from nyimbo_zetu import mcp_server
from nyimbo_zetu.exceptions import NotFoundError, ValidationError


def _call(tool, **kwargs):
    # @mcp.tool() may wrap the coroutine function in a tool object
    fn = getattr(tool, "fn", tool)
    return asyncio.run(fn(**kwargs))


@pytest.fixture(autouse=True)
def server_library(library, monkeypatch):
    monkeypatch.setattr(mcp_server, "library", library)
    return library


class TestHelpers:
    def test_ensure_initialized_reuses_library(self, server_library):
        assert mcp_server._ensure_initialized() is server_library

    def test_error_payload(self):
        assert mcp_server._error(NotFoundError("nope")) == {"error": "nope"}
        payload = mcp_server._error(ValidationError(["a", "b"]))
        assert payload["errors"] == ["a", "b"]

    def test_summary(self, server_library):
        summary = mcp_server._summary(server_library.load_hymn(2))
        assert summary == {
            "id": 2,
            "title": "Bwana Yesu Asifiwe",
            "subtitle": "Wimbo wa Shukrani",
            "category": "thanksgiving",
            "tags": ["worship", "thanksgiving"],
            "verse_count": 3,
            "has_chorus": False,
        }


class TestTools:
    def test_get_hymn_with_lyrics(self):
        result = _call(mcp_server.get_hymn, hymn_id=1)
        assert result["id"] == 1
        assert [s["label"] for s in result["sections"]][:2] == ["Verse 1", "Chorus"]

    def test_get_hymn_missing(self):
        result = _call(mcp_server.get_hymn, hymn_id=42)
        assert "42" in result["error"]

    def test_search(self):
        ids = [h["id"] for h in _call(mcp_server.search_hymns, term="bwana")]
        assert ids == [2, 4]

    def test_by_category(self):
        ids = [h["id"] for h in _call(mcp_server.hymns_by_category, category="evening")]
        assert ids == [3]

    def test_validate(self):
        assert _call(mcp_server.validate_hymn, hymn_id=1) == {"is_valid": True, "errors": []}

    def test_check_integrity(self):
        assert _call(mcp_server.check_integrity) == {"ok": True, "total_hymns": 4}
