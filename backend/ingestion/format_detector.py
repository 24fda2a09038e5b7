"""
Upload format detection from the first bytes of a stream.
"""

from __future__ import annotations

from typing import BinaryIO

from ingestion.errors import UnsupportedStreamError
from ingestion.schema import CombatLogFormat

PEEK_BYTES = 100
LUA_TABLE_MARKER = "pvpanalyticsdb"


def _peek(stream: BinaryIO, size: int) -> bytes:
    """Return up to size leading bytes without consuming them."""
    if stream.seekable():
        position = stream.tell()
        try:
            return stream.read(size) or b""
        finally:
            stream.seek(position)
    peek = getattr(stream, "peek", None)
    if callable(peek):
        # BufferedReader.peek may return more or fewer bytes than asked.
        return peek(size)[:size]
    raise UnsupportedStreamError(
        "Format detection requires a seekable or peekable (buffered) stream"
    )


def detect_format(stream: BinaryIO) -> CombatLogFormat:
    """Classify an upload as LUA_TABLE or TRADITIONAL; the stream position is preserved."""
    head = _peek(stream, PEEK_BYTES)
    if not head:
        return CombatLogFormat.TRADITIONAL
    # A multi-byte character may be cut at the peek boundary.
    text = head.decode("utf-8-sig", errors="ignore").lstrip()
    if text.lower().startswith(LUA_TABLE_MARKER):
        return CombatLogFormat.LUA_TABLE
    return CombatLogFormat.TRADITIONAL
