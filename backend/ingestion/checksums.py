"""
Deterministic hashes for match deduplication and generated arena match ids.
"""

from __future__ import annotations

import hashlib
from datetime import datetime
from typing import Iterable, Optional


def sha256_hex(text: str) -> str:
    """Return SHA-256 hash of text as hex string."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def match_hash(
    participant_names: Iterable[str],
    start: datetime,
    end: datetime,
    arena_match_id: Optional[str],
) -> str:
    """Dedup key of a match; independent of participant order."""
    names = "|".join(sorted(participant_names))
    return sha256_hex(f"{names}|{start.isoformat()}|{end.isoformat()}|{arena_match_id or ''}")


def generated_arena_match_id(
    zone: str,
    start: datetime,
    end: datetime,
    mode: str,
) -> str:
    """Stable arena match id for Lua exports, which do not log one."""
    key = f"{zone}_{start:%Y%m%d%H%M%S}_{end:%Y%m%d%H%M%S}_{mode}"
    return sha256_hex(key)[:16].upper()
