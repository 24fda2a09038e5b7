"""
Ingestion exceptions.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from models.match import Match


class UnsupportedStreamError(ValueError):
    """Input stream can neither be rewound nor peeked, so its format cannot be detected safely."""


class IngestionError(RuntimeError):
    """Fatal ingestion failure (I/O or persistence).

    The original exception is chained as __cause__. Matches committed before
    the failure stay persisted and are exposed on ``matches``.
    """

    def __init__(self, message: str, matches: Optional[Sequence[Match]] = None) -> None:
        super().__init__(message)
        self.matches: List[Match] = list(matches or [])
