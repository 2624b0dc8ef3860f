"""
Marker Scanner — find the next start marker in a read-only buffer.

HOW THE SEARCH WORKS
────────────────────
1.  Look for the marker's FIRST byte with the buffer's native find()
    (C speed on bytes, bytearray and mmap alike).
2.  At each candidate, compare the full marker.
3.  On a mismatch, resume the single-byte search at candidate + 1.
    Never skip ahead by the marker length: for FF D8 FF E1 the input
    FF D8 FF D8 FF E1 holds a false start at 0 and the real match at 2.
4.  A candidate too close to the end to hold the whole marker means
    there is no match left in the buffer.

Each byte is examined by find() once and re-compared at most
len(marker) times, so a full scan stays linear in the buffer size.
"""

import logging
from typing import Iterator, Optional

from .signatures import DEFAULT_MARKER

logger = logging.getLogger(__name__)


def find_marker(buffer, start: int = 0, marker: bytes = DEFAULT_MARKER) -> Optional[int]:
    """
    Return the offset of the leftmost `marker` at or after `start`.

    `buffer` is anything with len(), slicing and find(): bytes,
    bytearray or a read-only mmap. Returns None when no match exists.
    """
    size = len(buffer)
    mlen = len(marker)
    first = marker[:1]
    pos = max(start, 0)

    while size - pos >= mlen:
        cand = buffer.find(first, pos)
        if cand == -1 or size - cand < mlen:
            return None
        if buffer[cand:cand + mlen] == marker:
            return cand
        pos = cand + 1
    return None


class MarkerScanner:
    """
    Stateless query object bound to one marker.

    Usage:
        scanner = MarkerScanner()
        pos = scanner.find(buf)             # first marker or None
        pos = scanner.find(buf, pos + 4)    # next one after it
    """

    def __init__(self, marker: bytes = DEFAULT_MARKER):
        if not marker:
            raise ValueError("marker must be at least one byte")
        self._marker = bytes(marker)

    @property
    def marker(self) -> bytes:
        return self._marker

    def __len__(self) -> int:
        return len(self._marker)

    def find(self, buffer, start: int = 0) -> Optional[int]:
        return find_marker(buffer, start, self._marker)

    def iter_markers(self, buffer, start: int = 0) -> Iterator[int]:
        """Yield every marker offset, overlapping ones included."""
        pos = self.find(buffer, start)
        while pos is not None:
            yield pos
            pos = self.find(buffer, pos + 1)

    def count(self, buffer) -> int:
        n = sum(1 for _ in self.iter_markers(buffer))
        logger.debug("%d marker(s) in %d bytes", n, len(buffer))
        return n
