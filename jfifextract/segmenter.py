"""
Block Segmenter — split a buffer into marker-to-marker blocks.

Every marker starts a block; the block runs up to the next marker, or to
the end of the buffer for the last one. Bytes before the first marker
belong to no block.

    buffer:  ....[M....][M..][M][M.......]
    blocks:      #0     #1   #2 #3

Blocks are produced lazily, one at a time, as (offset, length, index)
descriptors that point into the caller's buffer. Nothing is copied until
a sink decides to act on the bytes.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, Optional

from .scanner import MarkerScanner
from .signatures import DEFAULT_MARKER

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Block:
    """One candidate image: a byte range of the scanned buffer."""
    offset: int         # Byte offset of the block's marker
    length: int         # Bytes up to the next marker / end of buffer
    index: int          # Zero-based discovery order

    @property
    def end(self) -> int:
        return self.offset + self.length

    def view(self, buffer) -> memoryview:
        """
        Zero-copy view of this block's bytes in `buffer`.

        Release it (use `with block.view(buf) as v:`) before closing an
        mmap-backed buffer; a live view makes mmap.close() raise
        BufferError. Use data() when a copy is fine.
        """
        return memoryview(buffer)[self.offset:self.end]

    def data(self, buffer) -> bytes:
        """Copy of this block's bytes; holds no reference to `buffer`."""
        return bytes(buffer[self.offset:self.end])


class BlockSegmenter:
    """
    Drives a MarkerScanner across a whole buffer.

    Usage:
        seg = BlockSegmenter()
        for block in seg.segment(buf):
            ...                                  # stop whenever you like

        seg.dispatch(buf, sink)                  # or push every block to a sink
    """

    def __init__(
        self,
        marker: bytes = DEFAULT_MARKER,
        scanner: Optional[MarkerScanner] = None,
    ):
        self._scanner = scanner or MarkerScanner(marker)

    @property
    def marker(self) -> bytes:
        return self._scanner.marker

    def segment(self, buffer) -> Iterator[Block]:
        """
        Yield the blocks of `buffer` in increasing offset order.

        Each call starts a fresh scan from offset 0.
        """
        size = len(buffer)
        skip = len(self._scanner)

        cur = self._scanner.find(buffer, 0)
        if cur is None:
            return

        index = 0
        # Search past the current marker so it cannot match itself
        nxt = self._scanner.find(buffer, cur + skip)
        while nxt is not None:
            yield Block(cur, nxt - cur, index)
            index += 1
            cur = nxt
            nxt = self._scanner.find(buffer, cur + skip)

        yield Block(cur, size - cur, index)

    def dispatch(self, buffer, sink, limit: Optional[int] = None) -> int:
        """
        Hand every block to `sink.dispatch(data, index)` in order.

        `data` is a memoryview released as soon as the sink returns.
        Sink exceptions propagate unchanged. Returns the number of
        blocks dispatched.
        """
        count = 0
        with memoryview(buffer) as whole:
            for block in self.segment(buffer):
                if limit is not None and count >= limit:
                    break
                logger.debug(
                    "block #%d at 0x%X (%d bytes)",
                    block.index, block.offset, block.length,
                )
                with whole[block.offset:block.end] as data:
                    sink.dispatch(data, block.index)
                count += 1
        return count


def segment(buffer, marker: bytes = DEFAULT_MARKER) -> Iterator[Block]:
    """Shortcut for BlockSegmenter(marker).segment(buffer)."""
    return BlockSegmenter(marker).segment(buffer)
