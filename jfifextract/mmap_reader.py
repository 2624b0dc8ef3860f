"""
Input Reader — make the whole input addressable as one read-only buffer.

1. Open the file (or block device) read-only.
2. Query its size.
3. Memory-map it with ACCESS_READ; the OS pages data in on demand and
   nothing is copied.

Any failure in these steps is fatal and raised as InputError before a
single byte is scanned. An empty file cannot be mapped and is served as
an empty buffer instead. With use_mmap=False steps 2 and 3 are replaced
by one read() to end of file, which also works for pipes.
"""

import os
import mmap
import logging
from typing import Optional, BinaryIO

from .errors import InputError

logger = logging.getLogger(__name__)


class InputReader:
    """
    Read-only view of an input file.

    Usage:
        with InputReader(path) as reader:
            blocks = list(segment(reader.buffer))

    With use_mmap=False the file is read into memory instead, for inputs
    the OS refuses to map or size (pipes, FIFOs).
    """

    def __init__(self, path: str, use_mmap: bool = True):
        self.path = path
        self._fd: Optional[BinaryIO] = None
        self._mmap: Optional[mmap.mmap] = None
        self._buffer = b""
        self._size = 0
        self._using_mmap = False

        try:
            self._fd = open(path, "rb")
        except OSError as e:
            raise InputError(path, "open", e) from e

        try:
            if use_mmap:
                self._size = self._get_size()
                if self._size > 0:
                    self._map()
            else:
                self._read_all()
        except BaseException:
            self.close()
            raise

    def _read_all(self):
        # Pipes and some devices cannot be sized or mapped; read to EOF
        try:
            self._buffer = self._fd.read()
        except OSError as e:
            raise InputError(self.path, "read", e) from e
        self._size = len(self._buffer)
        logger.info("buffered read: %d bytes", self._size)

    def _get_size(self) -> int:
        try:
            size = os.fstat(self._fd.fileno()).st_size
            if size == 0:
                # Block devices report st_size 0; ask the device itself
                size = self._fd.seek(0, os.SEEK_END)
                self._fd.seek(0)
            return size
        except OSError as e:
            raise InputError(self.path, "stat", e) from e

    def _map(self):
        try:
            self._mmap = mmap.mmap(
                self._fd.fileno(),
                self._size,
                access=mmap.ACCESS_READ,
            )
        except (OSError, ValueError, OverflowError) as e:
            raise InputError(self.path, "map", e) from e
        self._buffer = self._mmap
        self._using_mmap = True
        logger.info(
            "mmap enabled: %d bytes (%.1f MB)",
            self._size, self._size / (1024 ** 2),
        )

    @property
    def buffer(self):
        return self._buffer

    @property
    def size(self) -> int:
        return self._size

    @property
    def is_mmap(self) -> bool:
        return self._using_mmap

    def close(self):
        """Release the mapping and the file handle."""
        if self._mmap is not None:
            self._mmap.close()
            self._mmap = None
            self._using_mmap = False
        self._buffer = b""
        if self._fd is not None:
            self._fd.close()
            self._fd = None

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
