"""
Block Sinks — what happens to each block the segmenter finds.

Two sinks ship with the extractor:
  • ReportingSink — dry run: print index and size, write nothing.
  • FileSink      — write fnd00000.jpg, fnd00001.jpg, ... into a directory.

A sink receives (data, index) one call at a time, in increasing index
order, and never concurrently. Per-block write failures are logged and
counted; the run goes on. Only TooManyBlocksError stops a run, and
both sinks raise it once an index passes their max_index.
"""

import os
import sys
import time
import hashlib
import logging
from dataclasses import dataclass
from typing import Optional, TextIO

from .errors import TooManyBlocksError

logger = logging.getLogger(__name__)

# Filenames carry an index of at most 8 digits
MAX_INDEX = 99_999_999
NAME_FORMAT = "fnd{index:05d}.jpg"


@dataclass
class SinkStats:
    blocks: int = 0             # Blocks received
    written: int = 0            # Blocks fully written
    failed: int = 0             # Create / write errors and short writes
    bytes_written: int = 0


class BlockSink:
    """
    Base class. Subclasses implement dispatch() and call
    check_index() first, so every sink honours the same limit.
    """

    def __init__(self, max_index: int = MAX_INDEX):
        self.stats = SinkStats()
        self.max_index = max_index

    def check_index(self, index: int):
        if index > self.max_index:
            raise TooManyBlocksError(index, self.max_index)

    def dispatch(self, data, index: int) -> None:
        raise NotImplementedError

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


class ReportingSink(BlockSink):
    """Dry-run sink: report each block's existence only."""

    def __init__(self, out: Optional[TextIO] = None, max_index: int = MAX_INDEX):
        super().__init__(max_index)
        self._out = out

    def dispatch(self, data, index: int) -> None:
        self.check_index(index)
        self.stats.blocks += 1
        out = self._out or sys.stdout
        print(f"found JFIF data block #{index}, with size {len(data)}", file=out)


class FileSink(BlockSink):
    """
    Write every block to its own file inside `output_dir`.

    The directory must already exist (see manager.prepare_output_dir).
    Indexes above `max_index` raise TooManyBlocksError instead of being
    dropped silently.
    """

    def __init__(
        self,
        output_dir: str,
        max_index: int = MAX_INDEX,
        name_format: str = NAME_FORMAT,
        verbosity: int = 0,
        out: Optional[TextIO] = None,
    ):
        super().__init__(max_index)
        self.output_dir = output_dir
        self.name_format = name_format
        self.verbosity = verbosity
        self.records: list[dict] = []
        self._out = out

    def filename_for(self, index: int) -> str:
        return self.name_format.format(index=index)

    def dispatch(self, data, index: int) -> None:
        self.check_index(index)

        self.stats.blocks += 1
        size = len(data)
        filename = self.filename_for(index)
        path = os.path.join(self.output_dir, filename)

        if self.verbosity > 0:
            print(f"writing {size} bytes to {filename}", file=self._out or sys.stdout)

        # Unbuffered so a short write is visible to us
        try:
            with open(path, "wb", buffering=0) as f:
                written = f.write(data)
        except OSError as e:
            logger.error("%s: %s", path, e)
            self.stats.failed += 1
            return

        written = written or 0
        self.stats.bytes_written += written
        if written < size:
            logger.error("%s: only %d bytes written", filename, written)
            self.stats.failed += 1
            return

        self.stats.written += 1
        self._log_recovery(index, filename, path, data)

    def _log_recovery(self, index: int, filename: str, path: str, data):
        self.records.append({
            "index": index,
            "filename": filename,
            "path": path,
            "size": len(data),
            "md5": hashlib.md5(data).hexdigest(),
            "timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
        })
