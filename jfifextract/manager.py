"""
Extraction Manager — ties input, segmenter and sink together for one run.

    ExtractConfig ──► prepare_output_dir ──► InputReader ──► BlockSegmenter
                                                                  │
                                        ReportingSink / FileSink ◄┘

Configuration is passed in explicitly; nothing here reads process-wide
state, so tests can run any marker over any file.
"""

import os
import json
import time
import logging
from dataclasses import dataclass, field
from typing import Optional, TextIO

from .errors import OutputDirError, TooManyBlocksError
from .mmap_reader import InputReader
from .segmenter import BlockSegmenter
from .signatures import DEFAULT_MARKER
from .sinks import BlockSink, FileSink, ReportingSink, MAX_INDEX

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = "/tmp/jfif.recovered"


@dataclass
class ExtractConfig:
    output_dir: str = DEFAULT_OUTPUT_DIR
    dry_run: bool = False
    verbosity: int = 0
    marker: bytes = DEFAULT_MARKER
    max_index: int = MAX_INDEX
    use_mmap: bool = True


@dataclass
class ExtractSummary:
    """Outcome of one extraction run."""
    input_path: str
    input_size: int = 0
    output_dir: str = ""
    dry_run: bool = False
    using_mmap: bool = False
    blocks_found: int = 0
    blocks_written: int = 0
    blocks_failed: int = 0
    bytes_written: int = 0
    limit_reached: bool = False
    start_time: float = 0.0
    end_time: float = 0.0
    records: list = field(default_factory=list)

    @property
    def elapsed(self) -> float:
        if self.end_time <= 0:
            return 0.0
        return self.end_time - self.start_time

    def to_dict(self) -> dict:
        return {
            "input_path": self.input_path,
            "input_size": self.input_size,
            "output_dir": self.output_dir,
            "dry_run": self.dry_run,
            "using_mmap": self.using_mmap,
            "blocks_found": self.blocks_found,
            "blocks_written": self.blocks_written,
            "blocks_failed": self.blocks_failed,
            "bytes_written": self.bytes_written,
            "limit_reached": self.limit_reached,
            "elapsed_seconds": round(self.elapsed, 3),
            "files": self.records,
        }


def prepare_output_dir(path: str):
    """Make sure `path` is a usable directory, creating it if missing."""
    if os.path.exists(path):
        if not os.path.isdir(path):
            raise OutputDirError(path, "not a directory", not_a_directory=True)
        return
    try:
        os.mkdir(path, 0o755)
    except OSError as e:
        raise OutputDirError(path, str(e)) from e
    logger.info("Created output directory %s", path)


def make_sink(config: ExtractConfig, out: Optional[TextIO] = None) -> BlockSink:
    if config.dry_run:
        return ReportingSink(out=out, max_index=config.max_index)
    return FileSink(
        config.output_dir,
        max_index=config.max_index,
        verbosity=config.verbosity,
        out=out,
    )


def extract_file(
    infile: str,
    config: Optional[ExtractConfig] = None,
    out: Optional[TextIO] = None,
) -> ExtractSummary:
    """
    Recover every marker-delimited block from `infile`.

    Raises OutputDirError / InputError before scanning starts, and
    TooManyBlocksError if the sink's index limit is reached; the partial
    ExtractSummary is then attached to the exception as `summary`.
    Per-file write errors are logged and counted in the summary.
    """
    config = config or ExtractConfig()
    summary = ExtractSummary(
        input_path=infile,
        output_dir="" if config.dry_run else config.output_dir,
        dry_run=config.dry_run,
        start_time=time.time(),
    )

    if not config.dry_run:
        prepare_output_dir(config.output_dir)

    segmenter = BlockSegmenter(config.marker)
    with InputReader(infile, use_mmap=config.use_mmap) as reader:
        summary.input_size = reader.size
        summary.using_mmap = reader.is_mmap
        with make_sink(config, out=out) as sink:
            try:
                segmenter.dispatch(reader.buffer, sink)
            except TooManyBlocksError as e:
                # Files already written still get a summary and a log
                summary.limit_reached = True
                e.summary = summary
                raise
            finally:
                summary.blocks_found = sink.stats.blocks
                summary.blocks_written = sink.stats.written
                summary.blocks_failed = sink.stats.failed
                summary.bytes_written = sink.stats.bytes_written
                summary.records = list(getattr(sink, "records", []))
                summary.end_time = time.time()

    logger.info(
        "%s: %d block(s) found, %d written, %d failed in %.1fs",
        infile, summary.blocks_found, summary.blocks_written,
        summary.blocks_failed, summary.elapsed,
    )
    return summary


def save_log(summary: ExtractSummary, filepath: str):
    """Write the run summary and per-file records as JSON."""
    with open(filepath, "w") as f:
        json.dump(summary.to_dict(), f, indent=2, default=str)
