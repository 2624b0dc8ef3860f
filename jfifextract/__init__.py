# jfifextract — JPEG/JFIF block recovery from raw binary data.
# Splits a disk image or card dump at every JPEG start marker.
#
# Architecture (bottom → top):
#   signatures   — Start marker constants (FF D8 FF E1 by default)
#   scanner      — Find the next marker in a read-only buffer
#   segmenter    — Turn marker offsets into (offset, length, index) blocks
#   sinks        — Dry-run reporting / fndNNNNN.jpg file writing
#   mmap_reader  — Map the input file read-only
#   manager      — One extraction run: config, output dir, summary

__version__ = "1.1.0"

from .errors import (
    JfifExtractError,
    InputError,
    OutputDirError,
    SinkError,
    TooManyBlocksError,
)
from .scanner import MarkerScanner, find_marker
from .segmenter import Block, BlockSegmenter, segment
