#!/usr/bin/env python3
"""
JFIF Extract — Entry Point.

Usage:
    python main.py card.img                  # write blocks to /tmp/jfif.recovered
    python main.py -o out/ card.img          # choose the output directory
    python main.py -d card.img               # dry run: list blocks only
    sudo python main.py -v /dev/sdb          # read a raw device
"""

import sys
import time
import logging
import argparse

from jfifextract import __version__
from jfifextract.errors import InputError, OutputDirError, TooManyBlocksError
from jfifextract.manager import (
    DEFAULT_OUTPUT_DIR,
    ExtractConfig,
    extract_file,
    save_log,
)
from jfifextract.signatures import DEFAULT_MARKER, parse_marker
from jfifextract.sinks import MAX_INDEX


EXIT_OK = 0
EXIT_USAGE = 1
EXIT_NOT_A_DIR = 2
EXIT_TOO_MANY = 3
EXIT_MKDIR = 4
EXIT_INPUT = 8


class _ArgumentParser(argparse.ArgumentParser):
    """argparse exits with 2 on bad usage; 2 means "not a directory" here."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE, f"{self.prog}: error: {message}\n")


def _marker_arg(text: str) -> bytes:
    try:
        return parse_marker(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="jfifextract",
        description="Recover JPEG images from a raw disk image, memory card or any file.")
    parser.add_argument("infile", help="Input file or device")
    parser.add_argument("-o", "--output", default=DEFAULT_OUTPUT_DIR,
                        help=f"Output directory (default: {DEFAULT_OUTPUT_DIR})")
    parser.add_argument("-d", "--dry-run", action="store_true",
                        help="Report blocks without writing them")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="More output (repeat for debug logging)")
    parser.add_argument("--marker", type=_marker_arg, default=DEFAULT_MARKER,
                        help="Start marker: app1, app0 or hex bytes (default: FFD8FFE1)")
    parser.add_argument("--max-blocks", type=int, default=MAX_INDEX + 1,
                        help="Stop with an error after this many blocks (dry run included)")
    parser.add_argument("--no-mmap", action="store_true",
                        help="Read the input into memory instead of mapping it")
    parser.add_argument("--log", default="",
                        help="Write a JSON recovery log to this path")
    parser.add_argument("--version", action="version",
                        version=f"%(prog)s {__version__}")
    return parser


def _setup_logging(verbosity: int):
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _fmt(n):
    s = float(n)
    for u in ("B", "KB", "MB", "GB"):
        if s < 1024:
            return f"{s:.1f} {u}"
        s /= 1024
    return f"{s:.1f} TB"


def _print_summary(summary, elapsed: float):
    print()
    print("─" * 60)
    print(f"  Input:   {summary.input_path} ({_fmt(summary.input_size)})")
    print(f"  I/O:     {'mmap' if summary.using_mmap else 'buffered read'}")
    print(f"  Blocks:  {summary.blocks_found}")
    if not summary.dry_run:
        print(f"  Written: {summary.blocks_written} file(s), "
              f"{_fmt(summary.bytes_written)} → {summary.output_dir}")
        if summary.blocks_failed:
            print(f"  Failed:  {summary.blocks_failed}")
    if summary.limit_reached:
        print("  Stopped: block limit reached")
    print(f"  Done in {elapsed:.1f}s")
    print("─" * 60)


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.max_blocks < 1:
        parser.error("--max-blocks must be at least 1")

    _setup_logging(args.verbose)

    config = ExtractConfig(
        output_dir=args.output,
        dry_run=args.dry_run,
        verbosity=args.verbose,
        marker=args.marker,
        max_index=args.max_blocks - 1,
        use_mmap=not args.no_mmap,
    )

    start = time.time()
    code = EXIT_OK
    try:
        summary = extract_file(args.infile, config)
    except OutputDirError as e:
        print(f"{parser.prog}: {e}", file=sys.stderr)
        return EXIT_NOT_A_DIR if e.not_a_directory else EXIT_MKDIR
    except InputError as e:
        print(f"{parser.prog}: {e}", file=sys.stderr)
        return EXIT_INPUT
    except TooManyBlocksError as e:
        print(f"{parser.prog}: {e}", file=sys.stderr)
        if e.summary is None:
            return EXIT_TOO_MANY
        summary = e.summary
        code = EXIT_TOO_MANY
    elapsed = time.time() - start

    if args.verbose > 0 or not args.dry_run or code != EXIT_OK:
        _print_summary(summary, elapsed)

    if args.log:
        save_log(summary, args.log)
        print(f"  Log: {args.log}")
    return code


if __name__ == "__main__":
    sys.exit(main())
