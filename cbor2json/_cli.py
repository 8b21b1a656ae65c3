"""cbor2json command-line interface.

Usage:
    python3 -m cbor2json convert examples/data/nested_array.cbor
    python3 -m cbor2json convert capture.bin 0x40 --compact
    cat item.cbor | python3 -m cbor2json convert -
    python3 -m cbor2json version

Exit status: 0 on success, 1 for usage errors or unreadable input,
2 when the input can't be decoded or converted.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from . import (
    CborJsonError,
    MAX_DEPTH,
    MAX_KEY_BYTES,
    __version__,
    decode,
    dumps,
    to_json,
)

logger = logging.getLogger(__name__)

# Overrides the default --max-depth.
ENV_MAX_DEPTH = "CBOR2JSON_MAX_DEPTH"


def _offset(text: str) -> int:
    """Parse an offset the way strtoull(s, NULL, 0) would: 10, 0x1f, 0o17."""
    try:
        n = int(text, 0)
    except ValueError:
        raise argparse.ArgumentTypeError("invalid offset: {!r}".format(text))
    if n < 0:
        raise argparse.ArgumentTypeError("offset must be >= 0")
    return n


def _default_depth() -> int:
    raw = os.environ.get(ENV_MAX_DEPTH)
    if not raw:
        return MAX_DEPTH
    try:
        n = int(raw)
    except ValueError:
        n = 0
    if n < 1:
        logger.warning("ignoring invalid %s=%r", ENV_MAX_DEPTH, raw)
        return MAX_DEPTH
    return n


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cbor2json",
        description="cbor2json — print a CBOR data item as JSON",
    )
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log decoding details to stderr")
    sub = parser.add_subparsers(dest="command")

    # ── convert ──
    conv_p = sub.add_parser("convert", help="Convert one CBOR item to JSON")
    conv_p.add_argument("input", metavar="FILE",
                        help="CBOR input file, or - for stdin")
    conv_p.add_argument("offset", nargs="?", type=_offset, default=0,
                        help="Byte offset of the item (decimal, 0x.. or 0o..)")
    fmt_g = conv_p.add_mutually_exclusive_group()
    fmt_g.add_argument("--indent", type=int, metavar="N",
                       help="Indent with N spaces (default: tabs)")
    fmt_g.add_argument("--compact", action="store_true",
                       help="Single-line output")
    conv_p.add_argument("--max-key-bytes", type=int, default=MAX_KEY_BYTES,
                        metavar="N", help="Truncate text map keys to N bytes")
    conv_p.add_argument("--max-depth", type=int, default=None, metavar="N",
                        help="Maximum nesting depth (default {}, or ${})".format(
                            MAX_DEPTH, ENV_MAX_DEPTH))
    conv_p.add_argument("--strict-keys", action="store_true",
                        help="Fail on colliding map keys instead of keeping the last")

    # ── version ──
    sub.add_parser("version", help="Print version and exit")

    return parser


def _read_input(filepath: str) -> bytes:
    """Read CBOR bytes from a file or stdin."""
    if filepath == "-":
        if sys.stdin.isatty():
            print("cbor2json: reading from stdin (Ctrl-D to end)...", file=sys.stderr)
        return sys.stdin.buffer.read()
    with open(filepath, "rb") as f:
        return f.read()


def _cmd_convert(args: argparse.Namespace) -> int:
    try:
        raw = _read_input(args.input)
    except OSError as e:
        print("cbor2json: cannot read {}: {}".format(args.input, e.strerror or e),
              file=sys.stderr)
        return 1
    logger.debug("read %d bytes from %s", len(raw), args.input)

    if args.offset > len(raw):
        print("offset {} is larger than file {} {}".format(args.offset, args.input, len(raw)),
              file=sys.stderr)
        return 2

    max_depth = args.max_depth if args.max_depth is not None else _default_depth()

    try:
        result = decode(raw, args.offset, max_depth=max_depth)
    except CborJsonError as e:
        print("There was an error while reading the input near byte {} "
              "(read {} bytes in total): {}".format(e.position, e.read, e.code),
              file=sys.stderr)
        return 2

    if args.offset + result.read < len(raw):
        logger.info("%d trailing bytes after item ignored",
                    len(raw) - args.offset - result.read)

    try:
        value = to_json(result.item,
                        max_key_bytes=args.max_key_bytes,
                        strict_keys=args.strict_keys,
                        max_depth=max_depth)
    except CborJsonError as e:
        print("cbor2json: error [{}]: {}".format(e.code, e), file=sys.stderr)
        return 2

    if args.compact:
        indent = None
    elif args.indent is not None:
        indent = args.indent
    else:
        indent = "\t"
    print(dumps(value, indent=indent))
    sys.stdout.flush()
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG,
                            format="%(name)s: %(levelname)s: %(message)s")

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "version":
        print(f"cbor2json {__version__}")
        return

    if args.command == "convert":
        if args.max_key_bytes < 0:
            parser.error("--max-key-bytes must be >= 0")
        if args.max_depth is not None and args.max_depth < 1:
            parser.error("--max-depth must be >= 1")
        status = _cmd_convert(args)
        if status:
            sys.exit(status)


if __name__ == "__main__":
    main()
