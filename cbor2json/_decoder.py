"""cbor2json decoder — raw CBOR bytes to the item model (RFC 8949).

Unlike general-purpose CBOR libraries, this decoder keeps the
definite/indefinite distinction for strings, because the converter
treats chunked strings differently from plain ones.  Indefinite arrays
and maps are decoded into ordinary Array/Map items, since their size is
known once the break marker has been read.

Only the first data item is decoded.  Bytes after it are left alone and
DecodeResult.read tells the caller where the item ended.

Errors are raised as CborJsonError with `.position` (offset of the byte
that could not be decoded) and `.read` (bytes consumed from the start
offset up to that point).
"""

from __future__ import annotations

import logging
import struct
from typing import List, Tuple

from ._constants import (
    AI_INDEFINITE,
    AI_UINT16,
    AI_UINT32,
    AI_UINT64,
    AI_UINT8,
    BREAK_BYTE,
    FLOAT_DOUBLE,
    FLOAT_HALF,
    FLOAT_SINGLE,
    MAX_DEPTH,
    TYPE_ARRAY,
    TYPE_BYTESTRING,
    TYPE_FLOAT_CTRL,
    TYPE_MAP,
    TYPE_NEGINT,
    TYPE_STRING,
    TYPE_TAG,
    TYPE_UINT,
    clamp_depth,
)
from ._errors import (
    ERR_LIMIT_DEPTH,
    ERR_MALFORMED,
    ERR_NODATA,
    ERR_NOTENOUGHDATA,
    CborJsonError,
)
from ._items import (
    Array,
    ByteString,
    Float,
    Item,
    Map,
    NegInt,
    Simple,
    String,
    Tag,
    UInt,
)

logger = logging.getLogger(__name__)

_ARG_FORMATS = {
    AI_UINT8: ">B",
    AI_UINT16: ">H",
    AI_UINT32: ">I",
    AI_UINT64: ">Q",
}

_FLOAT_FORMATS = {
    AI_UINT16: (">e", FLOAT_HALF),
    AI_UINT32: (">f", FLOAT_SINGLE),
    AI_UINT64: (">d", FLOAT_DOUBLE),
}


class DecodeResult:
    """A decoded item and the number of bytes it occupied."""

    __slots__ = ("item", "read")

    def __init__(self, item: Item, read: int) -> None:
        self.item = item
        self.read = read

    def __repr__(self) -> str:
        return "DecodeResult(item={!r}, read={})".format(self.item, self.read)


class _Reader:
    """Cursor over the input buffer.  `start` is where decoding began."""

    __slots__ = ("buf", "off", "start", "max_depth")

    def __init__(self, buf: bytes, off: int, max_depth: int) -> None:
        self.buf = buf
        self.off = off
        self.start = off
        self.max_depth = max_depth

    def fail(self, code: str, msg: str, position: int) -> CborJsonError:
        return CborJsonError(code, msg, position=position, read=self.off - self.start)

    def take(self, n: int) -> bytes:
        if self.off + n > len(self.buf):
            raise self.fail(ERR_NOTENOUGHDATA, "truncated input", self.off)
        out = self.buf[self.off:self.off + n]
        self.off += n
        return out

    def at_break(self) -> bool:
        if self.off >= len(self.buf):
            raise self.fail(ERR_NOTENOUGHDATA, "missing break marker", self.off)
        return self.buf[self.off] == BREAK_BYTE

    def head(self) -> Tuple[int, int, int]:
        """Read an initial byte.  Returns (major, additional info, its offset)."""
        pos = self.off
        ib = self.take(1)[0]
        return ib >> 5, ib & 0x1F, pos

    def argument(self, ai: int, pos: int) -> int:
        if ai < AI_UINT8:
            return ai
        fmt = _ARG_FORMATS.get(ai)
        if fmt is None:
            raise self.fail(ERR_MALFORMED,
                            "reserved additional information {}".format(ai), pos)
        return struct.unpack(fmt, self.take(struct.calcsize(fmt)))[0]


def decode(data: bytes, offset: int = 0, *, max_depth: int = MAX_DEPTH) -> DecodeResult:
    """Decode the CBOR data item starting at `offset`.

    Raises CborJsonError:
      ERR_NODATA        -- no bytes at offset
      ERR_NOTENOUGHDATA -- the input ends inside the item
      ERR_MALFORMED     -- invalid encoding (reserved additional info,
                           stray break, bad chunk, invalid UTF-8, ...)
      ERR_LIMIT_DEPTH   -- containers/tags nested deeper than max_depth
    """
    buf = bytes(data)
    if offset < 0:
        raise ValueError("offset must be >= 0")
    if offset >= len(buf):
        raise CborJsonError(ERR_NODATA, "no data at offset {}".format(offset),
                            position=offset, read=0)

    r = _Reader(buf, offset, clamp_depth(max_depth))
    item = _decode_one(r, 0)
    read = r.off - offset
    logger.debug("decoded %s at offset %d (%d bytes)", type(item).__name__, offset, read)
    return DecodeResult(item, read)


def _enter(r: _Reader, depth: int, pos: int) -> None:
    if depth + 1 > r.max_depth:
        raise r.fail(ERR_LIMIT_DEPTH, "nesting exceeds max_depth", pos)


def _decode_one(r: _Reader, depth: int) -> Item:
    major, ai, pos = r.head()

    if major == TYPE_FLOAT_CTRL:
        return _decode_simple_or_float(r, ai, pos)

    if ai == AI_INDEFINITE:
        if major in (TYPE_BYTESTRING, TYPE_STRING):
            return _decode_chunked(r, major)
        if major == TYPE_ARRAY:
            _enter(r, depth, pos)
            items: List[Item] = []
            while not r.at_break():
                items.append(_decode_one(r, depth + 1))
            r.off += 1
            return Array(items)
        if major == TYPE_MAP:
            _enter(r, depth, pos)
            pairs: List[Tuple[Item, Item]] = []
            while not r.at_break():
                k = _decode_one(r, depth + 1)
                if r.at_break():
                    raise r.fail(ERR_MALFORMED, "break inside map pair", r.off)
                pairs.append((k, _decode_one(r, depth + 1)))
            r.off += 1
            return Map(pairs)
        raise r.fail(ERR_MALFORMED,
                     "indefinite length not allowed for major type {}".format(major), pos)

    arg = r.argument(ai, pos)

    if major == TYPE_UINT:
        return UInt(arg)

    if major == TYPE_NEGINT:
        return NegInt(arg)

    if major == TYPE_BYTESTRING:
        return ByteString(r.take(arg))

    if major == TYPE_STRING:
        return String(_utf8(r, r.take(arg), pos))

    if major == TYPE_ARRAY:
        _enter(r, depth, pos)
        # Every item takes at least one byte; refuse impossible counts
        # before building anything.
        if arg > len(r.buf) - r.off:
            raise r.fail(ERR_NOTENOUGHDATA, "array count exceeds input", pos)
        return Array([_decode_one(r, depth + 1) for _ in range(arg)])

    if major == TYPE_MAP:
        _enter(r, depth, pos)
        if 2 * arg > len(r.buf) - r.off:
            raise r.fail(ERR_NOTENOUGHDATA, "map count exceeds input", pos)
        pairs = []
        for _ in range(arg):
            k = _decode_one(r, depth + 1)
            pairs.append((k, _decode_one(r, depth + 1)))
        return Map(pairs)

    # major == TYPE_TAG; the three bits leave no other case.
    _enter(r, depth, pos)
    return Tag(arg, _decode_one(r, depth + 1))


def _utf8(r: _Reader, raw: bytes, pos: int) -> bytes:
    try:
        raw.decode("utf-8", errors="strict")
    except UnicodeDecodeError:
        raise r.fail(ERR_MALFORMED, "invalid UTF-8 in text string", pos)
    return raw


def _decode_chunked(r: _Reader, major: int) -> Item:
    chunks: List[bytes] = []
    while not r.at_break():
        cmajor, cai, cpos = r.head()
        # Chunks must be definite strings of the same major type.
        if cmajor != major or cai == AI_INDEFINITE:
            raise r.fail(ERR_MALFORMED, "invalid chunk in indefinite string", cpos)
        chunk = r.take(r.argument(cai, cpos))
        if major == TYPE_STRING:
            chunk = _utf8(r, chunk, cpos)
        chunks.append(chunk)
    r.off += 1
    if major == TYPE_STRING:
        return String.indefinite(chunks)
    return ByteString.indefinite(chunks)


def _decode_simple_or_float(r: _Reader, ai: int, pos: int) -> Item:
    if ai < AI_UINT8:
        return Simple(ai)
    if ai == AI_UINT8:
        value = r.take(1)[0]
        # Two-byte form for values that fit the one-byte form is invalid.
        if value < 32:
            raise r.fail(ERR_MALFORMED, "invalid two-byte simple value {}".format(value), pos)
        return Simple(value)
    fmt = _FLOAT_FORMATS.get(ai)
    if fmt is not None:
        code, width = fmt
        return Float(struct.unpack(code, r.take(width))[0], width)
    if ai == AI_INDEFINITE:
        raise r.fail(ERR_MALFORMED, "unexpected break marker", pos)
    raise r.fail(ERR_MALFORMED, "reserved additional information {}".format(ai), pos)
