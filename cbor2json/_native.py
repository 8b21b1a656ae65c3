"""cbor2json native adapter — cbor2-decoded Python values to the item model.

cbor2 hands back plain Python values.  This module maps them back onto
the item model so the converter can be used on data that was decoded
elsewhere:

    int (>= 0)           → UInt, or Tag 2 bignum above uint64
    int (< 0)            → NegInt, or Tag 3 bignum below -2**64
    bytes / bytearray    → ByteString
    str                  → String
    list / tuple         → Array   (cbor2 returns tuples for array keys)
    dict / FrozenDict    → Map
    set / frozenset      → Tag 258 wrapping an Array
    bool / None          → Simple true/false/null
    cbor2.undefined      → Simple undefined
    CBORSimpleValue      → Simple
    CBORTag              → Tag
    float                → Float (double width)
    datetime             → Tag 0 wrapping an RFC 3339 string
    UUID                 → Tag 37 wrapping the 16 bytes
    anything else cbor2  → re-encoded with cbor2.dumps and decoded, so
    can encode             Decimal, Fraction, IP addresses, dates, regexes
                           and email messages keep their semantic tag

cbor2 joins chunked strings while decoding, so every string coming
through here is definite.  Use decode() when the chunking matters.
"""

from __future__ import annotations

import datetime
import uuid
from collections.abc import Mapping
from typing import Any

import cbor2

from ._constants import MAX_DEPTH, UINT64_MAX, clamp_depth
from ._decoder import decode
from ._errors import ERR_ITEM, ERR_LIMIT_DEPTH, CborJsonError
from ._items import (
    FALSE,
    NULL,
    TRUE,
    UNDEFINED,
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

# Semantic tag numbers cbor2 resolves on its own (RFC 8949 §3.4, IANA).
TAG_DATETIME_STRING = 0
TAG_POS_BIGNUM = 2
TAG_NEG_BIGNUM = 3
TAG_UUID = 37
TAG_SET = 258


def _bignum_bytes(n: int) -> bytes:
    return n.to_bytes((n.bit_length() + 7) // 8 or 1, "big")


def item_from_native(value: Any, *, max_depth: int = MAX_DEPTH) -> Item:
    """Map a value produced by cbor2.loads() onto the item model."""
    return _lift(value, clamp_depth(max_depth), 0)


def _enter(depth: int, max_depth: int) -> None:
    if depth + 1 > max_depth:
        raise CborJsonError(ERR_LIMIT_DEPTH, "nesting exceeds max_depth")


def _lift(x: Any, max_depth: int, depth: int) -> Item:
    if isinstance(x, Item):
        return x

    # bool before int: isinstance(True, int) is True.
    if isinstance(x, bool):
        return TRUE if x else FALSE

    if x is None:
        return NULL

    if x is cbor2.undefined:
        return UNDEFINED

    if isinstance(x, int):
        if x >= 0:
            if x > UINT64_MAX:
                return Tag(TAG_POS_BIGNUM, ByteString(_bignum_bytes(x)))
            return UInt(x)
        if -1 - x > UINT64_MAX:
            return Tag(TAG_NEG_BIGNUM, ByteString(_bignum_bytes(-1 - x)))
        return NegInt.from_int(x)

    if isinstance(x, float):
        return Float(x)

    if isinstance(x, (bytes, bytearray, memoryview)):
        return ByteString(bytes(x))

    if isinstance(x, str):
        return String.from_text(x)

    if isinstance(x, (list, tuple)):
        _enter(depth, max_depth)
        return Array([_lift(v, max_depth, depth + 1) for v in x])

    # FrozenDict is a Mapping, not a dict subclass.
    if isinstance(x, Mapping):
        _enter(depth, max_depth)
        return Map([(_lift(k, max_depth, depth + 1), _lift(v, max_depth, depth + 1))
                    for k, v in x.items()])

    if isinstance(x, (set, frozenset)):
        _enter(depth, max_depth)
        return Tag(TAG_SET, Array([_lift(v, max_depth, depth + 1) for v in x]))

    if isinstance(x, cbor2.CBORTag):
        _enter(depth, max_depth)
        return Tag(x.tag, _lift(x.value, max_depth, depth + 1))

    if isinstance(x, cbor2.CBORSimpleValue):
        return Simple(x.value)

    if isinstance(x, datetime.datetime):
        return Tag(TAG_DATETIME_STRING, String.from_text(x.isoformat()))

    if isinstance(x, uuid.UUID):
        return Tag(TAG_UUID, ByteString(x.bytes))

    try:
        encoded = cbor2.dumps(x)
    except cbor2.CBOREncodeError as e:
        raise CborJsonError(
            ERR_ITEM, "no CBOR item for {}".format(type(x).__name__)) from e
    return decode(encoded, max_depth=max_depth - depth).item
