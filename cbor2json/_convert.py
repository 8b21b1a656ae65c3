"""cbor2json converter — CBOR item graph to JSON-compatible Python values.

Output types: int/float (number), str, bool, None, list, dict.

Type mapping:
    UINT                → number
    NEGINT              → number (-1 - magnitude)
    BYTESTRING definite → "b" + uppercase hex, e.g. "bDEAD"
    STRING definite     → the text
    ARRAY               → list, same order and length
    MAP                 → dict, keys per the key policy below
    TAG                 → {"tag_<n>": <converted child>}
    true/false/null     → True/False/None
    FLOAT               → float (NaN and Infinity pass through)

Indefinite (chunked) strings and other control values such as undefined
have no JSON form here and come out as fixed placeholder strings.  None
of these cases raise: a well-formed item graph always converts.

Map keys, for the pair at zero-based index i:
    1. "Surrogate key <i>" by default
    2. a definite text key is used as-is, cut to max_key_bytes
    3. an unsigned integer key becomes its decimal string
Later keys that collide with earlier ones overwrite them unless
strict_keys is set.
"""

from __future__ import annotations

import codecs
from typing import Any, Dict, List, Union

from ._constants import (
    BYTESTRING_PREFIX,
    DOUBLE_EXACT_MAX,
    MAX_DEPTH,
    MAX_KEY_BYTES,
    SIMPLE_TRUE,
    SURROGATE_KEY_PREFIX,
    TAG_KEY_PREFIX,
    TYPE_ARRAY,
    TYPE_BYTESTRING,
    TYPE_FLOAT_CTRL,
    TYPE_MAP,
    TYPE_NEGINT,
    TYPE_STRING,
    TYPE_TAG,
    TYPE_UINT,
    UNSUPPORTED_CHUNKED_BYTESTRING,
    UNSUPPORTED_CHUNKED_STRING,
    UNSUPPORTED_CONTROL_VALUE,
    clamp_depth,
)
from ._errors import ERR_DUP_KEY, ERR_ITEM, ERR_LIMIT_DEPTH, CborJsonError
from ._items import Float, Item, Map, Simple

JSONValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]


class _Options:
    __slots__ = ("max_key_bytes", "strict_keys", "exact_integers", "max_depth")

    def __init__(self, max_key_bytes: int, strict_keys: bool,
                 exact_integers: bool, max_depth: int) -> None:
        if max_key_bytes < 0:
            raise ValueError("max_key_bytes must be >= 0")
        if max_depth < 1:
            raise ValueError("max_depth must be >= 1")
        self.max_key_bytes = max_key_bytes
        self.strict_keys = strict_keys
        self.exact_integers = exact_integers
        self.max_depth = clamp_depth(max_depth)


def to_json(item: Item, *,
            max_key_bytes: int = MAX_KEY_BYTES,
            strict_keys: bool = False,
            exact_integers: bool = True,
            max_depth: int = MAX_DEPTH) -> JSONValue:
    """Convert a CBOR item to a JSON-compatible Python value.

    The returned value shares nothing with `item`; converting the same
    item twice gives two equal, independent results.

    Options:
      max_key_bytes  -- UTF-8 byte ceiling for text map keys (default 127)
      strict_keys    -- raise ERR_DUP_KEY on a key collision instead of
                        letting the later pair win
      exact_integers -- keep integers exact; when False, integers beyond
                        2**53 become floats like a double-based JSON library
      max_depth      -- nesting bound; deeper input raises ERR_LIMIT_DEPTH
    """
    opts = _Options(max_key_bytes, strict_keys, exact_integers, max_depth)
    return _convert(item, opts, 0)


def _number(n: int, opts: _Options) -> Union[int, float]:
    if not opts.exact_integers and abs(n) > DOUBLE_EXACT_MAX:
        return float(n)
    return n


def _convert(item: Any, opts: _Options, depth: int) -> JSONValue:
    if not isinstance(item, Item):
        raise CborJsonError(ERR_ITEM, "not a CBOR item: {}".format(type(item).__name__))
    major = item.major

    if major == TYPE_UINT:
        return _number(item.value, opts)

    if major == TYPE_NEGINT:
        return _number(-1 - item.magnitude, opts)

    if major == TYPE_BYTESTRING:
        if item.definite:
            return BYTESTRING_PREFIX + item.data.hex().upper()
        return UNSUPPORTED_CHUNKED_BYTESTRING

    if major == TYPE_STRING:
        if item.definite:
            return item.data.decode("utf-8", errors="replace")
        return UNSUPPORTED_CHUNKED_STRING

    if major == TYPE_ARRAY:
        _enter(depth, opts)
        return [_convert(child, opts, depth + 1) for child in item.items]

    if major == TYPE_MAP:
        _enter(depth, opts)
        return _convert_map(item, opts, depth + 1)

    if major == TYPE_TAG:
        _enter(depth, opts)
        return {TAG_KEY_PREFIX + str(item.tag): _convert(item.item, opts, depth + 1)}

    if major == TYPE_FLOAT_CTRL:
        if isinstance(item, Simple):
            if item.is_bool:
                return item.value == SIMPLE_TRUE
            if item.is_null:
                return None
            return UNSUPPORTED_CONTROL_VALUE
        if isinstance(item, Float):
            return item.value

    # Only reachable for an Item subclass outside the closed model.
    raise CborJsonError(ERR_ITEM, "unknown CBOR major type {!r}".format(major))


def _enter(depth: int, opts: _Options) -> None:
    if depth + 1 > opts.max_depth:
        raise CborJsonError(ERR_LIMIT_DEPTH, "nesting exceeds max_depth")


def map_key(key: Item, index: int, max_key_bytes: int = MAX_KEY_BYTES) -> str:
    """Compute the JSON object key for the map pair at `index`."""
    out = SURROGATE_KEY_PREFIX + str(index)
    if key.major == TYPE_STRING and key.definite:
        raw = key.data[:max_key_bytes]
        # Invalid bytes become U+FFFD as on the value side.  A partial
        # character left by the cut is dropped: a non-final incremental
        # decode holds it back instead of replacing it.
        cut = len(key.data) > max_key_bytes
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        out = decoder.decode(raw, final=not cut)
    # Integer rule is applied last and wins.
    if key.major == TYPE_UINT:
        out = str(key.value)
    return out


def _convert_map(item: Map, opts: _Options, depth: int) -> Dict[str, JSONValue]:
    result: Dict[str, JSONValue] = {}
    for i, (k, v) in enumerate(item.pairs):
        key = map_key(k, i, opts.max_key_bytes)
        if opts.strict_keys and key in result:
            raise CborJsonError(
                ERR_DUP_KEY, "map pair {} collides on key {!r}".format(i, key))
        result[key] = _convert(v, opts, depth)
    return result
