"""cbor2json — convert CBOR data items to JSON-compatible values.

Quick start:
    >>> from cbor2json import convert_bytes
    >>> convert_bytes(bytes.fromhex("a1616b01"))
    {'k': 1}

Everything JSON can't represent natively gets a fixed textual form:
byte strings become "b" + uppercase hex, tags become single-entry
objects keyed "tag_<n>", and non-string map keys become their decimal
value (unsigned integers) or "Surrogate key <index>".
    >>> convert_bytes(bytes.fromhex("c7f5"))
    {'tag_7': True}
"""

from __future__ import annotations

from typing import Any

import cbor2

from ._constants import (
    MAX_DEPTH,
    MAX_KEY_BYTES,
    UNSUPPORTED_CHUNKED_BYTESTRING,
    UNSUPPORTED_CHUNKED_STRING,
    UNSUPPORTED_CONTROL_VALUE,
)
from ._convert import JSONValue, map_key, to_json
from ._decoder import DecodeResult, decode
from ._errors import (
    ERR_DUP_KEY,
    ERR_ITEM,
    ERR_LIMIT_DEPTH,
    ERR_MALFORMED,
    ERR_NODATA,
    ERR_NOTENOUGHDATA,
    CborJsonError,
)
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
from ._native import item_from_native
from ._printer import dumps

__version__ = "0.9.0"

__all__ = [
    # Core
    "to_json",
    "map_key",
    # Pipelines
    "convert_bytes",
    "convert_cbor2",
    # Collaborators
    "decode",
    "DecodeResult",
    "item_from_native",
    "dumps",
    # Item model
    "Item",
    "UInt",
    "NegInt",
    "ByteString",
    "String",
    "Array",
    "Map",
    "Tag",
    "Simple",
    "Float",
    "TRUE",
    "FALSE",
    "NULL",
    "UNDEFINED",
    # Exception
    "CborJsonError",
    # Error codes
    "ERR_NODATA",
    "ERR_NOTENOUGHDATA",
    "ERR_MALFORMED",
    "ERR_LIMIT_DEPTH",
    "ERR_DUP_KEY",
    "ERR_ITEM",
    # Constants
    "MAX_DEPTH",
    "MAX_KEY_BYTES",
    "UNSUPPORTED_CHUNKED_BYTESTRING",
    "UNSUPPORTED_CHUNKED_STRING",
    "UNSUPPORTED_CONTROL_VALUE",
    "JSONValue",
]


def convert_bytes(data: bytes, offset: int = 0, **options: Any) -> JSONValue:
    """Decode the CBOR item at `offset` and convert it.

    Keyword options are passed to to_json(); max_depth also bounds the
    decoder.
    """
    max_depth = options.get("max_depth", MAX_DEPTH)
    result = decode(data, offset, max_depth=max_depth)
    return to_json(result.item, **options)


def convert_cbor2(data: bytes, **options: Any) -> JSONValue:
    """Decode with cbor2 and convert.

    cbor2 joins chunked strings and resolves well-known tags, so output
    can differ from convert_bytes() for the same input; see _native.
    """
    max_depth = options.get("max_depth", MAX_DEPTH)
    return to_json(item_from_native(cbor2.loads(data), max_depth=max_depth), **options)
