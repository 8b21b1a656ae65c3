"""cbor2json item model — one class per CBOR major type.

The model is closed: every item is an instance of exactly one of

    UInt        (0)  — unsigned magnitude
    NegInt      (1)  — magnitude m standing for -1 - m
    ByteString  (2)  — definite bytes, or indefinite chunks
    String      (3)  — definite UTF-8 bytes, or indefinite chunks
    Array       (4)  — ordered child items
    Map         (5)  — ordered (key, value) item pairs, any key type
    Tag         (6)  — tag number wrapping one item
    Simple      (7)  — control value (false, true, null, undefined, ...)
    Float       (7)  — half, single or double precision number

Items are immutable by convention: containers hold tuples, strings hold
bytes, and nothing in the package mutates an item after construction.
Constructors range-check so that an out-of-range item can't be built in
the first place.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Tuple

from ._constants import (
    FLOAT_DOUBLE,
    FLOAT_HALF,
    FLOAT_SINGLE,
    SIMPLE_FALSE,
    SIMPLE_NULL,
    SIMPLE_TRUE,
    SIMPLE_UNDEFINED,
    TYPE_ARRAY,
    TYPE_BYTESTRING,
    TYPE_FLOAT_CTRL,
    TYPE_MAP,
    TYPE_NEGINT,
    TYPE_STRING,
    TYPE_TAG,
    TYPE_UINT,
    UINT64_MAX,
)
from ._errors import ERR_ITEM, CborJsonError


def _check_u64(n: Any, what: str) -> int:
    # bool is an int subclass; True is not a valid magnitude.
    if isinstance(n, bool) or not isinstance(n, int):
        raise CborJsonError(ERR_ITEM, "{} must be an int".format(what))
    if n < 0 or n > UINT64_MAX:
        raise CborJsonError(ERR_ITEM, "{} out of uint64 range: {}".format(what, n))
    return n


def _check_item(x: Any, what: str) -> "Item":
    if not isinstance(x, Item):
        raise CborJsonError(
            ERR_ITEM, "{} must be a CBOR item, got {}".format(what, type(x).__name__))
    return x


def _as_chunks(chunks: Iterable[Any]) -> Tuple[bytes, ...]:
    out = []
    for c in chunks:
        if not isinstance(c, (bytes, bytearray, memoryview)):
            raise CborJsonError(ERR_ITEM, "chunk must be bytes")
        out.append(bytes(c))
    return tuple(out)


class Item:
    """Base class for CBOR items.  Subclasses set `major` and `__slots__`."""

    __slots__ = ()
    major: int = -1

    def _key(self) -> tuple:
        return tuple(getattr(self, s) for s in self.__slots__)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._key() == other._key()  # type: ignore[attr-defined]

    def __ne__(self, other: object) -> bool:
        eq = self.__eq__(other)
        return eq if eq is NotImplemented else not eq

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        args = ", ".join("{}={!r}".format(s, getattr(self, s)) for s in self.__slots__)
        return "{}({})".format(type(self).__name__, args)


class UInt(Item):
    __slots__ = ("value",)
    major = TYPE_UINT

    def __init__(self, value: int) -> None:
        self.value = _check_u64(value, "UInt value")


class NegInt(Item):
    """Negative integer stored the way CBOR carries it: value = -1 - magnitude."""

    __slots__ = ("magnitude",)
    major = TYPE_NEGINT

    def __init__(self, magnitude: int) -> None:
        self.magnitude = _check_u64(magnitude, "NegInt magnitude")

    @classmethod
    def from_int(cls, n: int) -> "NegInt":
        return cls(-1 - n)

    @property
    def value(self) -> int:
        return -1 - self.magnitude


class ByteString(Item):
    """Byte string.  `chunks` is None for a definite string."""

    __slots__ = ("data", "chunks")
    major = TYPE_BYTESTRING

    def __init__(self, data: bytes = b"",
                 chunks: Optional[Iterable[bytes]] = None) -> None:
        if chunks is not None:
            self.chunks: Optional[Tuple[bytes, ...]] = _as_chunks(chunks)
            self.data = b""
        else:
            if not isinstance(data, (bytes, bytearray, memoryview)):
                raise CborJsonError(ERR_ITEM, "ByteString data must be bytes")
            self.chunks = None
            self.data = bytes(data)

    @classmethod
    def indefinite(cls, chunks: Iterable[bytes]) -> "ByteString":
        return cls(chunks=chunks)

    @property
    def definite(self) -> bool:
        return self.chunks is None


class String(Item):
    """Text string held as its UTF-8 bytes.  `chunks` is None when definite.

    The decoder validates UTF-8; the model does not re-check it.
    """

    __slots__ = ("data", "chunks")
    major = TYPE_STRING

    def __init__(self, data: bytes = b"",
                 chunks: Optional[Iterable[bytes]] = None) -> None:
        if chunks is not None:
            self.chunks: Optional[Tuple[bytes, ...]] = _as_chunks(chunks)
            self.data = b""
        else:
            if not isinstance(data, (bytes, bytearray, memoryview)):
                raise CborJsonError(ERR_ITEM, "String data must be UTF-8 bytes")
            self.chunks = None
            self.data = bytes(data)

    @classmethod
    def from_text(cls, text: str) -> "String":
        return cls(text.encode("utf-8", errors="surrogatepass"))

    @classmethod
    def indefinite(cls, chunks: Iterable[bytes]) -> "String":
        return cls(chunks=chunks)

    @property
    def definite(self) -> bool:
        return self.chunks is None


class Array(Item):
    __slots__ = ("items",)
    major = TYPE_ARRAY

    def __init__(self, items: Iterable[Item] = ()) -> None:
        self.items: Tuple[Item, ...] = tuple(
            _check_item(x, "Array element") for x in items)

    def __len__(self) -> int:
        return len(self.items)


class Map(Item):
    """Ordered key/value pairs.  Duplicate keys are kept as given."""

    __slots__ = ("pairs",)
    major = TYPE_MAP

    def __init__(self, pairs: Iterable[Tuple[Item, Item]] = ()) -> None:
        out = []
        for k, v in pairs:
            out.append((_check_item(k, "Map key"), _check_item(v, "Map value")))
        self.pairs: Tuple[Tuple[Item, Item], ...] = tuple(out)

    def __len__(self) -> int:
        return len(self.pairs)


class Tag(Item):
    __slots__ = ("tag", "item")
    major = TYPE_TAG

    def __init__(self, tag: int, item: Item) -> None:
        self.tag = _check_u64(tag, "Tag number")
        self.item = _check_item(item, "Tagged item")


class Simple(Item):
    """Control (simple) value from major type 7."""

    __slots__ = ("value",)
    major = TYPE_FLOAT_CTRL

    def __init__(self, value: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 255:
            raise CborJsonError(ERR_ITEM, "simple value must be in 0..255")
        self.value = value

    @property
    def is_bool(self) -> bool:
        return self.value in (SIMPLE_FALSE, SIMPLE_TRUE)

    @property
    def is_null(self) -> bool:
        return self.value == SIMPLE_NULL


class Float(Item):
    """Floating-point value.  `width` is the encoded size in bytes."""

    __slots__ = ("value", "width")
    major = TYPE_FLOAT_CTRL

    def __init__(self, value: float, width: int = FLOAT_DOUBLE) -> None:
        if width not in (FLOAT_HALF, FLOAT_SINGLE, FLOAT_DOUBLE):
            raise CborJsonError(ERR_ITEM, "float width must be 2, 4 or 8")
        self.value = float(value)
        self.width = width

    def _key(self) -> tuple:
        # NaN != NaN would make two decodes of the same bytes unequal.
        v = self.value
        return ("nan" if v != v else v, self.width)


# Convenience singletons.  Items are immutable so sharing is safe.
FALSE = Simple(SIMPLE_FALSE)
TRUE = Simple(SIMPLE_TRUE)
NULL = Simple(SIMPLE_NULL)
UNDEFINED = Simple(SIMPLE_UNDEFINED)
