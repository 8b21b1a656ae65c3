"""cbor2json constants — major types, simple values, placeholders, limits.

Major-type numbers follow RFC 8949 §3.1 (the top three bits of the
initial byte).  The placeholder strings are part of the output contract:
tools that grep converted output for unsupported items depend on them.
"""

from __future__ import annotations

import sys
from typing import Tuple

# ── Major types (RFC 8949 §3.1) ──────────────────────────────
TYPE_UINT: int = 0
TYPE_NEGINT: int = 1
TYPE_BYTESTRING: int = 2
TYPE_STRING: int = 3
TYPE_ARRAY: int = 4
TYPE_MAP: int = 5
TYPE_TAG: int = 6
TYPE_FLOAT_CTRL: int = 7

MAJOR_TYPES: Tuple[int, ...] = (
    TYPE_UINT,
    TYPE_NEGINT,
    TYPE_BYTESTRING,
    TYPE_STRING,
    TYPE_ARRAY,
    TYPE_MAP,
    TYPE_TAG,
    TYPE_FLOAT_CTRL,
)

# ── Additional-information values ────────────────────────────
AI_UINT8: int = 24
AI_UINT16: int = 25
AI_UINT32: int = 26
AI_UINT64: int = 27
AI_INDEFINITE: int = 31

BREAK_BYTE: int = 0xFF

# ── Simple values (major type 7) ─────────────────────────────
SIMPLE_FALSE: int = 20
SIMPLE_TRUE: int = 21
SIMPLE_NULL: int = 22
SIMPLE_UNDEFINED: int = 23

# Float widths in bytes, as carried on the wire.
FLOAT_HALF: int = 2
FLOAT_SINGLE: int = 4
FLOAT_DOUBLE: int = 8

# ── Output placeholders ──────────────────────────────────────
UNSUPPORTED_CHUNKED_BYTESTRING: str = "Unsupported CBOR item: Chunked Bytestring"
UNSUPPORTED_CHUNKED_STRING: str = "Unsupported CBOR item: Chunked string"
UNSUPPORTED_CONTROL_VALUE: str = "Unsupported CBOR item: Control value"

BYTESTRING_PREFIX: str = "b"
TAG_KEY_PREFIX: str = "tag_"
SURROGATE_KEY_PREFIX: str = "Surrogate key "

# ── Limits ───────────────────────────────────────────────────
# String keys longer than this many UTF-8 bytes are cut down to it.
MAX_KEY_BYTES: int = 127

# Containers and tags each add one level.  Kept well under CPython's
# default recursion limit since decode and convert both recurse.
MAX_DEPTH: int = 256


def depth_ceiling() -> int:
    """Deepest nesting the recursive walkers can take at the current recursion limit.

    Each level costs up to two frames (the walker plus a comprehension or
    map helper); the rest is headroom for the caller's own stack.
    """
    return max(1, (sys.getrecursionlimit() - 150) // 3)


def clamp_depth(max_depth: int) -> int:
    return min(max_depth, depth_ceiling())


UINT64_MAX: int = 2**64 - 1

# Largest magnitude a double represents exactly (2**53).
DOUBLE_EXACT_MAX: int = 2**53
