"""cbor2json error codes and exception class.

Unsupported CBOR constructs are not errors: the converter maps them to
placeholder strings.  The codes below cover what can actually go wrong,
which is malformed input at the decoder, resource limits, strict-key
collisions, and callers handing in something that is not an item.
"""

from __future__ import annotations

from typing import Optional

# ── Error codes ──────────────────────────────────────────────
# Decoder codes mirror the classic CBOR load-result codes so driver
# output reads the same as other CBOR tooling.

ERR_NODATA: str = "ERR_NODATA"                # nothing to decode at offset
ERR_NOTENOUGHDATA: str = "ERR_NOTENOUGHDATA"  # input ends inside an item
ERR_MALFORMED: str = "ERR_MALFORMED"          # syntactically invalid CBOR
ERR_LIMIT_DEPTH: str = "ERR_LIMIT_DEPTH"      # nesting exceeds max_depth
ERR_DUP_KEY: str = "ERR_DUP_KEY"              # key collision (strict_keys)
ERR_ITEM: str = "ERR_ITEM"                    # not a valid CBOR item


class CborJsonError(Exception):
    """Exception for cbor2json decoding and conversion errors.

    `.code` is one of the ERR_* strings above.  Decoder errors also set
    `.position` (byte offset where the problem was found) and `.read`
    (bytes consumed before giving up); both are None elsewhere.
    """

    def __init__(self, code: str, msg: str = "",
                 position: Optional[int] = None,
                 read: Optional[int] = None) -> None:
        super().__init__(msg or code)
        self.code = code
        self.position = position
        self.read = read
