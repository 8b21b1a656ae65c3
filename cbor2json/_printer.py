"""cbor2json printer — JSON value to text.

NaN and Infinity are written as the bare tokens `NaN` / `Infinity`,
which most JSON parsers (Python's included) accept but RFC 8259 does
not.  Pass allow_nan=False to get a ValueError instead.
"""

from __future__ import annotations

import json
from typing import Any, Optional, Union


def dumps(value: Any, indent: Optional[Union[int, str]] = "\t",
          allow_nan: bool = True) -> str:
    """Render a converted value as JSON text.

    indent=None gives compact single-line output.
    """
    if indent is None:
        return json.dumps(value, ensure_ascii=False, allow_nan=allow_nan,
                          separators=(",", ":"))
    return json.dumps(value, indent=indent, ensure_ascii=False, allow_nan=allow_nan)
