"""Final JSON encoding of a finished IR tree.

WHY: The traversal engine stops at a JSON-shaped tree. Turning that
tree into bytes is the job of a standard JSON encoder; this module
configures it and teaches it the handful of opaque scalars the IR may
carry (dates, enums, UUIDs, decimals, bytes).

HOW: json.dumps with compact separators and sorted keys, so the same
IR always encodes to the same bytes. The default hook renders the
known opaque types and raises UnsupportedTypeError for everything
else; json propagates that error unchanged.

RULES:
- Output is UTF-8 bytes, non-ASCII kept as is
- Keys are sorted; separators are "," and ":"
- NaN/Infinity never reach the encoder as floats (the traversal engine
  turns them into strings); allow_nan=False guards the rest
- date/time → isoformat(), Enum → value, UUID/Decimal → str,
  bytes → base64 text
"""

from __future__ import annotations

import base64
import datetime
import enum
import json
import uuid
from decimal import Decimal
from typing import Any

from jsongroup import config
from jsongroup.core.ir import IR
from jsongroup.errors import UnsupportedTypeError


def _default(obj: Any) -> Any:
    if isinstance(obj, (datetime.datetime, datetime.date, datetime.time)):
        return obj.isoformat()
    if isinstance(obj, enum.Enum):
        return obj.value
    if isinstance(obj, (uuid.UUID, Decimal)):
        return str(obj)
    if isinstance(obj, (bytes, bytearray)):
        return base64.b64encode(bytes(obj)).decode("ascii")
    raise UnsupportedTypeError(config.ROOT_PATH, type(obj).__qualname__, value=obj)


def encode(ir: IR) -> bytes:
    """Encode an IR tree to JSON bytes.

    Raises:
        UnsupportedTypeError: If the tree holds a value with no JSON form.
        ValueError / TypeError: From json itself; callers translate these
            with wrap_error(..., encoding=True).
    """
    text = json.dumps(
        ir,
        default=_default,
        ensure_ascii=False,
        allow_nan=False,
        sort_keys=True,
        separators=(",", ":"),
    )
    return text.encode("utf-8")
