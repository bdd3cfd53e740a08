"""Canonical byte serialization — the one true hashing input for a certificate.

Canonical form: JSON with sorted keys, Unicode preserved, compact
separators, UTF-8 encoded. This ensures the same document always
produces the same bytes, regardless of key ordering, whitespace,
locale or timezone of the machine doing the serialization.

When the fingerprint is bound to the visual content, the encoded PNG
is embedded as base64 text under "image", the same shape the issuance
page hashed (recipient, description and image data in one object).
"""

from __future__ import annotations

import base64
import json
from typing import Any, Optional


CANONICAL_SCHEMA = "certchain/1"


def canonical_json(payload: dict[str, Any]) -> str:
    """Serialize a payload to its canonical JSON text."""
    return json.dumps(
        payload,
        sort_keys=True,
        ensure_ascii=False,
        separators=(",", ":"),
    )


def canonical_bytes(fields: dict[str, Any], raster_png: Optional[bytes] = None) -> bytes:
    """Build canonical bytes from document fields and, optionally, the raster.

    Args:
        fields: Fingerprint-relevant document fields (raw values, no
            placeholders). Reserved keys "schema" and "image" are rejected.
        raster_png: Encoded PNG bytes to bind into the fingerprint, or None.
    """
    reserved = {"schema", "image"} & set(fields)
    if reserved:
        raise ValueError(f"Reserved canonical keys in fields: {sorted(reserved)}")

    payload: dict[str, Any] = dict(fields)
    payload["schema"] = CANONICAL_SCHEMA
    if raster_png is not None:
        payload["image"] = base64.b64encode(raster_png).decode("ascii")
    return canonical_json(payload).encode("utf-8")
