"""Tests for canonical byte serialization."""

import base64
import json

import pytest

from certchain.crypto.canonical import CANONICAL_SCHEMA, canonical_bytes, canonical_json


class TestCanonicalJson:
    def test_key_order_irrelevant(self) -> None:
        assert canonical_json({"b": 1, "a": 2}) == canonical_json({"a": 2, "b": 1})

    def test_compact_and_sorted(self) -> None:
        assert canonical_json({"b": 1, "a": [1, 2]}) == '{"a":[1,2],"b":1}'

    def test_unicode_preserved(self) -> None:
        assert canonical_json({"name": "Zoë"}) == '{"name":"Zoë"}'


class TestCanonicalBytes:
    def test_schema_tagged(self) -> None:
        payload = json.loads(canonical_bytes({"recipient_name": "Alice"}))
        assert payload == {"recipient_name": "Alice", "schema": CANONICAL_SCHEMA}

    def test_utf8_encoded(self) -> None:
        assert "Zoë".encode("utf-8") in canonical_bytes({"recipient_name": "Zoë"})

    def test_raster_embedded_as_base64(self) -> None:
        payload = json.loads(canonical_bytes({"recipient_name": "Alice"}, b"\x89PNG"))
        assert base64.b64decode(payload["image"]) == b"\x89PNG"

    def test_no_raster_no_image_key(self) -> None:
        assert b"image" not in canonical_bytes({"recipient_name": "Alice"})

    @pytest.mark.parametrize("key", ["schema", "image"])
    def test_reserved_keys_rejected(self, key: str) -> None:
        with pytest.raises(ValueError, match="Reserved"):
            canonical_bytes({key: "x"})
