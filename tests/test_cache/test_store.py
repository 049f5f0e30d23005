"""Unit tests for the stored entry envelope."""

import json

import pytest

from pricing_cache.cache.store import CachedEntry, decode_entry, encode_entry


class TestEnvelope:
    """Test suite for encode_entry/decode_entry."""

    def test_encode_records_freshness(self):
        """Test the envelope carries value, ttl and fresh_until."""
        payload = json.loads(encode_entry(15000, 300, now=1000.0))

        assert payload["value"] == 15000
        assert payload["ttl"] == 300
        assert payload["fresh_until"] == 1300.0
        assert payload["cached_at"].startswith("1970-01-01T00:16:40")

    def test_decode_envelope(self):
        """Test decoding an envelope written by encode_entry."""
        entry = decode_entry(encode_entry(15000, 300, now=1000.0))

        assert entry == CachedEntry(value=15000, fresh_until=1300.0)
        assert entry.is_fresh(1299.9)
        assert not entry.is_fresh(1300.0)

    def test_decode_bytes(self):
        """Test raw bytes from a non-decoding client are accepted."""
        entry = decode_entry(encode_entry(42, 60, now=0.0).encode("utf-8"))

        assert entry.value == 42

    def test_decode_bare_scalar(self):
        """Test a value written outside this package is treated as fresh."""
        entry = decode_entry("15000")

        assert entry.value == 15000
        assert entry.fresh_until is None
        assert entry.is_fresh(10**12)

    @pytest.mark.parametrize("raw", [None, "null", json.dumps({"value": None})])
    def test_decode_empty_values(self, raw):
        """Test empty values decode to no entry."""
        assert decode_entry(raw) is None

    def test_decode_invalid_json(self):
        """Test garbage raises JSONDecodeError for the caller to handle."""
        with pytest.raises(json.JSONDecodeError):
            decode_entry("invalid json {")

    def test_encode_rejects_unserializable(self):
        """Test non-serializable values raise TypeError."""
        with pytest.raises(TypeError):
            encode_entry({"func": lambda x: x}, 300)

    @pytest.mark.parametrize("fresh_until", ["x", None, True, {"at": 1}])
    def test_decode_validates_fresh_until(self, fresh_until):
        """Test fresh_until must be an epoch number when present."""
        raw = json.dumps({"value": 15000, "fresh_until": fresh_until})

        if fresh_until is None:
            assert decode_entry(raw).fresh_until is None
        else:
            with pytest.raises(ValueError):
                decode_entry(raw)
