"""
Canonical JSON and event hash tests.

The event log computes event hashes over this exact encoding, so these
tests pin the byte-level output, not just determinism.
"""

import hashlib

import pytest

from intrace_verify import (
    EVENT_HASH_FIELDS,
    EventRecord,
    canonical_json,
    canonicalize,
    compute_event_hash,
    event_hash_payload,
    sha256_hex,
)


class TestCanonicalJson:
    """Test canonical JSON serialization."""

    def test_sorted_keys(self):
        """Object keys must be sorted by Unicode code point."""
        obj = {"z": 1, "a": 2, "m": 3}
        assert canonical_json(obj) == '{"a":2,"m":3,"z":1}'

    def test_no_whitespace(self):
        obj = {"key": [1, 2, 3]}
        assert canonical_json(obj) == '{"key":[1,2,3]}'

    def test_nested_sorting(self):
        """Nested objects must also have sorted keys."""
        obj = {"outer": {"z": 1, "a": 2}}
        assert canonical_json(obj) == '{"outer":{"a":2,"z":1}}'

    def test_arrays_keep_order(self):
        assert canonical_json(["b", "a", {"y": 1, "x": 2}]) == '["b","a",{"x":2,"y":1}]'

    def test_null_value(self):
        assert canonical_json({"key": None}) == '{"key":null}'
        assert canonical_json(None) == "null"

    def test_boolean_values(self):
        assert canonical_json(True) == "true"
        assert canonical_json(False) == "false"

    def test_integer_values(self):
        assert canonical_json(42) == "42"
        assert canonical_json(-17) == "-17"
        assert canonical_json(0) == "0"

    def test_float_values(self):
        """Float values use shortest representation."""
        assert canonical_json(3.14) == "3.14"
        # Integer floats should not have decimal
        assert canonical_json(1.0) == "1"
        assert canonical_json(1e20) == "100000000000000000000"

    @pytest.mark.parametrize("value,expected", [
        (0.1, "0.1"),
        (-2.5, "-2.5"),
        (123456.789, "123456.789"),
        (0.000001, "0.000001"),
        (0.00001, "0.00001"),
        (0.0000123, "0.0000123"),
        (1e-7, "1e-7"),
        (-1.5e-7, "-1.5e-7"),
        (1e21, "1e+21"),
        (1.5e300, "1.5e+300"),
        (-0.0, "0"),
        (10**21, "1e+21"),
    ])
    def test_number_layout_matches_json_stringify(self, value, expected):
        """Decimal notation for 1e-6 <= |x| < 1e21, unpadded signed exponent otherwise."""
        assert canonical_json(value) == expected

    def test_string_escaping(self):
        assert canonical_json("hello\nworld") == '"hello\\nworld"'
        assert canonical_json('say "hi"\\') == '"say \\"hi\\"\\\\"'
        assert canonical_json("\x01") == '"\\u0001"'

    def test_non_ascii_kept_raw(self):
        assert canonical_json({"city": "Zürich"}) == '{"city":"Zürich"}'
        assert canonicalize({"city": "Zürich"}) == '{"city":"Zürich"}'.encode("utf-8")

    def test_code_point_key_order(self):
        """Uppercase sorts before lowercase; no locale collation."""
        assert canonical_json({"b": 1, "B": 2, "a": 3}) == '{"B":2,"a":3,"b":1}'

    def test_rejects_non_finite_numbers(self):
        with pytest.raises(TypeError):
            canonical_json(float("nan"))
        with pytest.raises(TypeError):
            canonical_json({"x": float("inf")})

    def test_rejects_unsupported_types(self):
        with pytest.raises(TypeError):
            canonical_json({"when": object()})
        with pytest.raises(TypeError):
            canonical_json({1: "non-string key"})

    def test_idempotent(self):
        obj = {"b": [1, {"d": None, "c": True}], "a": "x"}
        assert canonical_json(obj) == canonical_json(obj)


class TestOrderIndependence:
    FORWARD = [
        ("event_id", "e1"),
        ("prev_event_hash", None),
        ("capture_id", "c1"),
        ("url", "https://x"),
        ("captured_at_utc", "2024-01-01T00:00:00Z"),
        ("hashes", {"screenshot": "aa"}),
        ("operator_key_id", "k1"),
    ]

    def test_forward_and_reverse_construction_match(self):
        forward = dict(self.FORWARD)
        reverse = dict(reversed(self.FORWARD))
        assert list(forward) != list(reverse)
        assert canonicalize(forward) == canonicalize(reverse)

    def test_pinned_encoding(self):
        expected = (
            '{"capture_id":"c1","captured_at_utc":"2024-01-01T00:00:00Z",'
            '"event_id":"e1","hashes":{"screenshot":"aa"},"operator_key_id":"k1",'
            '"prev_event_hash":null,"url":"https://x"}'
        )
        assert canonical_json(dict(self.FORWARD)) == expected


class TestEventHash:

    def test_sha256_hex(self):
        assert sha256_hex(b"") == hashlib.sha256(b"").hexdigest()
        assert sha256_hex(b"abc") == (
            "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
        )

    def test_payload_drops_unhashed_fields(self, signed_event):
        raw = {**signed_event, "received_at": "2024-01-01T00:00:01Z"}
        payload = event_hash_payload(raw)
        assert set(payload) == set(EVENT_HASH_FIELDS)
        assert "signature" not in payload
        assert "event_hash" not in payload

    def test_record_and_mapping_hash_equal(self, signed_event):
        record = EventRecord.from_dict(signed_event)
        assert compute_event_hash(record) == compute_event_hash(signed_event)
        assert compute_event_hash(record) == signed_event["event_hash"]

    def test_extra_fields_do_not_change_hash(self, signed_event):
        record = EventRecord.from_dict({**signed_event, "sequence": 7})
        assert record.extra == {"sequence": 7}
        assert compute_event_hash(record) == signed_event["event_hash"]

    def test_absent_field_hashes_as_null(self, base_event):
        with_null = dict(base_event)
        without = {k: v for k, v in base_event.items() if k != "prev_event_hash"}
        assert compute_event_hash(without) == compute_event_hash(with_null)

    def test_hash_is_digest_of_canonical_subset(self, base_event):
        expected = hashlib.sha256(canonical_json(base_event).encode("utf-8")).hexdigest()
        assert compute_event_hash(base_event) == expected

    @pytest.mark.parametrize("field", EVENT_HASH_FIELDS)
    def test_every_hashed_field_matters(self, base_event, field):
        changed = dict(base_event)
        changed[field] = "tampered"
        assert compute_event_hash(changed) != compute_event_hash(base_event)
