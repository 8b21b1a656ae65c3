"""Unit tests for the CBOR decoder and the bytes-to-JSON pipeline.

Hex fixtures follow RFC 8949 Appendix A where the RFC has one.  cbor2
encodes the larger fixtures so they stay readable.
"""

from __future__ import annotations

import math
import os
import sys
import unittest

import cbor2

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from cbor2json import (
    ERR_LIMIT_DEPTH,
    ERR_MALFORMED,
    ERR_NODATA,
    ERR_NOTENOUGHDATA,
    NULL,
    TRUE,
    UNDEFINED,
    UNSUPPORTED_CHUNKED_BYTESTRING,
    UNSUPPORTED_CHUNKED_STRING,
    Array,
    ByteString,
    CborJsonError,
    Float,
    Map,
    NegInt,
    Simple,
    String,
    Tag,
    UInt,
    convert_bytes,
    decode,
)


def dec(hexstr: str):
    return decode(bytes.fromhex(hexstr)).item


# ── Scalars ───────────────────────────────────────────────────

class TestIntegers(unittest.TestCase):
    def test_argument_widths(self):
        cases = {
            "00": 0, "17": 23, "1818": 24, "1903e8": 1000,
            "1a000f4240": 1000000, "1b000000e8d4a51000": 1000000000000,
            "1bffffffffffffffff": 2**64 - 1,
        }
        for hexstr, want in cases.items():
            with self.subTest(hexstr=hexstr):
                self.assertEqual(dec(hexstr), UInt(want))

    def test_negative(self):
        self.assertEqual(dec("20"), NegInt(0))
        self.assertEqual(dec("3863"), NegInt(99))
        self.assertEqual(dec("3bffffffffffffffff").value, -(2**64))

    def test_read_counts_argument_bytes(self):
        self.assertEqual(decode(bytes.fromhex("1903e8")).read, 3)


class TestStrings(unittest.TestCase):
    def test_bytestring(self):
        self.assertEqual(dec("4401020304"), ByteString(b"\x01\x02\x03\x04"))

    def test_text(self):
        self.assertEqual(dec("6449455446"), String.from_text("IETF"))
        self.assertEqual(dec("62c3bc"), String.from_text("ü"))

    def test_chunked_bytestring_kept_chunked(self):
        item = dec("5f42010243030405ff")
        self.assertFalse(item.definite)
        self.assertEqual(item.chunks, (b"\x01\x02", b"\x03\x04\x05"))

    def test_chunked_text_kept_chunked(self):
        item = dec("7f657374726561646d696e67ff")
        self.assertFalse(item.definite)
        self.assertEqual(item.chunks, (b"strea", b"ming"))

    def test_invalid_utf8(self):
        with self.assertRaises(CborJsonError) as ctx:
            dec("61ff")
        self.assertEqual(ctx.exception.code, ERR_MALFORMED)

    def test_wrong_chunk_type(self):
        with self.assertRaises(CborJsonError) as ctx:
            dec("5f6161ff")
        self.assertEqual(ctx.exception.code, ERR_MALFORMED)
        self.assertEqual(ctx.exception.position, 1)

    def test_nested_indefinite_chunk(self):
        with self.assertRaises(CborJsonError) as ctx:
            dec("5f5fffff")
        self.assertEqual(ctx.exception.code, ERR_MALFORMED)


class TestFloatCtrl(unittest.TestCase):
    def test_simple_values(self):
        self.assertEqual(dec("f4"), Simple(20))
        self.assertEqual(dec("f5"), TRUE)
        self.assertEqual(dec("f6"), NULL)
        self.assertEqual(dec("f7"), UNDEFINED)
        self.assertEqual(dec("f0"), Simple(16))
        self.assertEqual(dec("f8ff"), Simple(255))

    def test_two_byte_simple_below_32_malformed(self):
        with self.assertRaises(CborJsonError) as ctx:
            dec("f818")
        self.assertEqual(ctx.exception.code, ERR_MALFORMED)

    def test_half_float(self):
        self.assertEqual(dec("f93c00"), Float(1.0, 2))
        self.assertEqual(dec("f97c00").value, float("inf"))
        self.assertTrue(math.isnan(dec("f97e00").value))

    def test_single_float(self):
        self.assertEqual(dec("fa47c35000"), Float(100000.0, 4))

    def test_double_float(self):
        self.assertEqual(dec("fb3ff199999999999a"), Float(1.1, 8))

    def test_stray_break(self):
        with self.assertRaises(CborJsonError) as ctx:
            dec("ff")
        self.assertEqual(ctx.exception.code, ERR_MALFORMED)


# ── Containers and tags ───────────────────────────────────────

class TestContainers(unittest.TestCase):
    def test_array(self):
        self.assertEqual(dec("83010203"), Array([UInt(1), UInt(2), UInt(3)]))

    def test_indefinite_array(self):
        self.assertEqual(dec("9f018202039f0405ffff"), Array([
            UInt(1), Array([UInt(2), UInt(3)]), Array([UInt(4), UInt(5)])]))

    def test_map(self):
        self.assertEqual(dec("a201020304"), Map([(UInt(1), UInt(2)), (UInt(3), UInt(4))]))

    def test_indefinite_map(self):
        item = dec("bf61610161629f0203ffff")
        self.assertEqual(item, Map([
            (String.from_text("a"), UInt(1)),
            (String.from_text("b"), Array([UInt(2), UInt(3)])),
        ]))

    def test_map_keeps_duplicate_keys(self):
        self.assertEqual(len(dec("a2010201f5")), 2)

    def test_tag(self):
        self.assertEqual(dec("c11a514b67b0"), Tag(1, UInt(1363896240)))

    def test_break_inside_map_pair(self):
        with self.assertRaises(CborJsonError) as ctx:
            dec("bf01ff")
        self.assertEqual(ctx.exception.code, ERR_MALFORMED)

    def test_indefinite_not_allowed_on_integers(self):
        for hexstr in ["1f", "3f", "df"]:
            with self.subTest(hexstr=hexstr):
                with self.assertRaises(CborJsonError) as ctx:
                    dec(hexstr)
                self.assertEqual(ctx.exception.code, ERR_MALFORMED)


# ── Errors and positions ──────────────────────────────────────

class TestErrors(unittest.TestCase):
    def test_empty_input(self):
        with self.assertRaises(CborJsonError) as ctx:
            decode(b"")
        self.assertEqual(ctx.exception.code, ERR_NODATA)

    def test_offset_at_end(self):
        with self.assertRaises(CborJsonError) as ctx:
            decode(b"\x00", 1)
        self.assertEqual(ctx.exception.code, ERR_NODATA)

    def test_truncated_argument(self):
        with self.assertRaises(CborJsonError) as ctx:
            dec("1900")
        self.assertEqual(ctx.exception.code, ERR_NOTENOUGHDATA)
        self.assertEqual(ctx.exception.position, 1)
        self.assertEqual(ctx.exception.read, 1)

    def test_truncated_array(self):
        # The declared count is checked against the remaining input up front.
        with self.assertRaises(CborJsonError) as ctx:
            dec("830102")
        self.assertEqual(ctx.exception.code, ERR_NOTENOUGHDATA)
        self.assertEqual(ctx.exception.position, 0)
        self.assertEqual(ctx.exception.read, 1)

    def test_truncated_nested_item(self):
        with self.assertRaises(CborJsonError) as ctx:
            dec("82011900")
        self.assertEqual(ctx.exception.code, ERR_NOTENOUGHDATA)
        self.assertEqual(ctx.exception.position, 3)
        self.assertEqual(ctx.exception.read, 3)

    def test_missing_break(self):
        with self.assertRaises(CborJsonError) as ctx:
            dec("9f0102")
        self.assertEqual(ctx.exception.code, ERR_NOTENOUGHDATA)

    def test_huge_declared_count(self):
        with self.assertRaises(CborJsonError) as ctx:
            dec("9b000000010000000000")
        self.assertEqual(ctx.exception.code, ERR_NOTENOUGHDATA)

    def test_huge_declared_length(self):
        with self.assertRaises(CborJsonError) as ctx:
            dec("5bffffffffffffffff00")
        self.assertEqual(ctx.exception.code, ERR_NOTENOUGHDATA)

    def test_reserved_additional_info(self):
        for hexstr in ["1c", "3d", "5e", "fc"]:
            with self.subTest(hexstr=hexstr):
                with self.assertRaises(CborJsonError) as ctx:
                    dec(hexstr)
                self.assertEqual(ctx.exception.code, ERR_MALFORMED)
                self.assertEqual(ctx.exception.position, 0)

    def test_position_is_absolute(self):
        with self.assertRaises(CborJsonError) as ctx:
            decode(bytes.fromhex("ffff1900"), 2)
        self.assertEqual(ctx.exception.position, 3)
        self.assertEqual(ctx.exception.read, 1)

    def test_depth_limit(self):
        data = b"\x81" * 300 + b"\x00"
        with self.assertRaises(CborJsonError) as ctx:
            decode(data)
        self.assertEqual(ctx.exception.code, ERR_LIMIT_DEPTH)

    def test_depth_limit_configurable(self):
        data = b"\x81" * 20 + b"\x00"
        self.assertEqual(decode(data, max_depth=20).read, 21)
        with self.assertRaises(CborJsonError) as ctx:
            decode(data, max_depth=10)
        self.assertEqual(ctx.exception.code, ERR_LIMIT_DEPTH)

    def test_depth_limit_clamped_to_recursion_limit(self):
        data = b"\x81" * 3000 + b"\x00"
        with self.assertRaises(CborJsonError) as ctx:
            decode(data, max_depth=5000)
        self.assertEqual(ctx.exception.code, ERR_LIMIT_DEPTH)


# ── Offsets and trailing data ─────────────────────────────────

class TestOffsets(unittest.TestCase):
    def test_offset(self):
        result = decode(b"\x00\x01\x02", 1)
        self.assertEqual(result.item, UInt(1))
        self.assertEqual(result.read, 1)

    def test_trailing_bytes_ignored(self):
        result = decode(bytes.fromhex("8201020304"))
        self.assertEqual(result.item, Array([UInt(1), UInt(2)]))
        self.assertEqual(result.read, 3)

    def test_negative_offset(self):
        with self.assertRaises(ValueError):
            decode(b"\x00", -1)


# ── Full pipeline ─────────────────────────────────────────────

class TestConvertBytes(unittest.TestCase):
    def test_document(self):
        data = cbor2.dumps({"name": "node-1", 7: [1, -2, 2.5], "raw": b"\x00\xff", "ok": None})
        self.assertEqual(convert_bytes(data), {
            "name": "node-1", "7": [1, -2, 2.5], "raw": "b00FF", "ok": None})

    def test_tagged(self):
        self.assertEqual(convert_bytes(bytes.fromhex("c7f5")), {"tag_7": True})

    def test_chunked_placeholders(self):
        self.assertEqual(convert_bytes(bytes.fromhex("825f4101ff7f6161ff")),
                         [UNSUPPORTED_CHUNKED_BYTESTRING, UNSUPPORTED_CHUNKED_STRING])

    def test_array_key(self):
        self.assertEqual(convert_bytes(bytes.fromhex("a18001")), {"Surrogate key 0": 1})

    def test_options_forwarded(self):
        data = cbor2.dumps({"abcdef": 1})
        self.assertEqual(convert_bytes(data, max_key_bytes=2), {"ab": 1})

    def test_depth_option_bounds_decoder(self):
        with self.assertRaises(CborJsonError) as ctx:
            convert_bytes(b"\x81\x81\x00", max_depth=1)
        self.assertEqual(ctx.exception.code, ERR_LIMIT_DEPTH)

    def test_huge_depth_option_still_bounded(self):
        with self.assertRaises(CborJsonError) as ctx:
            convert_bytes(b"\x81" * 3000 + b"\x00", max_depth=5000)
        self.assertEqual(ctx.exception.code, ERR_LIMIT_DEPTH)


if __name__ == "__main__":
    unittest.main()
