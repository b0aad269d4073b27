"""
Values module behavioral tests (types, tagged scalars, text parsing).

Scope
- OptionType metadata (widths, bounds, value-taking).
- OptionValue factories tag payloads with exactly their own type.
- OptionValue is immutable and compares by (type, payload).
- parse_value accepts exactly the in-range numerals of each width.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from quiver import OptionType, OptionValue, parse_value

INTEGER_TYPES = (
    OptionType.INT8, OptionType.INT16, OptionType.INT32, OptionType.INT64,
    OptionType.UINT8, OptionType.UINT16, OptionType.UINT32, OptionType.UINT64,
)


class TestOptionType(TestCase):
    """Behavioral tests for OptionType metadata."""

    def testBounds(self):
        self.assertEqual(OptionType.INT8.bounds, (-128, 127))
        self.assertEqual(OptionType.UINT16.bounds, (0, 65535))
        self.assertEqual(OptionType.UINT64.bounds, (0, 2 ** 64 - 1))
        self.assertIsNone(OptionType.FLOAT32.bounds)
        self.assertIsNone(OptionType.STRING.bounds)

    def testOnlyBoolTakesNoValue(self):
        for type in OptionType:
            with self.subTest(type=type):
                self.assertEqual(type.takes_value, type is not OptionType.BOOL)

    def testIntegralAndFloating(self):
        self.assertTrue(all(type.integral for type in INTEGER_TYPES))
        self.assertTrue(OptionType.FLOAT64.floating)
        self.assertFalse(OptionType.FLOAT64.integral)
        self.assertFalse(OptionType.STRING.integral)


class TestOptionValue(TestCase):
    """Behavioral tests for OptionValue construction and identity."""

    def testFactoriesTagTheirOwnType(self):
        self.assertIs(OptionValue.create_bool(True).type, OptionType.BOOL)
        self.assertIs(OptionValue.create_string("x").type, OptionType.STRING)
        self.assertIs(OptionValue.create_int8(5).type, OptionType.INT8)
        self.assertIs(OptionValue.create_uint64(5).type, OptionType.UINT64)
        self.assertIs(OptionValue.create_float32(1.5).type, OptionType.FLOAT32)
        self.assertIs(OptionValue.create_float64(1.5).type, OptionType.FLOAT64)

    def testCreateIntegerUsesGivenWidth(self):
        value = OptionValue.create_integer(OptionType.INT16, -300)
        self.assertIs(value.type, OptionType.INT16)
        self.assertEqual(value.payload, -300)
        with self.assertRaises(TypeError):
            OptionValue.create_integer(OptionType.STRING, 1)

    def testMismatchedPayloadRejected(self):
        with self.assertRaises(TypeError):
            OptionValue.create_bool(1)
        with self.assertRaises(TypeError):
            OptionValue.create_string(5)
        with self.assertRaises(TypeError):
            OptionValue.create_int8(True)
        with self.assertRaises(TypeError):
            OptionValue.create_float64("1.5")

    def testOutOfRangePayloadRejected(self):
        with self.assertRaises(ValueError):
            OptionValue.create_int8(200)
        with self.assertRaises(ValueError):
            OptionValue.create_uint32(-1)
        with self.assertRaises(ValueError):
            OptionValue.create_float32(1e39)
        with self.assertRaises(ValueError):
            OptionValue.create_float64(float("nan"))

    def testFloatPayloadsAreFloats(self):
        value = OptionValue.create_float64(2)
        self.assertIsInstance(value.payload, float)
        self.assertEqual(value.payload, 2.0)

    def testImmutable(self):
        value = OptionValue.create_int32(3)
        with self.assertRaises(AttributeError):
            value.payload = 4
        with self.assertRaises(AttributeError):
            value._payload = 4
        with self.assertRaises(AttributeError):
            del value._type
        self.assertEqual(value.payload, 3)

    def testEqualityIncludesType(self):
        self.assertEqual(OptionValue.create_int8(5), OptionValue.create_int8(5))
        self.assertNotEqual(OptionValue.create_int8(5), OptionValue.create_int16(5))
        self.assertEqual(len({OptionValue.create_int8(5), OptionValue.create_int8(5)}), 1)


class TestParseValue(TestCase):
    """Behavioral tests for parse_value."""

    def testBoolAlwaysTrue(self):
        self.assertEqual(parse_value(OptionType.BOOL, "false"), OptionValue.create_bool(True))
        self.assertEqual(parse_value(OptionType.BOOL, ""), OptionValue.create_bool(True))

    def testStringKeptVerbatim(self):
        self.assertEqual(parse_value(OptionType.STRING, "  John 3 ").payload, "  John 3 ")
        self.assertEqual(parse_value(OptionType.STRING, "").payload, "")

    def testInt8(self):
        self.assertIsNone(parse_value(OptionType.INT8, "200"))
        self.assertEqual(parse_value(OptionType.INT8, "-5"), OptionValue.create_int8(-5))
        self.assertIsNone(parse_value(OptionType.INT8, "5x"))

    def testEveryIntegerWidthAcceptsExactlyItsRange(self):
        for type in INTEGER_TYPES:
            lower, upper = type.bounds
            with self.subTest(type=type):
                self.assertEqual(parse_value(type, str(lower)).payload, lower)
                self.assertEqual(parse_value(type, str(upper)).payload, upper)
                self.assertIsNone(parse_value(type, str(lower - 1)))
                self.assertIsNone(parse_value(type, str(upper + 1)))

    def testOverlongNumeralRejected(self):
        self.assertIsNone(parse_value(OptionType.INT32, "1" * 5000))
        self.assertIsNone(parse_value(OptionType.UINT64, "-" + "9" * 5000))

    def testZeroPaddedNumeralAccepted(self):
        self.assertEqual(parse_value(OptionType.INT32, "0" * 5000 + "3"), OptionValue.create_int32(3))
        self.assertEqual(parse_value(OptionType.INT8, "-" + "0" * 100 + "128").payload, -128)
        self.assertEqual(parse_value(OptionType.UINT64, "0" * 50 + "18446744073709551615").payload, 2 ** 64 - 1)

    def testFloats(self):
        self.assertEqual(parse_value(OptionType.FLOAT64, "2.5"), OptionValue.create_float64(2.5))
        self.assertIsNone(parse_value(OptionType.FLOAT32, "1e39"))
        self.assertIsNotNone(parse_value(OptionType.FLOAT64, "1e39"))
        self.assertIsNone(parse_value(OptionType.FLOAT64, "1e400"))
        self.assertIsNone(parse_value(OptionType.FLOAT64, "inf"))
        self.assertIsNone(parse_value(OptionType.FLOAT64, "two"))

    def testParsedValueTaggedWithRequestedType(self):
        self.assertIs(parse_value(OptionType.UINT8, "7").type, OptionType.UINT8)
        self.assertIs(parse_value(OptionType.FLOAT32, "7").type, OptionType.FLOAT32)

    def testBadArguments(self):
        with self.assertRaises(TypeError):
            parse_value("int8", "1")
        with self.assertRaises(TypeError):
            parse_value(OptionType.INT8, 1)


if __name__ == "__main__":
    unittest.main()
