# python
"""
Value type behavioral tests.

Scope
- Validate builtin converters (int, float, string, flag) including rejected text.
- Validate EnumType case normalization and membership.
- Validate ConverterType and the duck-typed type protocol helpers.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from optionparser import (
    BUILTIN_TYPES,
    ConverterType,
    EnumType,
    FlagType,
    FloatType,
    IntType,
    StringType,
    TypeInfo,
    coerce_type,
    is_value_type,
    label_of,
)


class TestBuiltinTypes(TestCase):
    """Behavioral tests for the builtin converters."""

    def testIntParsesSignedDecimal(self):
        self.assertEqual(IntType().parse("42"), 42)
        self.assertEqual(IntType().parse("-7"), -7)
        self.assertEqual(IntType().parse("+3"), 3)

    def testIntRejectsPartialNumbers(self):
        for text in ("4x", "", "1.5", "0x10", "1_000"):
            with self.subTest(text=text), self.assertRaises(ValueError):
                IntType().parse(text)

    def testFloatParsesDecimalAndExponent(self):
        self.assertEqual(FloatType().parse("0.5"), 0.5)
        self.assertEqual(FloatType().parse("-2"), -2.0)
        self.assertEqual(FloatType().parse("1e3"), 1000.0)
        self.assertEqual(FloatType().parse(".25"), 0.25)

    def testFloatRejectsNanAndInfinity(self):
        for text in ("NaN", "nan", "inf", "-Infinity", "1.2.3", "abc"):
            with self.subTest(text=text), self.assertRaises(ValueError):
                FloatType().parse(text)

    def testStringIsIdentity(self):
        self.assertEqual(StringType().parse("  spaced  "), "  spaced  ")

    def testFlagWithoutValueIsTrue(self):
        self.assertIs(FlagType().parse(None), True)
        self.assertFalse(FlagType().requires_argument())

    def testFlagWordsAreCaseInsensitive(self):
        for text in ("true", "YES", "t", "Y", "1"):
            with self.subTest(text=text):
                self.assertIs(FlagType().parse(text), True)
        for text in ("false", "No", "F", "n", "0"):
            with self.subTest(text=text):
                self.assertIs(FlagType().parse(text), False)

    def testFlagRejectsOtherWords(self):
        with self.assertRaises(ValueError):
            FlagType().parse("maybe")

    def testBuiltinTableHoldsHelperTypes(self):
        for name in ("int", "float", "string", "flag", "noarg_callback", "arg_callback", "preset"):
            with self.subTest(name=name):
                self.assertIn(name, BUILTIN_TYPES)
        self.assertFalse(BUILTIN_TYPES["noarg_callback"].requires_argument())
        self.assertTrue(BUILTIN_TYPES["arg_callback"].requires_argument())
        self.assertFalse(BUILTIN_TYPES["preset"].requires_argument())


class TestEnumType(TestCase):
    """Behavioral tests for closed word sets."""

    def testLowerCaseSetNormalizesInput(self):
        colors = EnumType("color", ["red", "green"])
        self.assertEqual(colors.parse("RED"), "red")

    def testUpperCaseSetNormalizesInput(self):
        levels = EnumType("level", ["LOW", "HIGH"])
        self.assertEqual(levels.parse("high"), "HIGH")

    def testMixedCaseSetMatchesExactly(self):
        names = EnumType("name", ["Alice", "bob"])
        self.assertEqual(names.parse("Alice"), "Alice")
        with self.assertRaises(ValueError):
            names.parse("alice")

    def testUnknownWordRejected(self):
        with self.assertRaises(ValueError) as context:
            EnumType("color", ["red", "green"]).parse("blue")
        self.assertIn("red, green", str(context.exception))

    def testEmptyOrDuplicateValuesRejected(self):
        with self.assertRaises(ValueError):
            EnumType("color", [])
        with self.assertRaises(ValueError):
            EnumType("color", ["red", "red"])
        with self.assertRaises(TypeError):
            EnumType("color", "red")

    def testLabelIsUpperCasedName(self):
        self.assertEqual(label_of(EnumType("log-level", ["a"])), "LOG_LEVEL")


class TestTypeProtocol(TestCase):
    """Behavioral tests for converters and the duck-typed protocol."""

    def testConverterWrapsCallable(self):
        vector = ConverterType("vector", lambda text: [float(x) for x in text.split(",")])
        self.assertEqual(vector.parse("1,2,3"), [1.0, 2.0, 3.0])
        self.assertTrue(vector.requires_argument())
        self.assertEqual(vector.default_label, "VECTOR")

    def testConverterRequiresCallable(self):
        with self.assertRaises(TypeError):
            ConverterType("vector", "not callable")

    def testDuckTypedObjectAccepted(self):
        class Point:
            name = "point"

            def parse(self, value, values, argument):
                return tuple(map(int, value.split(":")))

            def requires_argument(self):
                return True

        self.assertTrue(is_value_type(Point()))
        self.assertIsInstance(coerce_type(Point), Point)
        self.assertEqual(label_of(Point()), "POINT")

    def testCoerceRejectsIncompleteObjects(self):
        with self.assertRaises(TypeError):
            coerce_type(object())

    def testBaseParseIsAbstract(self):
        with self.assertRaises(NotImplementedError):
            TypeInfo("thing").parse("x", None, None)


if __name__ == "__main__":
    unittest.main()
