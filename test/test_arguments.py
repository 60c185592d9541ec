# python
"""
Argument specification behavioral tests (Switch, Flag, Option, Positional).

Scope
- Validate switch identity rules (short character, long name).
- Validate spec metadata normalization and rejection.
- Validate requiredness and the decode-then-assign path.

Conventions
- Test method names follow CamelCase per project convention.
- Specs are built directly against a private Slots table.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from switchyard import (
    Switch,
    Flag,
    Option,
    Positional,
    Decoder,
    Slots,
    Toggle,
    Store,
    Append,
    ParseFailedError,
)
from switchyard.utils import Unset


def store(name="value", initial=None):
    slots = Slots()
    return slots, Store(slots, slots.allocate(name, initial))


class TestSwitch(TestCase):
    """Behavioral tests for Switch identity."""

    def testShortOnly(self):
        switch = Switch("v")
        self.assertEqual(switch.forms, ("-v",))
        self.assertEqual(str(switch), "-v")

    def testLongPreferredForDisplay(self):
        switch = Switch("v", "verbose")
        self.assertEqual(switch.forms, ("-v", "--verbose"))
        self.assertEqual(str(switch), "--verbose")

    def testIdentityRequired(self):
        with self.assertRaises(ValueError):
            Switch()

    def testShortMustBeOneCharacter(self):
        with self.assertRaises(ValueError):
            Switch("vv")

    def testShortRejectsDashAndEquals(self):
        for short in "-=":
            with self.subTest(short=short), self.assertRaises(ValueError):
                Switch(short)

    def testLongRejectsEqualsAndLeadingDash(self):
        for long in ("a=b", "-name", ""):
            with self.subTest(long=long), self.assertRaises(ValueError):
                Switch(long=long)

    def testNonStringRejected(self):
        with self.assertRaises(TypeError):
            Switch(1)

    def testNonAsciiShortAccepted(self):
        self.assertEqual(Switch("é").short, "é")


class TestFlag(TestCase):
    """Behavioral tests for Flag specifications."""

    def testPairBecomesSwitch(self):
        slots = Slots()
        spec = Flag("force", switch=("f", None), sink=Toggle(slots, slots.allocate("force", False)))
        self.assertIsInstance(spec.switch, Switch)
        self.assertFalse(spec.takes_value)
        self.assertFalse(spec.required)

    def testAssignDrivesSink(self):
        slots = Slots()
        spec = Flag("force", switch=Switch("f"), sink=Toggle(slots, slots.allocate("force", False)))
        spec.assign()
        self.assertTrue(slots[0])

    def testValueSinkRejected(self):
        _, sink = store()
        with self.assertRaises(TypeError):
            Flag("force", switch=Switch("f"), sink=sink)

    def testNameIsTrimmedAndRequired(self):
        slots = Slots()
        sink = Toggle(slots, slots.allocate("force", False))
        self.assertEqual(Flag("  force ", switch=Switch("f"), sink=sink).name, "force")
        with self.assertRaises(ValueError):
            Flag("  ", switch=Switch("f"), sink=sink)

    def testRepresentation(self):
        slots = Slots()
        spec = Flag("force", switch=Switch("f"), sink=Toggle(slots, slots.allocate("force", False)))
        self.assertEqual(repr(spec), "flag(name='force', switch=Switch(short='f', long=None), sink=Toggle(slot=0))")

    def testFieldsAreReadOnly(self):
        slots = Slots()
        spec = Flag("force", switch=Switch("f"), sink=Toggle(slots, slots.allocate("force", False)))
        with self.assertRaises(AttributeError):
            spec.name = "other"


class TestParametric(TestCase):
    """Behavioral tests for Option and Positional specifications."""

    def testTypeIsWrappedInDecoder(self):
        _, sink = store()
        spec = Option("num", switch=Switch(long="num"), sink=sink, type=int)
        self.assertIsInstance(spec.decoder, Decoder)
        self.assertIs(spec.decoder.type, int)
        self.assertTrue(spec.takes_value)

    def testDecoderIsKept(self):
        _, sink = store()
        decoder = Decoder(float)
        self.assertIs(Positional("ratio", sink=sink, type=decoder).decoder, decoder)

    def testNonCallableTypeRejected(self):
        _, sink = store()
        with self.assertRaises(TypeError):
            Positional("num", sink=sink, type=42)

    def testOptionalAndMultipleExclusive(self):
        _, sink = store()
        with self.assertRaises(TypeError):
            Positional("files", sink=sink, optional=True, multiple=True)

    def testMultipleDefaultNormalizedToTuple(self):
        slots = Slots()
        sink = Append(slots, slots.allocate("files", factory=list))
        spec = Positional("files", sink=sink, multiple=True, default=["a", "b"])
        self.assertEqual(spec.default, ("a", "b"))

    def testMultipleStringDefaultRejected(self):
        slots = Slots()
        sink = Append(slots, slots.allocate("files", factory=list))
        with self.assertRaises(TypeError):
            Positional("files", sink=sink, multiple=True, default="ab")

    def testRequiredness(self):
        _, sink = store()
        cases = {
            (False, False, Unset): True,
            (True, False, Unset): False,
            (False, True, Unset): False,
            (False, False, 0): False,
            (False, False, None): False,
        }
        for (optional, multiple, default), required in cases.items():
            with self.subTest(optional=optional, multiple=multiple, default=default):
                spec = Option(
                    "value",
                    switch=Switch("x"),
                    sink=sink,
                    default=default,
                    optional=optional,
                    multiple=multiple,
                )
                self.assertEqual(spec.required, required)

    def testAssignDecodesThenStores(self):
        slots, sink = store("num")
        spec = Option("num", switch=Switch(long="num"), sink=sink, type=int)
        spec.assign("12")
        self.assertEqual(slots[0], 12)

    def testAssignFailureNamesArgument(self):
        slots, sink = store("num")
        spec = Positional("num", sink=sink, type=int)
        with self.assertRaises(ParseFailedError) as context:
            spec.assign("twelve")
        self.assertEqual(context.exception.name, "num")
        self.assertEqual(context.exception.raw, "twelve")
        self.assertIsNone(slots[0])

    def testRepresentationUsesTypename(self):
        _, sink = store()
        self.assertTrue(repr(Positional("value", sink=sink)).startswith("positional(name='value'"))


if __name__ == "__main__":
    unittest.main()
