# python
"""
Assignment sink behavioral tests.

Scope
- Validate the Slots table (allocation, reset, snapshots).
- Validate builtin sinks (Toggle, Count, Store, Append) and callback sinks.
- Validate the read-only Namespace result.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import pickle
import unittest
from unittest import TestCase

from switchyard import (
    Slots,
    Namespace,
    Toggle,
    Count,
    Store,
    Append,
    FlagCallback,
    Callback,
    FlagSink,
    ValueSink,
    OtherError,
    UnknownSwitchError,
)


class TestSlots(TestCase):
    """Behavioral tests for the Slots table."""

    def testAllocateReturnsIndices(self):
        slots = Slots()
        self.assertEqual(slots.allocate("a", False), 0)
        self.assertEqual(slots.allocate("b", factory=list), 1)
        self.assertEqual(len(slots), 2)
        self.assertEqual(slots.index("b"), 1)

    def testDuplicateNameRejected(self):
        slots = Slots()
        slots.allocate("a")
        with self.assertRaises(ValueError):
            slots.allocate("a")

    def testResetRestoresInitialValues(self):
        slots = Slots()
        flag = slots.allocate("flag", False)
        items = slots.allocate("items", factory=list)
        slots[flag] = True
        slots[items].append(1)
        previous = slots[items]
        slots.reset()
        self.assertFalse(slots[flag])
        self.assertEqual(slots[items], [])
        self.assertIsNot(slots[items], previous)

    def testTruncateDropsLaterCells(self):
        slots = Slots()
        slots.allocate("a", 1)
        slots.allocate("b", factory=list)
        slots.truncate(1)
        self.assertEqual(len(slots), 1)
        self.assertEqual(slots.allocate("b", 2), 1)
        slots.reset()
        self.assertEqual(dict(slots.namespace()), {"a": 1, "b": 2})

    def testNamespaceSnapshot(self):
        slots = Slots()
        slots.allocate("a", 1)
        slots.allocate("b", "x")
        self.assertEqual(slots.namespace(), Namespace({"a": 1, "b": "x"}))


class TestBuiltinSinks(TestCase):
    """Behavioral tests for the slot-backed sinks."""

    def testToggle(self):
        slots = Slots()
        sink = Toggle(slots, slots.allocate("flag", False))
        sink.assign()
        sink.assign()
        self.assertIs(slots[0], True)
        self.assertIsInstance(sink, FlagSink)

    def testCount(self):
        slots = Slots()
        sink = Count(slots, slots.allocate("verbose", 0))
        for _ in range(3):
            sink.assign()
        self.assertEqual(slots[0], 3)

    def testStoreOverwrites(self):
        slots = Slots()
        sink = Store(slots, slots.allocate("level", 1))
        sink.assign(2)
        sink.assign(3)
        self.assertEqual(slots[0], 3)
        self.assertIsInstance(sink, ValueSink)

    def testAppendAccumulates(self):
        slots = Slots()
        sink = Append(slots, slots.allocate("tags", factory=list))
        sink.assign("a")
        sink.assign("b")
        self.assertEqual(slots[0], ["a", "b"])

    def testIndexOutOfRangeRejected(self):
        with self.assertRaises(IndexError):
            Toggle(Slots(), 0)

    def testForeignTableRejected(self):
        with self.assertRaises(TypeError):
            Store([None], 0)

    def testRepresentation(self):
        slots = Slots()
        slots.allocate("a")
        self.assertEqual(repr(Store(slots, 0)), "Store(slot=0)")


class TestCallbackSinks(TestCase):
    """Behavioral tests for caller-supplied callables."""

    def testFlagCallback(self):
        calls = []
        FlagCallback(lambda: calls.append(True)).assign()
        self.assertEqual(calls, [True])

    def testCallbackForwardsValue(self):
        values = []
        Callback(values.append).assign(5)
        self.assertEqual(values, [5])

    def testFailureBecomesOtherError(self):
        def fail():
            raise LookupError("no such item")

        with self.assertRaises(OtherError) as context:
            FlagCallback(fail).assign()
        self.assertEqual(str(context.exception), "no such item")
        self.assertIsInstance(context.exception.exception, LookupError)

    def testEmptyMessageUsesExceptionName(self):
        def fail(value):
            raise ValueError

        with self.assertRaises(OtherError) as context:
            Callback(fail).assign(1)
        self.assertEqual(str(context.exception), "ValueError")

    def testParseErrorIsNotWrapped(self):
        def fail(value):
            raise UnknownSwitchError(switch="-z")

        with self.assertRaises(UnknownSwitchError):
            Callback(fail).assign(1)

    def testNonCallableRejected(self):
        with self.assertRaises(TypeError):
            Callback(1)


class TestNamespace(TestCase):
    """Behavioral tests for the parse result mapping."""

    def testItemAndAttributeAccess(self):
        ns = Namespace({"num": 10})
        self.assertEqual(ns["num"], 10)
        self.assertEqual(ns.num, 10)
        self.assertEqual(list(ns), ["num"])

    def testMissingAttribute(self):
        with self.assertRaises(AttributeError):
            Namespace().missing

    def testReadOnly(self):
        ns = Namespace({"num": 10})
        with self.assertRaises(AttributeError):
            ns.num = 11
        with self.assertRaises(TypeError):
            ns["num"] = 11

    def testEqualityWithMappings(self):
        self.assertEqual(Namespace({"a": 1}), {"a": 1})

    def testRepresentation(self):
        self.assertEqual(repr(Namespace({"a": 1, "b": "x"})), "Namespace(a=1, b='x')")

    def testPrivateNamesAreNotArguments(self):
        with self.assertRaises(AttributeError):
            Namespace({"_hidden": 1})._hidden

    def testShallowCopy(self):
        ns = Namespace({"a": 1, "tags": ["x"]})
        copied = copy.copy(ns)
        self.assertIsInstance(copied, Namespace)
        self.assertEqual(copied, ns)
        self.assertIs(copied.tags, ns.tags)

    def testDeepCopy(self):
        ns = Namespace({"a": 1, "tags": ["x"]})
        copied = copy.deepcopy(ns)
        self.assertEqual(copied, ns)
        self.assertIsNot(copied.tags, ns.tags)

    def testPickleRoundTrip(self):
        ns = Namespace({"a": 1, "tags": ["x"]})
        restored = pickle.loads(pickle.dumps(ns))
        self.assertIsInstance(restored, Namespace)
        self.assertEqual(restored.tags, ["x"])


if __name__ == "__main__":
    unittest.main()
