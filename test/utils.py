"""
Tests for the shared helpers.

Scope
- Unset: singleton identity, falsy semantics, union support in isinstance(), finality.
- coalesce / mirror / rename: sentinel materialization and read-only properties.
- pluralize / quantify / ordinal: wording used in diagnostics.

Conventions
- Test method names follow CamelCase per project convention.
"""
import copy
import pickle
import unittest
from threading import Thread, Lock
from unittest import TestCase

from argot.utils import *


class UnsetTest(TestCase):
    """
    The Unset sentinel behaves as a process-wide, falsy, final singleton.
    """

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertIs(UnsetType(), UnsetType())

    def testFalsely(self):
        self.assertFalse(Unset)

    def testNotEqualToNoneOrFalse(self):
        self.assertNotEqual(Unset, None)
        self.assertNotEqual(Unset, False)  # noqa: E712

    def testRepr(self):
        self.assertEqual(repr(Unset), "Unset")
        self.assertEqual(str(Unset), "Unset")

    def testUnionInIsinstance(self):
        """
        `str | Unset` builds a union usable by isinstance().
        """
        self.assertTrue(isinstance("x", str | Unset))
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertFalse(isinstance(1, str | Unset))
        self.assertTrue(isinstance(Unset, Unset | int))

    def testCopyDeepcopyPreserveSingleton(self):
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)

    def testPickleRoundTrip(self):
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testThreadSafetySingleton(self):
        results = []
        lock = Lock()

        def worker():
            instance = UnsetType()
            with lock:
                results.append(instance)

        threads = [Thread(target=worker) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(results), 16)
        for instance in results:
            self.assertIs(instance, Unset)

    def testFinalClass(self):
        with self.assertRaises(TypeError):
            class Derived(UnsetType):  # noqa: F-841
                pass


class CoalesceTest(TestCase):

    def testUnsetIsReplaced(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))

    def testFalseyValuesAreKept(self):
        for value in (None, 0, "", [], False):
            with self.subTest(value=value):
                self.assertIs(coalesce(value, "fallback"), value)


class MirrorTest(TestCase):

    def setUp(self):
        class Holder:
            items = mirror("items")
            pair = mirror("pair")

            def __init__(self):
                self._items = [1, [2, 3]]
                self._pair = (1, [2])

        self.holder = Holder()

    def testReadOnly(self):
        with self.assertRaises(AttributeError):
            self.holder.items = []

    def testContainersAreDetached(self):
        items = self.holder.items
        items.append(4)
        items[1].append(5)
        self.assertEqual(self.holder.items, [1, [2, 3]])

    def testTuplesKeepTheirShape(self):
        self.assertEqual(self.holder.pair, (1, [2]))
        self.assertIsInstance(self.holder.pair, tuple)

    def testPropertyName(self):
        self.assertEqual(type(self.holder).items.fget.__name__, "items")

    def testNonStringRejected(self):
        with self.assertRaises(TypeError):
            mirror(1)


class RenameTest(TestCase):

    def testRenameInPlace(self):
        def function():
            pass

        self.assertIs(rename(function, "renamed"), function)
        self.assertEqual(function.__name__, "renamed")
        self.assertEqual(function.__qualname__, "renamed")

    def testRenameDecorator(self):
        @rename("decorated")
        def function():
            pass

        self.assertEqual(function.__name__, "decorated")

    def testRenameRejectsBadArguments(self):
        with self.assertRaises(TypeError):
            rename(1, "name")
        with self.assertRaises(TypeError):
            rename(print, 1)
        with self.assertRaises(TypeError):
            rename()


class WordingTest(TestCase):

    def testPluralizeRegular(self):
        self.assertEqual(pluralize("value"), "values")
        self.assertEqual(pluralize("switch"), "switches")
        self.assertEqual(pluralize("box"), "boxes")
        self.assertEqual(pluralize("entry"), "entries")
        self.assertEqual(pluralize("key"), "keys")

    def testQuantify(self):
        self.assertEqual(quantify(1, "value"), "1 value")
        self.assertEqual(quantify(0, "value"), "0 values")
        self.assertEqual(quantify(3, "value"), "3 values")

    def testOrdinalSpelledOut(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(3), "third")
        self.assertEqual(ordinal(10), "tenth")

    def testOrdinalNumeric(self):
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(12), "12th")
        self.assertEqual(ordinal(13), "13th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(103), "103rd")
        self.assertEqual(ordinal(111), "111th")


if __name__ == "__main__":
    unittest.main()
