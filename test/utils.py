"""
Utility tests (Unset, coalesce, rename, hook, wording helpers).

Conventions
- Test method names follow CamelCase per project convention.
"""
import sys
import unittest
from unittest import TestCase, mock

from argosy.utils import Unset, UnsetType, coalesce, hook, ordinal, pluralize, rename


class TestUnset(TestCase):

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testUnion(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("text", Unset | str)

    def testFinal(self):
        with self.assertRaises(TypeError):
            type("Subclass", (UnsetType,), {})

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, 3), 3)
        self.assertIsNone(coalesce(Unset))
        for value in (None, 0, "", False):
            with self.subTest(value=value):
                self.assertIs(coalesce(value, 3), value)


class TestRename(TestCase):

    def testDirect(self):
        def original():
            pass

        renamed = rename(original, "help")

        self.assertIs(renamed, original)
        self.assertEqual((renamed.__name__, renamed.__qualname__), ("help", "help"))

    def testDecorator(self):
        @rename("help")
        def original():
            pass

        self.assertEqual(original.__name__, "help")

    def testRejectsBadArguments(self):
        with self.assertRaises(TypeError):
            rename(42, "name")
        with self.assertRaises(TypeError):
            rename(print, 42)
        with self.assertRaises(TypeError):
            rename()
        with self.assertRaises(TypeError):
            rename("name")(42)


class TestHook(TestCase):

    def testMissingHookYieldsDefault(self):
        self.assertEqual(hook("__argosy_missing__", "default"), "default")

    def testHookIsReadFromMain(self):
        with mock.patch.object(sys.modules["__main__"], "__prog__", "tool", create=True):
            self.assertEqual(hook("__prog__"), "tool")

    def testNameMustBeAString(self):
        with self.assertRaises(TypeError):
            hook(42)


class TestWording(TestCase):

    def testOrdinal(self):
        for number, expected in (
            (1, "first"), (2, "second"), (10, "tenth"),
            (11, "11th"), (12, "12th"), (13, "13th"),
            (21, "21st"), (22, "22nd"), (23, "23rd"), (24, "24th"),
            (101, "101st"), (111, "111th"),
        ):
            with self.subTest(number=number):
                self.assertEqual(ordinal(number), expected)

    def testPluralize(self):
        for word, count, expected in (
            ("argument", 2, "arguments"),
            ("argument", 1, "argument"),
            ("argument", 0, "arguments"),
            ("match", 2, "matches"),
            ("entry", 2, "entries"),
            ("key", 2, "keys"),
        ):
            with self.subTest(word=word, count=count):
                self.assertEqual(pluralize(word, count), expected)


if __name__ == "__main__":
    unittest.main()
