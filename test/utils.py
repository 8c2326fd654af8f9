"""
Utility tests (Unset sentinel, coalesce, ordinals, display, module globs).

Conventions
- Test method names follow CamelCase per project convention.
"""
import copy
import enum
import unittest
from unittest import TestCase

from cmdtools.utils import Unset, UnsetType, coalesce, display, mglob, ordinal, rename


class Mode(enum.Enum):
    FAST = "fast"


class UnsetTest(TestCase):

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)

    def testFalsyButDistinct(self):
        self.assertFalse(Unset)
        self.assertNotEqual(Unset, None)
        self.assertEqual(repr(Unset), "Unset")

    def testSealed(self):
        with self.assertRaises(TypeError):
            class Subclass(UnsetType):
                pass

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)


class HelpersTest(TestCase):

    def testOrdinal(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(10), "tenth")
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(12), "12th")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(23), "23rd")
        self.assertEqual(ordinal(101), "101st")
        self.assertEqual(ordinal(111), "111th")

    def testDisplay(self):
        self.assertEqual(display(True), "true")
        self.assertEqual(display(None), "null")
        self.assertEqual(display(Mode.FAST), "FAST")
        self.assertEqual(display(1.5), "1.5")

    def testRename(self):
        @rename("renamed")
        def original():
            pass

        self.assertEqual(original.__name__, "renamed")
        with self.assertRaises(TypeError):
            rename(5, "x")


class ModuleGlobTest(TestCase):

    def testPlainNamesPassThrough(self):
        self.assertEqual(mglob("a.b"), ["a.b"])

    def testWildcardChildren(self):
        modules = mglob("cmdtools.*")
        self.assertIn("cmdtools.tokenizer", modules)
        self.assertIn("cmdtools.registry", modules)
        self.assertEqual(modules, sorted(modules))

    def testCharacterClasses(self):
        self.assertEqual(mglob("cmdtools.[rt]*"), ["cmdtools.registry", "cmdtools.tokenizer"])

    def testMissingPackageMatchesNothing(self):
        self.assertEqual(mglob("cmdtools_missing_package.*"), [])

    def testPatternNeedsConcretePrefix(self):
        with self.assertRaises(ValueError):
            mglob("*.commands")
        with self.assertRaises(ValueError):
            mglob("   ")


if __name__ == "__main__":
    unittest.main()
