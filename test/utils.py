"""
Tests for the internal helpers.

This module verifies the guarantees the other layers rely on:
- Unset is a falsy, final, process-wide singleton distinct from None.
- coalesce() only replaces Unset.
- rename() updates names in both call forms.
- mirror() exposes frozen views of container backing fields.
"""
import copy
import unittest
from types import MappingProxyType
from unittest import TestCase

from arbor.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `Unset` sentinel.
    """

    def testSingleton(self) -> None:
        self.assertIs(Unset, UnsetType())
        self.assertIs(copy.copy(Unset), Unset)

    def testFalsy(self) -> None:
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")

    def testFinal(self) -> None:
        with self.assertRaises(TypeError):
            type("SubUnset", (UnsetType,), {})

    def testUnionWithTypes(self) -> None:
        self.assertIsInstance("x", str | Unset)
        self.assertIsInstance(Unset, str | Unset)
        self.assertNotIsInstance(3, str | Unset)


class CoalesceTest(TestCase):
    """
    coalesce() replaces only the sentinel.
    """

    def testReplacesUnset(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))

    def testPreservesFalseyValues(self) -> None:
        for value in (None, 0, "", ()):
            self.assertIs(coalesce(value, "fallback"), value)


class RenameTest(TestCase):
    """
    rename() in function and decorator forms.
    """

    def testFunctionForm(self) -> None:
        def original():
            pass

        renamed = rename(original, "renamed")
        self.assertIs(renamed, original)
        self.assertEqual((original.__name__, original.__qualname__), ("renamed", "renamed"))

    def testDecoratorForm(self) -> None:
        @rename("renamed")
        def original():
            pass

        self.assertEqual(original.__name__, "renamed")

    def testInvalidArguments(self) -> None:
        with self.assertRaises(TypeError):
            rename("a", "b")
        with self.assertRaises(TypeError):
            rename(3)
        with self.assertRaises(TypeError):
            rename()


class MirrorTest(TestCase):
    """
    mirror() publishes frozen views.
    """

    class Holder:
        items = mirror("items")
        table = mirror("table")
        tags = mirror("tags")
        name = mirror("name")

        def __init__(self):
            self._items = [1, 2]
            self._table = {"a": 1}
            self._tags = {"x"}
            self._name = "holder"

    def testFrozenViews(self) -> None:
        holder = self.Holder()
        self.assertEqual(holder.items, (1, 2))
        self.assertIsInstance(holder.table, MappingProxyType)
        self.assertEqual(holder.tags, frozenset({"x"}))
        self.assertEqual(holder.name, "holder")

    def testReadOnly(self) -> None:
        with self.assertRaises(AttributeError):
            self.Holder().items = ()


if __name__ == "__main__":
    unittest.main()
