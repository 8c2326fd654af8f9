"""
Type descriptor and array value tests.

Scope
- Validate value checks of primitive, object, enum and array descriptors.
- Validate subtyping, equality and display names.
- Validate Array construction, accessors and rendering.

Conventions
- Test method names follow CamelCase per project convention.
"""
import enum
import pathlib
import unittest
from unittest import TestCase

from cmdtools import (
    Array,
    ArrayType,
    EnumType,
    ObjectType,
    PrimitiveType,
    describe,
    BOOLEAN,
    BYTE,
    CHAR,
    DOUBLE,
    FILE,
    FLOAT,
    INT,
    LONG,
    STRING,
)


class Color(enum.Enum):
    RED = 1
    GREEN = 2


class Animal:
    pass


class Dog(Animal):
    pass


class DescriptorTest(TestCase):

    def testIntegralBounds(self):
        self.assertTrue(INT.is_valid_value(2 ** 31 - 1))
        self.assertFalse(INT.is_valid_value(2 ** 31))
        self.assertTrue(BYTE.is_valid_value(-128))
        self.assertFalse(BYTE.is_valid_value(128))
        self.assertTrue(LONG.is_valid_value(2 ** 40))

    def testBooleansAreNotNumbers(self):
        self.assertFalse(INT.is_valid_value(True))
        self.assertFalse(DOUBLE.is_valid_value(False))
        self.assertTrue(BOOLEAN.is_valid_value(False))
        self.assertFalse(BOOLEAN.is_valid_value(0))

    def testFloatingKindsAcceptIntegers(self):
        self.assertTrue(FLOAT.is_valid_value(1))
        self.assertTrue(DOUBLE.is_valid_value(1.5))
        self.assertFalse(DOUBLE.is_valid_value("1.5"))

    def testCharIsOneCharacter(self):
        self.assertTrue(CHAR.is_valid_value("a"))
        self.assertFalse(CHAR.is_valid_value("ab"))
        self.assertFalse(CHAR.is_valid_value(""))

    def testPrimitivesRejectNone(self):
        self.assertFalse(INT.is_valid_value(None))

    def testObjectTypesAcceptNone(self):
        self.assertTrue(STRING.is_valid_value(None))
        self.assertTrue(STRING.is_valid_value("x"))
        self.assertFalse(STRING.is_valid_value(3))

    def testObjectSubtyping(self):
        animal, dog = ObjectType(Animal), ObjectType(Dog)
        self.assertTrue(dog.is_subtype_of(animal))
        self.assertFalse(animal.is_subtype_of(dog))
        self.assertTrue(animal.accepts(dog))
        self.assertFalse(dog.accepts(animal))
        self.assertTrue(animal.is_valid_value(Dog()))

    def testPrimitivesAreNeverSubtypes(self):
        self.assertFalse(INT.is_subtype_of(LONG))

    def testEnumLiterals(self):
        color = EnumType(Color)
        self.assertTrue(color.is_enum)
        self.assertEqual(color.literals, ("RED", "GREEN"))
        self.assertTrue(color.is_valid_value(Color.RED))
        self.assertFalse(color.is_valid_value("RED"))

    def testArrayTypeValidation(self):
        with self.assertRaises(ValueError):
            ArrayType(INT, 0)
        with self.assertRaises(TypeError):
            ArrayType(ArrayType(INT))
        with self.assertRaises(TypeError):
            ArrayType(int)

    def testArraySubtyping(self):
        self.assertTrue(ArrayType(ObjectType(Dog)).is_subtype_of(ArrayType(ObjectType(Animal))))
        self.assertFalse(ArrayType(ObjectType(Dog), 2).is_subtype_of(ArrayType(ObjectType(Animal))))

    def testEqualityAndHashing(self):
        self.assertEqual(PrimitiveType("int"), INT)
        self.assertEqual(ArrayType(INT, 2), ArrayType(INT, 2))
        self.assertEqual(hash(ArrayType(INT, 2)), hash(ArrayType(INT, 2)))
        self.assertNotEqual(ArrayType(INT, 2), ArrayType(INT, 1))
        self.assertNotEqual(INT, LONG)
        self.assertEqual(len({STRING, ObjectType(str), FILE}), 2)

    def testDisplayNames(self):
        self.assertEqual(STRING.display_name, "String")
        self.assertEqual(FILE.display_name, "File")
        self.assertEqual(INT.display_name, "int")
        self.assertEqual(EnumType(Color).display_name, "Color")
        self.assertEqual(ArrayType(STRING, 2).display_name, "String[][]")
        self.assertEqual(STRING.name, "builtins.str")

    def testUnknownKindRaises(self):
        with self.assertRaises(ValueError):
            PrimitiveType("quad")

    def testDescribe(self):
        self.assertIs(describe(int), LONG)
        self.assertIs(describe(str), STRING)
        self.assertIs(describe(INT), INT)
        self.assertEqual(describe(Color), EnumType(Color))
        self.assertEqual(describe(pathlib.Path), FILE)
        with self.assertRaises(TypeError):
            describe(5)


class ArrayTest(TestCase):

    def setUp(self):
        self.matrix = Array(INT, 2, Array(INT, 1, 1, 2), Array(INT, 1, 3, 4))

    def testElementAccess(self):
        self.assertEqual(self.matrix.get(1, 0), 3)
        self.assertEqual(len(self.matrix), 2)

    def testRendering(self):
        self.assertEqual(str(self.matrix), "int[][] { { 1, 2 }, { 3, 4 } }")
        self.assertEqual(str(Array(STRING, 1, "a", None)), "String[] { a, null }")
        self.assertEqual(str(Array(BOOLEAN, 1, True)), "boolean[] { true }")
        self.assertEqual(str(Array(INT, 1)), "int[] {  }")

    def testInvalidElementsRaise(self):
        with self.assertRaises(ValueError):
            Array(INT, 1, "x")
        with self.assertRaises(ValueError):
            Array(INT, 2, 1)
        with self.assertRaises(ValueError):
            Array(INT, 2, Array(INT, 2))
        with self.assertRaises(ValueError):
            Array(INT, 0)

    def testWrongIndexCountRaises(self):
        with self.assertRaises(IndexError):
            self.matrix.get(0)
        with self.assertRaises(IndexError):
            self.matrix.subarray(0, 0)

    def testOutOfRangeRaises(self):
        with self.assertRaises(IndexError):
            self.matrix.get(5, 0)
        with self.assertRaises(IndexError):
            self.matrix.get(0, 2)
        with self.assertRaises(IndexError):
            self.matrix.get(-1, 0)

    def testSet(self):
        self.matrix.set(9, 0, 1)
        self.assertEqual(self.matrix.get(0, 1), 9)
        with self.assertRaises(ValueError):
            self.matrix.set("x", 0, 0)

    def testSubarrayAndAssign(self):
        self.assertEqual(self.matrix.subarray(0), Array(INT, 1, 1, 2))
        self.matrix.assign(Array(INT, 1, 7), 1)
        self.assertEqual(self.matrix.get(1, 0), 7)
        with self.assertRaises(ValueError):
            self.matrix.assign(Array(STRING, 1, "a"), 1)
        with self.assertRaises(ValueError):
            self.matrix.assign(Array(INT, 2), 0)

    def testMissingSubarrays(self):
        sparse = Array(INT, 2, None)
        self.assertIsNone(sparse.subarray(0))
        with self.assertRaises(IndexError):
            sparse.get(0, 0)

    def testSubtypeElements(self):
        animals = Array(ObjectType(Animal), 2, Array(ObjectType(Dog), 1, Dog()))
        self.assertTrue(ArrayType(ObjectType(Animal), 2).is_valid_value(animals))

    def testConformance(self):
        self.assertTrue(self.matrix.conforms_to(ArrayType(INT, 2)))
        self.assertFalse(self.matrix.conforms_to(ArrayType(INT, 1)))
        self.assertTrue(ArrayType(INT, 2).is_valid_value(self.matrix))
        self.assertTrue(ArrayType(INT, 2).is_valid_value(None))
        self.assertFalse(ArrayType(INT, 2).is_valid_value(Array(INT, 1)))

    def testNonIntegerIndicesRaise(self):
        with self.assertRaises(TypeError):
            self.matrix.get("0", 0)


if __name__ == "__main__":
    unittest.main()
