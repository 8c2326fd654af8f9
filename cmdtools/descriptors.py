"""
cmdtools type descriptors: the closed set of value kinds a parameter can hold.

Descriptors
- PrimitiveType(kind): boolean, byte, short, char, int, long, float, double.
  Never polymorphic, never accept None.
- ObjectType(cls): None or any instance of cls; subtyping follows issubclass.
- EnumType(enum): members of an enum.Enum subclass; documents its literals.
- ArrayType(element, dimensions): None or an Array with exactly that many
  dimensions and a compatible (equal or subtype) element type.

Every descriptor answers is_valid_value(), name (fully qualified),
display_name (short, used by help output), is_subtype_of(), is_array and
is_enum. Descriptors are immutable, hashable and compare by kind and identity.

Common descriptors
- BOOLEAN, BYTE, SHORT, CHAR, INT, LONG, FLOAT, DOUBLE
- STRING (str), FILE (pathlib.Path), FILE_NAMING_TEMPLATE
- describe(x) maps plain Python classes onto these.
"""
import enum
import pathlib

from .naming import FileNamingTemplate
from .utils import Introspective

# kind -> (python type, inclusive bounds for integral kinds)
_PRIMITIVES = {
    "boolean": (bool, None),
    "byte": (int, (-2 ** 7, 2 ** 7 - 1)),
    "short": (int, (-2 ** 15, 2 ** 15 - 1)),
    "char": (str, None),
    "int": (int, (-2 ** 31, 2 ** 31 - 1)),
    "long": (int, (-2 ** 63, 2 ** 63 - 1)),
    "float": (float, None),
    "double": (float, None),
}

# short names shown by help output for well-known object classes
_DISPLAY_NAMES = {
    str: "String",
    pathlib.Path: "File",
}


class Descriptor(metaclass=Introspective):
    """
    Base of all type descriptors.

    Subclasses fill in is_valid_value() and _key; the rest is shared.
    """

    @property
    def _key(self):
        raise NotImplementedError

    def is_valid_value(self, value, /):
        raise NotImplementedError

    @property
    def name(self):
        raise NotImplementedError

    @property
    def display_name(self):
        return self.name

    @property
    def is_array(self):
        return False

    @property
    def is_enum(self):
        return False

    def is_subtype_of(self, other, /):
        return False

    def accepts(self, other, /):
        """
        True when values described by other may stand where self is expected.
        """
        return self == other or other.is_subtype_of(self)

    def __eq__(self, other):
        if not isinstance(other, Descriptor):
            return NotImplemented
        return type(self) is type(other) and self._key == other._key

    def __hash__(self):
        return hash((type(self), self._key))


class PrimitiveType(Descriptor):
    __introspectable__ = ("kind",)

    def __init__(self, kind, /):
        if not isinstance(kind, str):
            raise TypeError(f"{type(self).__typename__} 'kind' must be a string")
        elif kind not in _PRIMITIVES:
            raise ValueError(f"{type(self).__typename__} 'kind' must be one of {", ".join(_PRIMITIVES)}")
        self._kind = kind

    @property
    def _key(self):
        return self._kind

    @property
    def name(self):
        return self._kind

    def is_valid_value(self, value, /):
        expected, bounds = _PRIMITIVES[self._kind]
        if expected is bool:
            return isinstance(value, bool)
        if isinstance(value, bool):
            return False
        if expected is float:
            # integral literals are accepted where a floating value is expected
            return isinstance(value, float | int)
        if expected is str:
            return isinstance(value, str) and len(value) == 1
        return isinstance(value, int) and bounds[0] <= value <= bounds[1]


class ObjectType(Descriptor):
    __introspectable__ = ("cls",)

    def __init__(self, cls, /):
        if not isinstance(cls, type):
            raise TypeError(f"{type(self).__typename__} 'cls' must be a class")
        self._cls = cls

    @property
    def _key(self):
        return self._cls

    @property
    def name(self):
        return f"{self._cls.__module__}.{self._cls.__qualname__}"

    @property
    def display_name(self):
        return _DISPLAY_NAMES.get(self._cls, self._cls.__name__)

    def is_valid_value(self, value, /):
        return value is None or isinstance(value, self._cls)

    def is_subtype_of(self, other, /):
        return isinstance(other, ObjectType) and issubclass(self._cls, other._cls)


class EnumType(Descriptor):
    __introspectable__ = ("enum",)

    def __init__(self, enum_, /):
        if not isinstance(enum_, type) or not issubclass(enum_, enum.Enum):
            raise TypeError(f"{type(self).__typename__} 'enum' must be an enum class")
        self._enum = enum_

    @property
    def _key(self):
        return self._enum

    @property
    def name(self):
        return f"{self._enum.__module__}.{self._enum.__qualname__}"

    @property
    def display_name(self):
        return self._enum.__name__

    @property
    def is_enum(self):
        return True

    @property
    def literals(self):
        """
        Member names in declaration order (aliases excluded).
        """
        return tuple(member.name for member in self._enum)

    def is_valid_value(self, value, /):
        return isinstance(value, self._enum)


class ArrayType(Descriptor):
    __introspectable__ = ("element", "dimensions")

    def __init__(self, element, dimensions=1, /):
        if not isinstance(element, Descriptor):
            raise TypeError(f"{type(self).__typename__} 'element' must be a descriptor")
        elif isinstance(element, ArrayType):
            raise TypeError(f"{type(self).__typename__} 'element' cannot be an array type, raise 'dimensions' instead")
        if not isinstance(dimensions, int) or isinstance(dimensions, bool):
            raise TypeError(f"{type(self).__typename__} 'dimensions' must be an integer")
        elif dimensions < 1:
            raise ValueError(f"{type(self).__typename__} 'dimensions' must be at least 1")
        self._element = element
        self._dimensions = dimensions

    @property
    def _key(self):
        return self._element, self._dimensions

    @property
    def name(self):
        return self._element.name + "[]" * self._dimensions

    @property
    def display_name(self):
        return self._element.display_name + "[]" * self._dimensions

    @property
    def is_array(self):
        return True

    def is_valid_value(self, value, /):
        from .arrays import Array
        return value is None or isinstance(value, Array) and value.conforms_to(self)

    def is_subtype_of(self, other, /):
        return (
            isinstance(other, ArrayType) and
            other._dimensions == self._dimensions and
            self._element.is_subtype_of(other._element)
        )


BOOLEAN = PrimitiveType("boolean")
BYTE = PrimitiveType("byte")
SHORT = PrimitiveType("short")
CHAR = PrimitiveType("char")
INT = PrimitiveType("int")
LONG = PrimitiveType("long")
FLOAT = PrimitiveType("float")
DOUBLE = PrimitiveType("double")

STRING = ObjectType(str)
FILE = ObjectType(pathlib.Path)
FILE_NAMING_TEMPLATE = ObjectType(FileNamingTemplate)


def describe(object, /):
    """
    Return a descriptor for object.

    - descriptors are returned unchanged
    - bool → BOOLEAN, int → LONG, float → DOUBLE, str → STRING
    - enum classes → EnumType, any other class → ObjectType
    """
    if isinstance(object, Descriptor):
        return object
    if not isinstance(object, type):
        raise TypeError("describe() argument must be a descriptor or a class")
    try:
        return {bool: BOOLEAN, int: LONG, float: DOUBLE, str: STRING}[object]
    except KeyError:
        pass
    if issubclass(object, enum.Enum):
        return EnumType(object)
    return ObjectType(object)


__all__ = (
    "Descriptor",
    "PrimitiveType",
    "ObjectType",
    "EnumType",
    "ArrayType",
    "BOOLEAN",
    "BYTE",
    "SHORT",
    "CHAR",
    "INT",
    "LONG",
    "FLOAT",
    "DOUBLE",
    "STRING",
    "FILE",
    "FILE_NAMING_TEMPLATE",
    "describe",
)
