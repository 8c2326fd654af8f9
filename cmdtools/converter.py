"""
cmdtools converter: raw string tokens → typed values.

Contract
- convert(raw, type) returns a value satisfying type.is_valid_value(), or None
  when raw cannot be converted. It never raises for bad input.
- None is therefore never a successful conversion result, even for object
  types that accept None as a value.

Extension
- register(type, function): per-instance conversion functions, consulted before
  the built-in dispatch. A function returning None or raising means failure.
- subclassing: override convert() or fallback() and delegate to super(); array
  elements go through self.convert(), so overrides apply inside arrays too.

    >>> converter = Converter()
    >>> converter.convert("42", INT)
    42
    >>> converter.convert("{ {1, 2}, {3} }", ArrayType(INT, 2))
    array('int[][] { { 1, 2 }, { 3 } }')
    >>> converter.convert("yes", BOOLEAN) is None
    True
"""
import pathlib
import re

from .arrays import Array
from .descriptors import (
    Descriptor,
    PrimitiveType,
    EnumType,
    ArrayType,
    STRING,
    FILE,
    FILE_NAMING_TEMPLATE,
)
from .faults import MalformedCommandError
from .naming import FileNamingTemplate
from .tokenizer import tokenize_array

_FILE = re.compile(r'([A-Z]:)?[^<>:"|?*]*')
_INTEGRAL = re.compile(r"[+-]?[0-9]+")
# decimal literals with an optional exponent and f/d suffix, or NaN / Infinity
_FLOATING = re.compile(r"[+-]?(NaN|Infinity|([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?[fFdD]?)")

_BOUNDS = {
    "byte": (-2 ** 7, 2 ** 7 - 1),
    "short": (-2 ** 15, 2 ** 15 - 1),
    "int": (-2 ** 31, 2 ** 31 - 1),
    "long": (-2 ** 63, 2 ** 63 - 1),
}


class Converter:
    """
    Turns raw tokens into values of a type descriptor.

    One converter serves a whole registry; it keeps no state besides the
    functions given to register().
    """

    def __init__(self):
        self._functions = {}

    def register(self, type, function, /):
        """
        Use function(raw) to convert raw tokens for type (replacing any previous one).

        Returns function, so this also works as a decorator factory argument.
        """
        if not isinstance(type, Descriptor):
            raise TypeError("register() first argument must be a descriptor")
        if not callable(function):
            raise TypeError("register() second argument must be callable")
        self._functions[type] = function
        return function

    def convert(self, raw, type, /):
        """
        Convert raw into a value of type, or return None when that is impossible.
        """
        if not isinstance(raw, str) or not isinstance(type, Descriptor):
            return None

        if function := self._functions.get(type):
            try:
                value = function(raw)
            except Exception:
                return None
            return value if value is not None and type.is_valid_value(value) else None

        if type == STRING:
            return raw
        if type == FILE:
            return pathlib.Path(raw) if _FILE.fullmatch(raw) else None
        if type == FILE_NAMING_TEMPLATE:
            try:
                return FileNamingTemplate.parse(raw)
            except ValueError:
                return None

        match type:
            case PrimitiveType():
                return self._primitive(raw, type.kind)
            case EnumType():
                return type.enum.__members__.get(raw)
            case ArrayType():
                return self._array(raw, type)
        return self.fallback(raw, type)

    def fallback(self, raw, type, /):
        """
        Hook for descriptors the converter does not know; returns None here.
        """
        return None

    def _primitive(self, raw, kind):
        match kind:
            case "boolean":
                return {"true": True, "false": False}.get(raw.strip().lower())
            case "char":
                return raw if len(raw) == 1 else None
            case "float" | "double":
                if not (literal := _FLOATING.fullmatch(raw.strip())):
                    return None
                return float(literal.group().rstrip("fFdD"))
        if not _INTEGRAL.fullmatch(raw):
            return None
        lower, upper = _BOUNDS[kind]
        return value if lower <= (value := int(raw)) <= upper else None

    def _array(self, raw, type):
        try:
            tokens = tokenize_array(raw)
        except MalformedCommandError:
            return None
        if not tokens or tokens[0] != "{":
            return None

        try:
            array, position = self._level(tokens, 1, type.element, type.dimensions)
        except ValueError:
            return None
        # nothing may follow the outermost closing brace
        return array if position == len(tokens) else None

    def _level(self, tokens, position, element, dimensions):
        """
        Read one brace level whose opening brace ends right before position.

        Returns (array, position after the closing brace); raises ValueError on
        a nesting mismatch or an element that does not convert.
        """
        entries = []
        while True:
            if position >= len(tokens):
                raise ValueError("unterminated array")
            match tokens[position]:
                case "}":
                    return Array(element, dimensions, *entries), position + 1
                case "{":
                    if dimensions == 1:
                        raise ValueError("too many dimensions")
                    entry, position = self._level(tokens, position + 1, element, dimensions - 1)
                case token:
                    if dimensions > 1:
                        raise ValueError("too few dimensions")
                    if (entry := self.convert(token, element)) is None:
                        raise ValueError("element %r does not convert" % token)
                    position += 1
            entries.append(entry)


__all__ = (
    "Converter",
)
