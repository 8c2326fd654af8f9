"""
cmdtools utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the tokenizer, the type system, the resolver
  and the built-in commands.

Overview
- UnsetType / Unset
  • Singleton sentinel for “value not provided”, distinct from None.
  • Parameters use it for “no default” and “no ordinal” because None is a
    perfectly valid default for object-typed parameters.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, keep every other value (None, 0, "").

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated callables.

- mirror("attr")
  • Read-only property over self._attr, copying containers on the way out.

- ordinal(number)
  • "first".."tenth", then "11th", "22nd", ... for position-first messages.

- display(value)
  • Command-line spelling of a value (true/false, null, enum member names).

- mglob(pattern)
  • Expand "pkg.**.commands" style module globs into importable module names
    (used by Registry.include for best-effort command discovery).

- Introspective
  • Metaclass giving descriptors, parameters and commands a hyphenated
    __typename__, mirrored read-only properties and rich-friendly reprs.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce(None, "fallback") is None
    True
    >>> ordinal(3), ordinal(12), ordinal(22)
    ('third', '12th', '22nd')
"""
import builtins
import enum
import functools
import importlib
import operator
import pkgutil
import re
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Sentinel type for values that were not provided.

    Characteristics
    - Boolean-false, but never equal to None, 0 or "".
    - repr(Unset) -> "Unset".
    - Sealed and process-wide unique: UnsetType() always yields the same object.
    """

    def __or__(self, other, /):
        # allows `str | Unset` inside isinstance() checks
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Return object unless it is Unset, in which case return default.

    Falsey values such as None, 0, "" or [] are returned as they are; only the
    sentinel is replaced.
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set __name__/__qualname__ on a callable, or build a decorator doing so.

    Forms
    - rename(callable, name) -> callable
    - rename(name) -> decorator
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _immortalize(object):
    """
    Copy container values recursively; other objects are returned as-is.

    Tuples stay tuples so that ordered parameter lists keep their shape when
    read through a mirrored property.
    """
    if isinstance(object, tuple):
        return tuple(map(_immortalize, object))
    elif isinstance(object, Sequence) and not isinstance(object, str):
        return list(map(_immortalize, object))
    elif isinstance(object, Mapping):
        return dict(zip(object.keys(), map(_immortalize, object.values())))
    elif isinstance(object, Set):
        return set(map(_immortalize, object))
    return object


def mirror(name, /):
    """
    Define a read-only property exposing the private field "_{name}".

    Containers are copied on every read so callers cannot mutate the owner.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _immortalize(getattr(self, "_" + name))

    return property(getter)


@functools.cache
def ordinal(number, /):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth").
    - Other numbers use numeric ordinals with English suffixes (11th, 21st, 112th).
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


def display(value, /):
    """
    Render a parameter value the way command-line users type it.

    True/False → "true"/"false", None → "null", enum members → their name,
    anything else → str(value).
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, enum.Enum):
        return value.name
    return str(value)


class Introspective(type):
    """
    Metaclass for the public value types of the package.

    Responsibilities
    - __typename__: class name split on capitals and hyphenated
      (ArrayType -> "array-type"), used as prefix of validation messages.
    - Every name in __introspectable__ becomes a read-only property over the
      matching private field (see mirror()).
    - __repr__/__rich_repr__ list the __displayable__ names (falling back to
      __introspectable__), unless the class defines its own __repr__.
    """
    __introspectable__ = ()
    __displayable__ = None

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__displayable__ or type(self).__introspectable__:
                yield name, getattr(self, name)

        if "__rich_repr__" not in namespace:
            self.__rich_repr__ = __rich_repr__

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"

        if "__repr__" not in namespace:
            self.__repr__ = __repr__

        return self


@functools.cache
def _resolve_segment(segment):
    """
    translate a single pattern segment into a regex snippet (dots are not matched).
      *       → zero or more non-dot chars
      ?       → exactly one non-dot char
      [...]   → character class, [!...] negated
      \\x      → literal x
    """
    length = len(segment)
    index = 0
    parts = []
    while index < length:
        char = segment[index]
        following = index + 1
        if char == '\\' and following < length:
            parts.append(re.escape(segment[following]))
            index += 2
            continue
        if char == '*':
            parts.append(r'[^.]*')
        elif char == '?':
            parts.append(r'[^.]')
        elif char == '[':
            start = index + 1
            negated = ''
            if start < length and segment[start] in ('!', '^'):
                negated = '^'
                start += 1

            pivot = start
            while pivot < length and segment[pivot] != ']':
                pivot += 2 if segment[pivot] == '\\' and pivot + 1 < length else 1

            if pivot >= length:
                parts.append(r'\[')
            else:
                parts.append(f'[{negated}{segment[start:pivot]}]')
                index = pivot
        else:
            parts.append(re.escape(char))
        index += 1
    return ''.join(parts)


@functools.cache
def _compile_regex(pattern):
    """
    compile a module glob into a regex; '**' spans zero or more whole segments.
    """
    parts = []
    for segment in pattern.split('.'):
        if segment == '**':
            parts.append(r'(?:\.[A-Za-z_]\w*)*')
        else:
            parts.append(r'\.' + _resolve_segment(segment))
    if parts and parts[0].startswith(r'\.'):
        body = parts[0][2:] + ''.join(parts[1:])
    else:
        body = ''.join(parts)
    return re.compile(body)


def mglob(source, /, onerror=None):
    """
    expand a dot-separated module glob into fully-qualified module names.

    rules
    - the pattern must start with at least one concrete package segment.
    - a pattern without wildcards is returned unchanged (as a one-item list).
    - when the concrete prefix does not exist, nothing matches ([]).
    - packages that fail to import while searching are passed by name to
      onerror (called while the error is being handled, see sys.exception());
      without onerror the error propagates. a failing prefix matches nothing.
    - matches are returned sorted.

    examples
    - "app.commands.*"    → direct children of app.commands
    - "app.**.commands"   → any commands module below app
    """
    if not isinstance(source, str):
        raise TypeError("mglob() argument must be a string")
    elif not (source := source.strip()):
        raise ValueError("mglob() argument must be a non-empty string")

    if re.fullmatch(r"(?!\d)\w+(\.(?!\d)\w+)*", source):
        return [source]

    prefixes = []
    for segment in source.split('.'):
        if set(segment) & set('*?[]!\\') or not re.fullmatch(r"(?!\d)\w+", segment):
            break
        prefixes.append(segment)

    if not prefixes:
        raise ValueError("mglob() pattern must start with a concrete package segment")

    try:
        package = importlib.import_module(prefix := ".".join(prefixes))
    except Exception as error:
        if isinstance(error, ModuleNotFoundError) and f"{prefix}.".startswith(f"{error.name}."):
            return []
        if onerror is None:
            raise
        onerror(prefix)
        return []

    matches = set()

    if (pattern := _compile_regex(source)).fullmatch(prefix):
        matches.add(prefix)

    if hasattr(package, "__path__"):
        for metadata in pkgutil.walk_packages(package.__path__, prefix + '.', onerror):
            if pattern.fullmatch(name := metadata.name):
                matches.add(name)

    return sorted(matches)


Unset = UnsetType()


__all__ = (
    "coalesce",
    "rename",
    "mirror",
    "ordinal",
    "display",
    "mglob",
    "Introspective",
    "UnsetType",
    "Unset",
)
