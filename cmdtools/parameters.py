"""
cmdtools parameters: typed, named, optionally positional command inputs.

Overview
- Parameter(name, type, descr, default=Unset, ordinal=Unset)
  • name: [_a-zA-Z][_a-zA-Z0-9]*, matched case-insensitively by the resolver.
  • type: a descriptor, or a plain class turned into one by describe().
  • default: Unset means required; anything else must be valid for the type
    (None included, where the type accepts it).
  • ordinal: Unset means the parameter can only be given by name; a
    non-negative int makes it fillable by position too. Commands turn the
    declared ordinals into dense ranks 1..k.

- @parameter(...): attach a Parameter to a command callback, top to bottom in
  declaration order (see commands.command).

- ParameterValue / ParameterValues: what a callback receives once every
  parameter is bound.

    >>> greeting = Parameter("name", STRING, "Who to greet.", ordinal=1)
    >>> greeting.value("Ada")
    ParameterValue(parameter=parameter(name='name', ...), value='Ada')
"""
import builtins
import collections
import re
from collections.abc import Mapping

from .descriptors import describe
from .utils import Introspective, Unset, rename, display

_NAME = re.compile(r"[_a-zA-Z][_a-zA-Z0-9]*")

ParameterValue = collections.namedtuple("ParameterValue", ("parameter", "value"))


class Parameter(metaclass=Introspective):
    """
    One declared input of a command.

    Properties
    - name, type, descr, default, ordinal: as given (type normalized to a descriptor).
    - required: no default was given.
    - ordered: an ordinal was given, so the parameter takes positional tokens.
    """
    __introspectable__ = ("name", "type", "descr", "default", "ordinal")

    def __init__(self, name, type, descr, default=Unset, ordinal=Unset):
        cls = builtins.type(self)
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not _NAME.fullmatch(name):
            raise ValueError(f"{cls.__typename__} 'name' must match {_NAME.pattern}, got {name!r}")

        type = describe(type)

        if not isinstance(descr, str):
            raise TypeError(f"{cls.__typename__} 'descr' must be a string")
        elif not descr.strip():
            raise ValueError(f"{cls.__typename__} 'descr' must be a non-empty string")

        if default is not Unset and not type.is_valid_value(default):
            raise TypeError(
                f"{cls.__typename__} 'default' must be a valid {type.display_name} value, got {display(default)!r}"
            )

        if ordinal is not Unset:
            if not isinstance(ordinal, int) or isinstance(ordinal, bool):
                raise TypeError(f"{cls.__typename__} 'ordinal' must be an integer")
            elif ordinal < 0:
                raise ValueError(f"{cls.__typename__} 'ordinal' must be non-negative")

        self._name = name
        self._type = type
        self._descr = descr
        self._default = default
        self._ordinal = ordinal

    @property
    def required(self):
        return self._default is Unset

    @property
    def ordered(self):
        return self._ordinal is not Unset

    def value(self, value, /):
        """
        Wrap value as a ParameterValue of this parameter.

        Raises TypeError when value is not valid for the parameter type.
        """
        if not self._type.is_valid_value(value):
            raise TypeError(
                f"{builtins.type(self).__typename__} {self._name!r} cannot hold {display(value)!r}"
            )
        return ParameterValue(self, value)

    def __replace__(self, **overrides):
        return builtins.type(self)(**{
            "name": self._name,
            "type": self._type,
            "descr": self._descr,
            "default": self._default,
            "ordinal": self._ordinal,
        } | overrides)


class ParameterValues(Mapping):
    """
    Read-only view of the values bound for one invocation.

    Lookups are case-insensitive. Unlike dict.get, get() raises KeyError for a
    name the command does not declare: asking for it is a programming error.
    """

    def __init__(self, values, /):
        self._values = {}
        for parameter, value in values:
            self._values[parameter.name.lower()] = parameter.value(value)

    def __getitem__(self, name):
        if not isinstance(name, str):
            raise KeyError(name)
        return self._values[name.lower()].value

    def get(self, name, /):
        return self[name]

    def parameter(self, name, /):
        """
        The Parameter bound under name.
        """
        return self._values[name.lower()].parameter

    def __iter__(self):
        return (entry.parameter.name for entry in self._values.values())

    def __len__(self):
        return len(self._values)

    def __repr__(self):
        return "parameter-values(%s)" % ", ".join(
            "%s=%r" % (entry.parameter.name, entry.value) for entry in self._values.values()
        )


def parameter(*args, **kwargs):
    """
    Decorator declaring a Parameter on a command callback.

    Usage
        @command(descr="Greets someone.")
        @parameter("name", STRING, "Who to greet.", ordinal=1)
        @parameter("times", INT, "How often.", default=1, ordinal=2)
        def greet(values, stream): ...

    Decorators listed first are declared first. The callback itself is
    returned unchanged apart from its __parameters__ tuple.
    """
    declared = Parameter(*args, **kwargs)

    @rename("parameter")
    def wrapper(callback, /):
        if not callable(callback):
            raise TypeError("@parameter() must be applied to a callable")
        # decorators apply bottom-up, so prepend to keep reading order
        callback.__parameters__ = (declared,) + getattr(callback, "__parameters__", ())
        return callback

    return wrapper


__all__ = (
    "Parameter",
    "ParameterValue",
    "ParameterValues",
    "parameter",
)
