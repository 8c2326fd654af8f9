"""
cmdtools commands: named callbacks with declared parameters.

Overview
- Command(callback, name=Unset, descr=Unset, parameters=(), delete_input=False)
  • callback(values, stream) receives a ParameterValues view and a text stream
    to write output to. It returns an ExecutionResult, a bool, or None (success).
  • name defaults to callback.__name__, descr to the callback docstring.
  • parameters are the given ones followed by those declared with @parameter.
  • ordinals are normalized to dense ranks 1..k, stable by declaration order.

- command(...): build a Command directly, or as a decorator.

- Invocation(command, values): a resolved, ready to run call (see
  Registry.resolve). execute() captures output unless a stream is given.

Documentation format (Command.documentation())
    greet:
        Greets someone.
      Parameters:
        1. name (String): Who to greet.
        2. times (int|1): How often.
"""
import copy
import inspect
import io
import re
from collections.abc import Iterable

from .parameters import Parameter, ParameterValues
from .utils import Introspective, Unset, coalesce, rename, display

_NAME = re.compile(r"[_a-zA-Z][_a-zA-Z0-9]*")


class ExecutionResult(metaclass=Introspective):
    """
    Outcome of one execution: success flag plus captured output (or None).
    """
    __introspectable__ = ("success", "output")

    def __init__(self, success=False, output=None):
        self._success = bool(success)
        self._output = output

    def __bool__(self):
        return self._success

    def __eq__(self, other):
        if not isinstance(other, ExecutionResult):
            return NotImplemented
        return self._success == other._success and self._output == other._output

    __hash__ = None


class Command(metaclass=Introspective):
    """
    A named operation with typed parameters.

    Properties
    - name, descr, callback, delete_input: as constructed.
    - parameters: declaration-ordered tuple of (rank-carrying) parameters.
    - ordered: the ordered parameters, sorted by rank.
    """
    __introspectable__ = ("name", "descr", "callback", "parameters", "ordered", "delete_input")
    __displayable__ = ("name", "parameters")

    def __init__(self, callback, /, name=Unset, descr=Unset, parameters=(), delete_input=False):
        cls = type(self)
        if not callable(callback):
            raise TypeError(f"{cls.__typename__} 'callback' must be callable")

        name = coalesce(name, getattr(callback, "__name__", None))
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not _NAME.fullmatch(name):
            raise ValueError(f"{cls.__typename__} 'name' must match {_NAME.pattern}, got {name!r}")

        descr = coalesce(descr, inspect.getdoc(callback))
        if not isinstance(descr, str):
            raise TypeError(f"{cls.__typename__} 'descr' must be a string (or the callback must have a docstring)")
        elif not descr.strip():
            raise ValueError(f"{cls.__typename__} 'descr' must be a non-empty string")

        if not isinstance(parameters, Iterable):
            raise TypeError(f"{cls.__typename__} 'parameters' must be an iterable of parameters")
        parameters = (*parameters, *getattr(callback, "__parameters__", ()))

        index = {}
        for parameter in parameters:
            if not isinstance(parameter, Parameter):
                raise TypeError(f"{cls.__typename__} 'parameters' must only contain parameters")
            if (key := parameter.name.lower()) in index:
                raise ValueError(f"{cls.__typename__} {name!r} declares parameter {parameter.name!r} twice")
            index[key] = parameter

        # rank the ordered parameters 1..k; sorted() is stable, so ties keep declaration order
        ranked = sorted((parameter for parameter in parameters if parameter.ordered), key=lambda p: p.ordinal)
        ranks = {parameter.name.lower(): rank for rank, parameter in enumerate(ranked, 1)}
        parameters = tuple(
            copy.replace(parameter, ordinal=rank) if (rank := ranks.get(parameter.name.lower())) else parameter
            for parameter in parameters
        )

        self._callback = callback
        self._name = name
        self._descr = descr
        self._parameters = parameters
        self._index = {parameter.name.lower(): parameter for parameter in parameters}
        self._ordered = tuple(sorted(
            (parameter for parameter in parameters if parameter.ordered),
            key=lambda p: p.ordinal
        ))
        self._delete_input = bool(delete_input)

    def parameter(self, name, /):
        """
        The parameter called name (any case), or None.
        """
        if not isinstance(name, str):
            return None
        return self._index.get(name.lower())

    def documentation(self):
        """
        Build the help text of this command; every line ends with a newline.
        """
        lines = ["%s: " % self._name]
        lines.extend("    " + line for line in self._descr.splitlines())

        if self._parameters:
            lines.append("  Parameters: ")
            width = len(str(len(self._ordered)))
            for parameter in self._parameters:
                if parameter.ordered:
                    position = "%*d." % (width, parameter.ordinal)
                else:
                    position = "-".ljust(width + 1)

                kind = parameter.type.display_name
                if not parameter.required:
                    kind += "|" + display(parameter.default)

                literals = ""
                if parameter.type.is_enum:
                    literals = "[%s]; " % ", ".join(parameter.type.literals)

                first, *rest = parameter.descr.splitlines()
                lines.append(f"    {position} {parameter.name} ({kind}): {literals}{first}")
                lines.extend(" " * 14 + line for line in rest)

        return "".join(line + "\n" for line in lines)

    def execute(self, values, stream, /):
        """
        Run the callback and normalize what it returns into an ExecutionResult.

        Returns
        - ExecutionResult(success) with output None; the caller decides what
          to do with the stream.
        """
        match self._callback(values, stream):
            case ExecutionResult() as result:
                return result
            case None:
                return ExecutionResult(True)
            case bool() as success:
                return ExecutionResult(success)
            case other:
                raise TypeError(
                    f"{type(self).__typename__} {self._name!r} callback must return "
                    f"an execution-result, a bool or None, not {type(other).__name__}"
                )


class Invocation(metaclass=Introspective):
    """
    A command bound to one value per declared parameter, ready to run.

    Executing it again runs the callback again with the same values.
    """
    __introspectable__ = ("command",)
    __displayable__ = ("command", "values")

    def __init__(self, command, values, /):
        if not isinstance(command, Command):
            raise TypeError(f"{type(self).__typename__} 'command' must be a command")
        if not isinstance(values, ParameterValues):
            values = ParameterValues(values)
        self._command = command
        self._values = values

    @property
    def values(self):
        return self._values

    @property
    def delete_input(self):
        return self._command.delete_input

    def execute(self, stream=Unset, /):
        """
        Run the command.

        Parameters
        - stream: Unset | text stream
          • Unset: output is captured and returned as result.output.
          • a stream: output goes there and result.output is None.
        """
        if stream is not Unset:
            result = self._command.execute(self._values, stream)
            return ExecutionResult(result.success, None)
        buffer = io.StringIO()
        result = self._command.execute(self._values, buffer)
        return ExecutionResult(result.success, buffer.getvalue())


def command(source=Unset, /, *args, **kwargs):
    """
    Create a Command or return a decorator to build it later.

    Invocation modes
    - Direct:
        greet = command(callback, name="greet", descr="...", parameters=[...])
    - Decorator:
        @command(descr="Greets someone.")
        @parameter("name", STRING, "Who to greet.", ordinal=1)
        def greet(values, stream): ...

    Parameters
    - source: Unset | Callable
      When Unset, a decorator is returned. Otherwise a Command is created.
    - *args, **kwargs: forwarded to Command(...).
    """
    @rename("command")
    def wrapper(source, /):
        if not callable(source):
            raise TypeError("@command() must be applied to a callable")
        return Command(source, *args, **kwargs)

    return wrapper(source) if source is not Unset else wrapper


__all__ = (
    "Command",
    "ExecutionResult",
    "Invocation",
    "command",
)
