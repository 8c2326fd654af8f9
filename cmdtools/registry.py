"""
cmdtools registry: command lookup, the resolver and the built-in commands.

Overview
- Registry(*, defaults=True, converter=Unset, shell=False, fancy=False,
           colorful=False, deferred=False, prog="cmdtools")
  • holds two command sets: default commands (built-ins such as "list",
    visible while `defaults` is on) and supported commands (everything
    registered, including "help", which is therefore always available).
  • names are unique across both sets, case-insensitively; the first
    registration wins and built-ins cannot be shadowed.

Resolution (resolve/parse)
- tokens are read left to right:
  • "--not-x" binds x to false and "--x" binds x to true;
  • a token naming a parameter binds it to the converted next token;
  • any other token fills the next unbound positional slot; the slot cursor
    only moves forward.
- afterwards every parameter must have exactly one value (or a default).
- failures are built as faults and surfaced through trigger(): raised by
  default, rendered in shell mode (see faults).

Runtime flags
- shell: render faults on stderr instead of raising them.
- fancy: render faults inside a panel.
- colorful: style fault renderings.
- deferred: in shell mode, keep running after rendering an error.
"""
import copy
import difflib
import importlib
import inspect
import sys
from collections.abc import Iterable

from .commands import Command, Invocation, command
from .converter import Converter
from .descriptors import STRING, BOOLEAN
from .faults import (
    MalformedCommandError,
    UnknownCommandError,
    UnknownParameterError,
    ParameterTypeMismatchError,
    DuplicateParameterError,
    MissingParameterError,
    CommandLoadWarning,
    FaultCode,
    getdoc,
    trigger,
)
from .files import listing
from .parameters import Parameter
from .tokenizer import tokenize, quote
from .utils import Introspective, Unset, coalesce, mglob, ordinal, rename


def _suggest(word, candidates):
    if matches := difflib.get_close_matches(word.lower(), [candidate.lower() for candidate in candidates], n=3):
        return "did you mean %s?" % " or ".join(map(repr, matches))
    return None


def _expectation(type):
    if type == BOOLEAN:
        return "expected true or false"
    if type.is_enum:
        return "expected one of %s" % ", ".join(type.literals)
    if type.is_array:
        return "expected an array literal such as { a, b } with %d level(s) of braces" % type.dimensions
    return "expected a %s value" % type.display_name


class Registry(metaclass=Introspective):
    """
    The set of commands a program understands, plus the resolver.

    Properties
    - shell, fancy, colorful, deferred, prog: runtime options passed to faults.
    - defaults: whether default commands are visible (read/write).
    - commands: visible commands, default ones first.
    - converter: the Converter used for raw tokens (read/write).
    """
    __introspectable__ = ("shell", "fancy", "colorful", "deferred", "prog")
    __displayable__ = ("defaults", "commands")

    def __init__(
            self,
            *,
            defaults=True,
            converter=Unset,
            shell=False,
            fancy=False,
            colorful=False,
            deferred=False,
            prog="cmdtools"
    ):
        if not isinstance(prog, str) or not prog.strip():
            raise TypeError(f"{type(self).__typename__} 'prog' must be a non-empty string")

        self._defaults = bool(defaults)
        self._converter = Unset
        self.converter = coalesce(converter, Converter())
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        self._deferred = bool(deferred)
        self._prog = prog.strip()
        self._fallback = Unset

        self._builtin = {}
        self._supported = {}

        for default in (listing,):
            self._builtin[default.name.lower()] = default

        self.register(Command(
            self._helper,
            name="help",
            descr="Prints the help you are currently reading.",
            parameters=[
                Parameter("command", STRING, "The command to print the documentation for.", default="", ordinal=0),
            ],
        ))

    @property
    def defaults(self):
        return self._defaults

    @defaults.setter
    def defaults(self, enabled):
        self._defaults = bool(enabled)

    @property
    def converter(self):
        return self._converter

    @converter.setter
    def converter(self, converter):
        if converter is None or converter is Unset:
            raise TypeError(f"{type(self).__typename__} 'converter' cannot be removed")
        elif not isinstance(converter, Converter):
            raise TypeError(f"{type(self).__typename__} 'converter' must be a converter")
        self._converter = converter

    @property
    def commands(self):
        visible = list(self._builtin.values()) if self._defaults else []
        return tuple(visible + list(self._supported.values()))

    def register(self, command, /):
        """
        Add command to the supported commands.

        Returns False (and changes nothing) when a command with the same name,
        in any case, is already known, built-ins included.
        """
        if not isinstance(command, Command):
            raise TypeError("register() argument must be a command")
        if (key := command.name.lower()) in self._builtin or key in self._supported:
            return False
        self._supported[key] = command
        return True

    def find(self, name, /):
        """
        The visible command called name (any case), or None.
        """
        if not isinstance(name, str):
            raise TypeError("find() argument must be a string")
        key = name.strip().lower()
        if self._defaults and key in self._builtin:
            return self._builtin[key]
        return self._supported.get(key)

    def command(self, source=Unset, /, *args, **kwargs):
        """
        Build a Command with commands.command(...) and register it.

        Works directly (registry.command(callback, ...)) or as a decorator
        (@registry.command(...)).

        Unlike register(), which ignores a colliding name and returns False,
        this raises ValueError when the name is taken, so that a decorated
        name is never bound to a command the registry does not hold.
        """
        def attach(created):
            if not self.register(created):
                raise ValueError(f"{type(self).__typename__} already has a command named {created.name!r}")
            return created

        if source is not Unset:
            return attach(command(source, *args, **kwargs))

        factory = command(Unset, *args, **kwargs)

        @rename("command")
        def wrapper(source, /):
            return attach(factory(source))

        return wrapper

    def include(self, source, /):
        """
        Import the modules matching a module glob and register their commands.

        Parameters
        - source: str
          Module glob, e.g. "app.commands.*" or "app.**.commands" (see mglob).

        Behavior
        - every module-level Command of every matched module is registered.
        - a module or package that fails to import, while searching or while
          loading, is skipped after a CommandLoadWarning; discovery never
          aborts on it.

        Returns
        - names of the commands that were registered, in discovery order.
        """
        if not isinstance(source, str):
            raise TypeError("include() argument must be a string")

        def skip(name):
            failed.add(name)
            self._unloadable(name, sys.exception())

        failed = set()
        registered = []
        for name in mglob(source, skip):
            if name in failed:
                continue
            try:
                module = importlib.import_module(name)
            except Exception as error:
                self._unloadable(name, error)
                continue
            for _, object in inspect.getmembers(module, lambda object: isinstance(object, Command)):
                if self.register(object):
                    registered.append(object.name)
        return registered

    def _unloadable(self, name, error):
        self.trigger(CommandLoadWarning(
            f"unable to import module {name!r}: {error}",
            title="command load failed",
            code=FaultCode.COMMAND_LOAD_FAILED,
            hint="check the module for syntax or import errors",
            docs=getdoc(FaultCode.COMMAND_LOAD_FAILED),
            module=name,
        ))

    def fallback(self, fallback, /):
        """
        Register a one-time fault handler, called instead of raising/rendering.

        Returns the same callable, enabling decorator-style usage: @registry.fallback
        """
        if not callable(fallback):
            raise TypeError(f"{type(self).__typename__} fallback must be callable")
        if self._fallback is not Unset:
            raise TypeError(f"{type(self).__typename__} fallback cannot be overridden")
        self._fallback = fallback
        return fallback

    def trigger(self, fault, /, **options):
        """
        Surface fault with the registry's runtime options.

        Not in shell mode (and without fallback) errors are raised here. When
        the fault is handled without raising, None is returned.
        """
        if (
                not hasattr(fault, "__trigger__") or
                not callable(fault.__trigger__) or
                not hasattr(fault, "__replace__") or
                not callable(fault.__replace__)
        ):
            raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
        fault = copy.replace(
            fault,
            **options,
            prog=self._prog,
            shell=self._shell,
            fancy=self._fancy,
            colorful=self._colorful,
            deferred=self._deferred
        )
        if self._fallback:
            self._fallback(fault)
        else:
            trigger(fault)

    def _fault(self, cls, code, title, message, hint, **context):
        return self.trigger(cls(
            message,
            title=title,
            code=code,
            hint=hint,
            docs=getdoc(code),
            **context
        ))

    def resolve(self, name, tokens, /, *, input=Unset):
        """
        Bind tokens to the parameters of the command called name.

        Parameters
        - name: str, the command name (any case).
        - tokens: Iterable[str], the argument tokens (quotes already removed).
        - input: the original line, kept on faults for rendering.

        Returns
        - Invocation, or None when a fault was handled without raising.

        Raises (not in shell mode, without fallback)
        - UnknownCommandError, UnknownParameterError, ParameterTypeMismatchError,
          DuplicateParameterError, MissingParameterError.
        """
        if not isinstance(name, str):
            raise TypeError("resolve() first argument must be a string")
        if not isinstance(tokens, Iterable) or isinstance(tokens, str):
            raise TypeError("resolve() second argument must be an iterable of strings")
        tokens = list(tokens)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("resolve() second argument must be an iterable of strings")

        input = coalesce(input, " ".join([name, *map(quote, tokens)]))

        if (command := self.find(name)) is None:
            return self._fault(
                UnknownCommandError,
                FaultCode.UNKNOWN_COMMAND,
                "unknown command",
                f"command {name.strip()!r} was not recognized",
                _suggest(name.strip(), [known.name for known in self.commands]) or
                "type 'help' to list the available commands",
                input=input,
                command=name,
            )

        bindings = {parameter.name.lower(): [] for parameter in command.parameters}
        used = set()
        cursor = 0
        index = 0

        while index < len(tokens):
            token = tokens[index]

            if token.startswith("--"):
                negated = token.startswith("--not-")
                target = token[6:] if negated else token[2:]
                if (parameter := command.parameter(target)) is None:
                    return self._fault(
                        UnknownParameterError,
                        FaultCode.UNKNOWN_PARAMETER,
                        "unknown parameter",
                        f"command {command.name!r} has no parameter {target!r}",
                        _suggest(target, [known.name for known in command.parameters]) or
                        "type 'help %s' to list its parameters" % command.name.lower(),
                        input=input,
                        command=command.name,
                        index=index,
                    )
                if not parameter.type.is_valid_value(not negated):
                    return self._fault(
                        ParameterTypeMismatchError,
                        FaultCode.TYPE_MISMATCH,
                        "parameter type mismatch",
                        f"{token!r} is a boolean switch but parameter {parameter.name!r} "
                        f"is {parameter.type.display_name}",
                        f"give the value explicitly: {parameter.name} <value>",
                        input=input,
                        command=command.name,
                        parameter=parameter.name,
                        index=index,
                    )
                used.add(parameter.name.lower())
                bindings[parameter.name.lower()].append(not negated)
                index += 1
                continue

            if (parameter := command.parameter(token)) is not None:
                used.add(parameter.name.lower())
                if index + 1 >= len(tokens):
                    return self._fault(
                        MissingParameterError,
                        FaultCode.MISSING_PARAMETER,
                        "missing parameter",
                        f"parameter {parameter.name!r} is missing its value",
                        "put the value right after the parameter name",
                        input=input,
                        command=command.name,
                        parameter=parameter.name,
                        index=index,
                    )
                raw = tokens[index + 1]
                step = 2
                position = index + 1
            else:
                while cursor < len(command.ordered) and command.ordered[cursor].name.lower() in used:
                    cursor += 1
                if cursor == len(command.ordered):
                    return self._fault(
                        UnknownParameterError,
                        FaultCode.UNKNOWN_PARAMETER,
                        "unknown parameter",
                        f"unexpected {ordinal(index + 1)} argument {token!r}: "
                        f"command {command.name!r} has no positional parameter left",
                        _suggest(token, [known.name for known in command.parameters]) or
                        "name the parameter this value belongs to",
                        input=input,
                        command=command.name,
                        index=index,
                    )
                parameter = command.ordered[cursor]
                cursor += 1
                used.add(parameter.name.lower())
                raw = token
                step = 1
                position = index

            if (value := self._converter.convert(raw, parameter.type)) is None:
                return self._fault(
                    ParameterTypeMismatchError,
                    FaultCode.TYPE_MISMATCH,
                    "parameter type mismatch",
                    f"cannot convert {raw!r} to {parameter.type.display_name} for parameter {parameter.name!r}",
                    _expectation(parameter.type),
                    input=input,
                    command=command.name,
                    parameter=parameter.name,
                    index=position,
                )
            bindings[parameter.name.lower()].append(value)
            index += step

        values = []
        for parameter in command.parameters:
            match bindings[parameter.name.lower()]:
                case [value]:
                    values.append((parameter, value))
                case []:
                    if parameter.required:
                        if parameter.ordered:
                            hint = (
                                f"pass it as '{parameter.name} <value>' or as the "
                                f"{ordinal(parameter.ordinal)} positional argument"
                            )
                        else:
                            hint = f"pass it as '{parameter.name} <value>'"
                        return self._fault(
                            MissingParameterError,
                            FaultCode.MISSING_PARAMETER,
                            "missing parameter",
                            f"command {command.name!r} requires parameter {parameter.name!r}",
                            hint,
                            input=input,
                            command=command.name,
                            parameter=parameter.name,
                        )
                    values.append((parameter, copy.deepcopy(parameter.default)))
                case given:
                    return self._fault(
                        DuplicateParameterError,
                        FaultCode.DUPLICATE_PARAMETER,
                        "duplicate parameter",
                        f"parameter {parameter.name!r} was given {len(given)} times",
                        "give every parameter at most once, by name or by position",
                        input=input,
                        command=command.name,
                        parameter=parameter.name,
                    )

        return Invocation(command, values)

    def parse(self, line, /):
        """
        Tokenize line and resolve it; see resolve() for results and faults.

        Raises MalformedCommandError (not in shell mode, without fallback) when
        the line does not follow the command grammar.
        """
        try:
            tokens = tokenize(line)
        except MalformedCommandError as fault:
            return self.trigger(fault)
        return self.resolve(tokens[0], tokens[1:], input=line)

    def _helper(self, values, stream):
        name = values["command"].strip().lower()

        if not name:
            stream.write("Documentation of all recognized commands: \n\n")
            for known in self.commands:
                stream.write(known.documentation() + "\n")
            return True

        if (known := self.find(name)) is None:
            stream.write(f"The command '{name}' was not recognized.\n")
            return False

        stream.write(f"Printing help for command '{name}': \n")
        stream.write(known.documentation() + "\n")
        return True


def invoke(registry, prompt=Unset, /):
    """
    Parse and run one command line against registry, writing output to stdout.

    Parameters
    - registry: Registry
    - prompt:
      • Unset: the process arguments (sys.argv[1:]), re-quoted so that each
        argument stays a single token.
      • str: a command line.
      • Iterable[str]: tokens, re-quoted the same way.

    Returns
    - ExecutionResult, or None when resolution failed without raising.
    """
    if not isinstance(registry, Registry):
        raise TypeError("invoke() first argument must be a registry")
    if prompt is Unset:
        prompt = sys.argv[1:]
    if not isinstance(prompt, str):
        if not isinstance(prompt, Iterable):
            raise TypeError("invoke() second argument must be a string or an iterable of strings")
        prompt = list(prompt)
        if not all(isinstance(item, str) for item in prompt):
            raise TypeError("invoke() second argument must be a string or an iterable of strings")
        prompt = " ".join(map(quote, prompt))
    if (invocation := registry.parse(prompt)) is None:
        return None
    return invocation.execute(sys.stdout)


__all__ = (
    "Registry",
    "invoke",
)
