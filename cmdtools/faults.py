"""
cmdtools faults (errors and warnings) and rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing issue, grouped
  by pipeline stage (tokenizing, routing, parameter resolution, loading).
- CommandException / CommandWarning: base types carrying a message plus
  options; they render themselves with rich.
- trigger(): single entry point to surface a fault (raise, or render in shell mode).
- getdoc(): optional per-code documentation supplied by the host application.

Taxonomy
- MalformedCommandError       the line does not follow the command grammar
- UnknownCommandError         no registered command has that name
- UnknownParameterError       a token names no parameter, or no ordinal slot is left
- ParameterTypeMismatchError  a raw value cannot be converted to the parameter type
- DuplicateParameterError     a parameter received more than one value
- MissingParameterError       a parameter without default received no value
- CommandLoadWarning          best-effort discovery could not import a module

Integration
- Registry.resolve/parse build faults with title/code/hint/docs and context
  (input, command, parameter, index) and hand them to Registry.trigger.
- Not in shell mode faults are raised (warnings go through warnings.warn); in
  shell mode they are printed on stderr and errors end the process unless the
  registry is deferred.
- Host knobs read from __main__: __prog__, __styles__, __codes__, __docs__.
"""
import copy
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - syntax (1110x)
      • MALFORMED_COMMAND
    - routing (1111x)
      • UNKNOWN_COMMAND
    - parameters (1112x)
      • UNKNOWN_PARAMETER, TYPE_MISMATCH, DUPLICATE_PARAMETER, MISSING_PARAMETER
    - warnings (12xxx)
      • COMMAND_LOAD_FAILED

    normalize() lets the host relabel codes through a __codes__ mapping in
    __main__ while the numbers themselves never change.
    """
    # --- syntax errors (11xxx) ---
    MALFORMED_COMMAND           = 11101

    # --- routing errors (11xxx) ---
    UNKNOWN_COMMAND             = 11111

    # --- parameter errors (11xxx) ---
    UNKNOWN_PARAMETER           = 11121
    TYPE_MISMATCH               = 11122
    DUPLICATE_PARAMETER         = 11123
    MISSING_PARAMETER           = 11124

    # --- warnings (12xxx) ---
    COMMAND_LOAD_FAILED         = 12101

    def normalize(self):
        """
        return the host label for this code (numeric string when unmapped).
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette, /):
    """
    build the rich renderable shared by errors and warnings.

    layout
    - plain:  "[ prog — code | Title ]", message, "→ hint"
    - fancy:  a panel titled with the header, holding message and hint
    """
    main = __import__("__main__")
    options = fault.options

    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))
    colorful = options.get("colorful", False)

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), styles[style] if colorful else "")

    code = options.get("code")
    header = Text.assemble(
        "[ ",
        text(getattr(main, "__prog__", options.get("prog", "cmdtools")), "prog-name"),
        " — ",
        text(code.normalize() if isinstance(code, FaultCode) else "?", "code"),
        " | ",
        text(str(options.get("title", type(fault).__name__)).title(), "title"),
        " ]"
    )
    message = text(fault.message or "", "message")
    parts = [message]
    if hint := options.get("hint"):
        parts.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))
    if docs := options.get("docs"):
        parts.append(text(docs, "docs"))

    if options.get("fancy", False):
        return Panel(Group(*parts), title=header, title_align="left")

    return Group(header, *parts)


class CommandException(Exception):
    """
    base of every fault raised while tokenizing, resolving or loading.

    the message is the first positional argument; every other piece of context
    travels in read-only options (title, code, hint, docs, input, command,
    parameter, index and the runtime flags shell/fancy/colorful/deferred).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message or ""

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "title": "bold #FF4DA6",
            "message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
            "docs": "dim",
        })

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        if self.options.get("deferred", False):
            return
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class MalformedCommandError(CommandException): ...
class UnknownCommandError(CommandException): ...
class UnknownParameterError(CommandException): ...
class ParameterTypeMismatchError(CommandException): ...
class DuplicateParameterError(CommandException): ...
class MissingParameterError(CommandException): ...


class CommandWarning(Warning):
    """
    base of non-fatal faults; same options and rendering as CommandException.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message or ""

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",
            "title": "bold #FFC2E0",
            "message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
            "docs": "dim",
        })

    def __trigger__(self):
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=3)
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class CommandLoadWarning(CommandWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ (see the base classes).
    - options are merged into a copy of the fault before it is triggered.
    - not in shell mode errors are raised; in shell mode they are rendered.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    documentation for a fault code from the __docs__ mapping of __main__, or None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "CommandException",
    "MalformedCommandError",
    "UnknownCommandError",
    "UnknownParameterError",
    "ParameterTypeMismatchError",
    "DuplicateParameterError",
    "MissingParameterError",
    "CommandWarning",
    "CommandLoadWarning",
    "FaultCode",
    "trigger",
    "getdoc",
)
