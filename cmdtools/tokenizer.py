r"""
cmdtools tokenizer: split one command line into a name and argument tokens.

Grammar
    line      := ws* name (ws+ argument)* ws*
    name      := [_a-zA-Z][_a-zA-Z0-9]*
    argument  := quoted | brace | bare
    quoted    := '"' (escape | any char but '"' and '\')* '"'
    escape    := '\' ( '\' | '"' | "'" | t | n | b | r | f | u HEX{4} )
    brace     := '{' ws* [item (separator item)*] ws* '}'
    separator := ws* ',' ws* | ws+
    item      := brace | quoted | element
    element   := run of chars other than whitespace , { } "
    bare      := run of non-whitespace chars

Tokens
- token 0 is the command name.
- quoted strings lose their quotes and are descaped.
- brace literals are returned raw; the converter splits them with tokenize_array().
- bare tokens are returned untouched ("--x" and "--not-x" mean nothing here).

Every violation raises MalformedCommandError, naming the character position.
"""
import re

from .faults import MalformedCommandError, FaultCode, getdoc
from .utils import ordinal

_NAME = re.compile(r"[_a-zA-Z][_a-zA-Z0-9]*")
_HEX = re.compile(r"[0-9a-fA-F]{4}")
_ESCAPES = {
    "t": "\t",
    "b": "\b",
    "n": "\n",
    "r": "\r",
    "f": "\f",
    "'": "'",
    '"': '"',
    "\\": "\\",
}
_QUOTES = {value: "\\" + key for key, value in _ESCAPES.items() if key != "'"}


def _fail(line, index, message, hint):
    raise MalformedCommandError(
        "%s at %s character" % (message, ordinal(index + 1)),
        title="malformed command",
        code=FaultCode.MALFORMED_COMMAND,
        hint=hint,
        input=line,
        index=index,
        docs=getdoc(FaultCode.MALFORMED_COMMAND)
    )


def _skip(line, index):
    while index < len(line) and line[index].isspace():
        index += 1
    return index


def _scan_bare(line, index):
    while index < len(line) and not line[index].isspace():
        index += 1
    return index


def _scan_name(line, index):
    end = _scan_bare(line, index)
    if not _NAME.fullmatch(line, index, end):
        _fail(
            line,
            index,
            "bad command name %r" % line[index:end],
            "command names start with a letter or '_' followed by letters, digits or '_'"
        )
    return end


def _scan_escape(line, index):
    # index points at the backslash; returns the index after the sequence
    try:
        char = line[index + 1]
    except IndexError:
        _fail(line, index, "dangling escape", "escape a literal backslash as \\\\")
    if char == "u":
        if not _HEX.fullmatch(line, index + 2, index + 6):
            _fail(line, index, "bad unicode escape %r" % line[index:index + 6], "write unicode escapes as \\uXXXX")
        return index + 6
    if char not in _ESCAPES:
        _fail(line, index, "unsupported escape %r" % line[index:index + 2], "supported escapes are \\\\ \\\" \\' \\t \\n \\b \\r \\f \\uXXXX")
    return index + 2


def _scan_string(line, index):
    """
    validate a quoted string starting at index; return (end, raw content).
    """
    start = index
    index += 1
    while index < len(line):
        match line[index]:
            case "\\":
                index = _scan_escape(line, index)
            case '"':
                return index + 1, line[start + 1:index]
            case _:
                index += 1
    _fail(line, start, "unterminated string", "close the string with a double quote")


def _scan_element(line, index):
    while index < len(line) and not line[index].isspace() and line[index] not in ',{}"':
        index += 1
    return index


def _scan_array(line, index):
    """
    validate a brace literal starting at index; return the index after its '}'.
    """
    start = index
    index = _skip(line, index + 1)
    if index < len(line) and line[index] == "}":
        return index + 1

    while True:
        if index >= len(line):
            _fail(line, start, "unterminated array", "close the array with '}'")
        match line[index]:
            case "{":
                index = _scan_array(line, index)
            case '"':
                index, _ = _scan_string(line, index)
            case "," | "}":
                _fail(line, index, "empty array element", "remove the extra ',' or put a value before it")
            case _:
                index = _scan_element(line, index)

        following = _skip(line, index)
        if following >= len(line):
            _fail(line, start, "unterminated array", "close the array with '}'")
        elif line[following] == "}":
            return following + 1
        elif line[following] == ",":
            index = _skip(line, following + 1)
        elif following > index:
            index = following
        else:
            _fail(line, following, "unexpected %r in array" % line[following], "separate array elements with ','")


def descape(text, /):
    r"""
    Replace escape sequences in text by the characters they stand for.

    Supported: \\ \" \' \t \n \b \r \f and \uXXXX. Anything else raises
    MalformedCommandError. Text without backslashes is returned unchanged.
    """
    if "\\" not in text:
        return text
    parts = []
    index = 0
    while (occurrence := text.find("\\", index)) >= 0:
        parts.append(text[index:occurrence])
        index = _scan_escape(text, occurrence)
        if text[occurrence + 1] == "u":
            parts.append(chr(int(text[occurrence + 2:index], 16)))
        else:
            parts.append(_ESCAPES[text[occurrence + 1]])
    parts.append(text[index:])
    return "".join(parts)


def tokenize(line, /):
    """
    Split a command line into [name, argument, ...].

    Raises
    - TypeError: line is not a string.
    - MalformedCommandError: empty line, bad command name, unterminated string,
      unsupported escape or malformed array literal.
    """
    if not isinstance(line, str):
        raise TypeError("tokenize() argument must be a string")

    index = _skip(line, 0)
    if index == len(line):
        _fail(line, 0, "empty command", "type a command name, for example 'help'")

    end = _scan_name(line, index)
    tokens = [line[index:end]]
    index = end

    while (index := _skip(line, index)) < len(line):
        match line[index]:
            case '"':
                end, content = _scan_string(line, index)
                tokens.append(descape(content))
            case "{":
                end = _scan_array(line, index)
                tokens.append(line[index:end])
            case _:
                end = _scan_bare(line, index)
                tokens.append(line[index:end])
        index = end

    return tokens


def tokenize_array(text, /):
    """
    Split a brace literal into "{", "}" and element tokens.

    Commas and whitespace separate elements and are dropped; quoted elements
    are descaped. Nesting is not checked here: the converter does that while
    walking the tokens.
    """
    tokens = []
    index = 0
    while index < len(text):
        char = text[index]
        if char.isspace() or char == ",":
            index += 1
        elif char in "{}":
            tokens.append(char)
            index += 1
        elif char == '"':
            index, content = _scan_string(text, index)
            tokens.append(descape(content))
        else:
            end = _scan_element(text, index)
            if end == index:
                _fail(text, index, "unexpected %r in array" % char, "separate array elements with ','")
            tokens.append(text[index:end])
            index = end
    return tokens


def quote(token, /):
    """
    Spell token so that tokenize() gives it back unchanged.

    Tokens without whitespace that do not start with '"' or '{' stay bare;
    everything else is wrapped in double quotes with escapes.
    """
    if not isinstance(token, str):
        raise TypeError("quote() argument must be a string")
    if token and not token.startswith(('"', "{")) and not any(map(str.isspace, token)):
        return token
    return '"%s"' % "".join(_QUOTES.get(char, char) for char in token)


__all__ = (
    "tokenize",
    "tokenize_array",
    "descape",
    "quote",
)
