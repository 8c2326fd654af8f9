"""
File naming templates: a tiny substitution language for generated file names.

Syntax
- literal text: any characters except { } : * ? " < > |
- {{ and }}: literal braces
- {originalname}, {extension}, {originallocation}: fields of FileNamingData
- {index} / {index:N}: the running index, zero-padded to N characters
  (a minus sign counts toward N)
Whitespace is allowed inside the braces, field names are lowercase.

    >>> template = FileNamingTemplate.parse("{originalname}_{index:3}{extension}")
    >>> template.render(FileNamingData("photo", 7, ".jpg", "/tmp/"))
    'photo_007.jpg'
"""
import collections
import re
from collections.abc import Mapping

from .utils import Introspective

_TOKEN = re.compile(r"""
    (?P<text>[^{}:*?"<>|]+)
  | (?P<open>\{\{)
  | (?P<close>\}\})
  | \{\s*index\s*(?::\s*(?P<width>[0-9]+)\s*)?(?P<index>\})
  | \{\s*(?P<field>originalname|extension|originallocation)\s*\}
""", re.VERBOSE)

_FIELDS = {
    "originalname": "original_name",
    "extension": "extension",
    "originallocation": "original_location",
}

FileNamingData = collections.namedtuple("FileNamingData", (
    "original_name",
    "index",
    "extension",
    "original_location",
))


def _pad(number, width):
    if number < 0:
        return "-" + str(-number).zfill(width - 1)
    return str(number).zfill(width)


class FileNamingTemplate(metaclass=Introspective):
    """
    A parsed template; build one with FileNamingTemplate.parse().

    Tokens are ("text", literal), ("field", name) or ("index", width) tuples.
    Two templates are equal when their tokens are; str() gives back a template
    string that parses to an equal template.
    """

    def __init__(self, tokens, /):
        self._tokens = tuple(tokens)

    @classmethod
    def parse(cls, text, /):
        """
        Parse text into a template.

        Raises
        - TypeError: text is not a string.
        - ValueError: text is not a valid template (unknown wildcard, stray
          brace, or a character that cannot appear in file names).
        """
        if not isinstance(text, str):
            raise TypeError(f"{cls.__typename__} template must be a string")

        tokens = []
        literal = []
        position = 0
        while position < len(text):
            if not (match := _TOKEN.match(text, position)):
                raise ValueError(
                    f"{cls.__typename__} {text!r} is either invalid or does not produce valid file names"
                )
            position = match.end()
            if match["text"] is not None:
                literal.append(match["text"])
            elif match["open"] is not None:
                literal.append("{")
            elif match["close"] is not None:
                literal.append("}")
            else:
                if literal:
                    tokens.append(("text", "".join(literal)))
                    literal.clear()
                if match["index"] is not None:
                    width = int(match["width"] or 0)
                    tokens.append(("index", width if width > 1 else 0))
                else:
                    tokens.append(("field", _FIELDS[match["field"]]))
        if literal:
            tokens.append(("text", "".join(literal)))
        return cls(tokens)

    def render(self, data, /):
        """
        Produce a file name from data (a FileNamingData or a mapping with the
        same keys).
        """
        if isinstance(data, Mapping):
            data = FileNamingData(**data)
        elif not isinstance(data, FileNamingData):
            raise TypeError(f"{type(self).__typename__} data must be file-naming data or a mapping")

        parts = []
        for kind, value in self._tokens:
            match kind:
                case "text":
                    parts.append(value)
                case "field":
                    parts.append(str(getattr(data, value)))
                case "index":
                    parts.append(_pad(data.index, value))
        return "".join(parts)

    def __str__(self):
        parts = []
        for kind, value in self._tokens:
            match kind:
                case "text":
                    parts.append(value.replace("{", "{{").replace("}", "}}"))
                case "field":
                    parts.append("{%s}" % value.replace("_", ""))
                case "index":
                    parts.append("{index:%d}" % value if value else "{index}")
        return "".join(parts)

    def __repr__(self):
        return f"{type(self).__typename__}({str(self)!r})"

    def __eq__(self, other):
        if not isinstance(other, FileNamingTemplate):
            return NotImplemented
        return self._tokens == other._tokens

    def __hash__(self):
        return hash(self._tokens)


def render(template, fields, /):
    """
    Render template (a string or a parsed template) with fields.
    """
    if isinstance(template, str):
        template = FileNamingTemplate.parse(template)
    elif not isinstance(template, FileNamingTemplate):
        raise TypeError("render() first argument must be a string or a file-naming template")
    return template.render(fields)


__all__ = (
    "FileNamingTemplate",
    "FileNamingData",
    "render",
)
