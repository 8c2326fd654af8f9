"""
cmdtools files: file listing with extension filters, and the built-in "list" command.

Overview
- FilterMode.NONE / FILTER / ALLOW_ONLY decide which entries a listing keeps;
  folders are kept whenever folders are listed at all.
- list_files(folder, recurse, mode, filters, folders): depth-first listing with an
  explicit stack (no recursion limit), root included when folders are listed.
- extension(path) / stem(path) / parent(path): the pieces FileNamingData is made of.
- listing: the "list" command, printing a listing as a tree.

Filters are ";"-separated extension lists, trimmed and compared without
regard to case: "txt; MD" keeps (or drops) notes.txt and README.md.
"""
import enum
import os
import pathlib

from .commands import Command
from .descriptors import EnumType, BOOLEAN, STRING, FILE
from .parameters import Parameter


def _listed(suffix, filters):
    return any(suffix.strip().lower() == entry.strip().lower() for entry in filters.split(";"))


class FilterMode(enum.Enum):
    """
    How an extension filter applies to the files of a listing.

    - NONE: every file.
    - FILTER: files whose extension is not in the filters.
    - ALLOW_ONLY: files whose extension is in the filters.
    """
    NONE = "none"
    FILTER = "filter"
    ALLOW_ONLY = "allow-only"

    def allows(self, path, filters, folders, /):
        """
        True when path belongs in a listing filtered with filters.

        Folders are allowed exactly when folders is true, in every mode.
        """
        path = pathlib.Path(path)
        if path.is_dir():
            return bool(folders)
        match self:
            case FilterMode.NONE:
                return True
            case FilterMode.FILTER:
                return not _listed(extension(path)[1:], filters)
            case FilterMode.ALLOW_ONLY:
                return _listed(extension(path)[1:], filters)


FILTER_MODE = EnumType(FilterMode)


def list_files(folder, recurse, mode, filters, folders, /):
    """
    List the entries below folder that mode allows.

    Parameters
    - folder: path of an existing directory (ValueError otherwise).
    - recurse: also descend into sub-directories.
    - mode, filters: FilterMode and its extension filters.
    - folders: include directories (the root first).

    Returns
    - list[pathlib.Path]; the entries of each directory in sorted order,
      directories processed depth-first (last pushed, first listed).
    """
    folder = pathlib.Path(folder)
    if not isinstance(mode, FilterMode):
        raise TypeError("list_files() 'mode' must be a filter-mode")
    if not folder.is_dir():
        raise ValueError(f"the file {str(folder.absolute())!r} is not a directory we could possibly list files from")

    found = [folder] if folders else []
    directories = [folder]
    while directories:
        directory = directories.pop()
        for entry in sorted(directory.iterdir()):
            if mode.allows(entry, filters, folders):
                found.append(entry)
            if recurse and entry.is_dir():
                directories.append(entry)
    return found


def extension(path, /):
    """
    The extension of path with its dot (".txt"), or "" when there is none.
    """
    name = pathlib.Path(path).name
    index = name.rfind(".")
    return name[index:] if index >= 0 else ""


def stem(path, /):
    """
    The file name of path without its extension.
    """
    name = pathlib.Path(path).name
    index = name.rfind(".")
    return name[:index] if index >= 0 else name


def parent(path, /):
    """
    The absolute directory holding path, with a trailing separator.
    """
    return str(pathlib.Path(path).absolute().parent).rstrip(os.sep) + os.sep


def _print_tree(stream, entry, listed, depth, format, tree):
    # the root is always printed with its absolute path
    if depth and entry not in listed:
        return
    name = str(entry.absolute()) if not depth else entry.name
    prefix = "   |" * depth if tree else ""
    stream.write(prefix + format.replace("${name}", name) + "\n")
    if entry.is_dir():
        for child in sorted(entry.iterdir()):
            _print_tree(stream, child, listed, depth + 1, format, tree)


def _list(values, stream):
    folder = values["folder"]
    if not folder.is_dir():
        stream.write("The given file is not a directory we could list files from.\n")
        return False

    listed = set(list_files(
        folder,
        values["subdir"],
        values["filtermode"],
        values["filter"],
        values["listfolders"],
    ))
    _print_tree(stream, folder, listed, 0, values["format"], values["tree"])
    return True


listing = Command(
    _list,
    name="list",
    descr=(
        "This command lets you look at the files contained within a folder.\n"
        "It supports listing them as a tree, and also not as a tree "
        "(although the tree view is highly recommended).\n"
        "Also it supports filtering files, and a format for how to print the file name."
    ),
    parameters=[
        Parameter("folder", FILE, "The folder of the files to list.", ordinal=1),
        Parameter("tree", BOOLEAN, "Whether to format the output as a tree.", default=True),
        Parameter("filter", STRING, "The filter to apply to the search of files.", default=""),
        Parameter("filtermode", FILTER_MODE, "The filter mode to apply.", default=FilterMode.NONE),
        Parameter("listfolders", BOOLEAN, "Whether to list folders or not", default=True),
        Parameter("subdir", BOOLEAN, "Whether to also search within sub directories for files.", default=False),
        Parameter("format", STRING, "The template to use for the output of the files.", default="- ${name}"),
    ],
)


__all__ = (
    "FilterMode",
    "FILTER_MODE",
    "list_files",
    "extension",
    "stem",
    "parent",
    "listing",
)
