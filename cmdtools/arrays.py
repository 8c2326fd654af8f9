"""
Typed, possibly multi-dimensional array values.

An Array of dimension 1 holds elements valid for its element descriptor; an
Array of dimension n > 1 holds sub-arrays of dimension n - 1 (or None) whose
element descriptor is the same or a subtype.

    >>> matrix = Array(INT, 2, Array(INT, 1, 1, 2), Array(INT, 1, 3, 4))
    >>> matrix.get(1, 0)
    3
    >>> str(matrix)
    'int[][] { { 1, 2 }, { 3, 4 } }'
"""
import copy

from .descriptors import Descriptor, ArrayType
from .utils import Introspective, display


def _check_indices(indices):
    for index in indices:
        if not isinstance(index, int) or isinstance(index, bool):
            raise TypeError("array indices must be integers")


class Array(metaclass=Introspective):
    __introspectable__ = ("element", "dimensions")

    def __init__(self, element, dimensions, /, *elements):
        """
        Build an array and validate every entry.

        Raises
        - TypeError: element is not a non-array descriptor, dimensions is not an int.
        - ValueError: dimensions < 1, an element invalid for the descriptor, a
          sub-array of the wrong dimension or element type, or a plain value
          where a sub-array is expected.
        """
        if not isinstance(element, Descriptor) or isinstance(element, ArrayType):
            raise TypeError(f"{type(self).__typename__} 'element' must be a non-array descriptor")
        if not isinstance(dimensions, int) or isinstance(dimensions, bool):
            raise TypeError(f"{type(self).__typename__} 'dimensions' must be an integer")
        elif dimensions < 1:
            raise ValueError(f"{type(self).__typename__} cannot have {dimensions} dimensions")

        self._element = element
        self._dimensions = dimensions
        for entry in elements:
            self._check(entry, dimensions)
        self._elements = list(elements)

    def _check(self, entry, dimensions):
        # entry is about to be stored at a level holding `dimensions`-dimensional data
        if dimensions == 1:
            if not self._element.is_valid_value(entry):
                raise ValueError(
                    f"{type(self).__typename__} of {self._element.display_name} cannot hold {display(entry)!r}"
                )
        elif entry is None:
            return
        elif not isinstance(entry, Array):
            raise ValueError(
                f"{type(self).__typename__} with {dimensions} dimensions can only hold arrays, got {display(entry)!r}"
            )
        elif entry._dimensions != dimensions - 1:
            raise ValueError(
                f"{type(self).__typename__} with {dimensions} dimensions cannot hold "
                f"an array with {entry._dimensions} dimensions"
            )
        elif not self._element.accepts(entry._element):
            raise ValueError(
                f"{type(self).__typename__} of {self._element.display_name} cannot hold "
                f"an array of {entry._element.display_name}"
            )

    def _descend(self, indices):
        current = self
        for depth, index in enumerate(indices):
            if current is None:
                raise IndexError(f"no array at depth {depth} to index with {index}")
            if not 0 <= index < len(current._elements):
                raise IndexError(f"index {index} is out of range for array of length {len(current._elements)}")
            current = current._elements[index]
        if current is None:
            raise IndexError(f"no array at depth {len(indices)}")
        return current

    def get(self, *indices):
        """
        Return the element at exactly `dimensions` indices.
        """
        _check_indices(indices)
        if len(indices) != self._dimensions:
            raise IndexError(f"expected {self._dimensions} indices to reach an element, got {len(indices)}")
        parent = self._descend(indices[:-1])
        if not 0 <= (index := indices[-1]) < len(parent._elements):
            raise IndexError(f"index {index} is out of range for array of length {len(parent._elements)}")
        return parent._elements[index]

    def set(self, value, /, *indices):
        """
        Replace the element at exactly `dimensions` indices.
        """
        _check_indices(indices)
        if len(indices) != self._dimensions:
            raise IndexError(f"expected {self._dimensions} indices to reach an element, got {len(indices)}")
        self._check(value, 1)
        parent = self._descend(indices[:-1])
        if not 0 <= (index := indices[-1]) < len(parent._elements):
            raise IndexError(f"index {index} is out of range for array of length {len(parent._elements)}")
        parent._elements[index] = value

    def subarray(self, *indices):
        """
        Return the sub-array reached by 1 to dimensions - 1 indices (may be None).
        """
        _check_indices(indices)
        if not 0 < len(indices) < self._dimensions:
            raise IndexError(
                f"expected 1 to {self._dimensions - 1} indices to reach a sub-array, got {len(indices)}"
            )
        parent = self._descend(indices[:-1])
        if not 0 <= (index := indices[-1]) < len(parent._elements):
            raise IndexError(f"index {index} is out of range for array of length {len(parent._elements)}")
        return parent._elements[index]

    def assign(self, array, /, *indices):
        """
        Replace the sub-array reached by 1 to dimensions - 1 indices.
        """
        _check_indices(indices)
        if not 0 < len(indices) < self._dimensions:
            raise IndexError(
                f"expected 1 to {self._dimensions - 1} indices to reach a sub-array, got {len(indices)}"
            )
        self._check(array, self._dimensions - len(indices) + 1)
        parent = self._descend(indices[:-1])
        if not 0 <= (index := indices[-1]) < len(parent._elements):
            raise IndexError(f"index {index} is out of range for array of length {len(parent._elements)}")
        parent._elements[index] = array

    def conforms_to(self, type, /):
        """
        True for an ArrayType with the same dimensions accepting this element type.
        """
        return (
            isinstance(type, ArrayType) and
            type.dimensions == self._dimensions and
            type.element.accepts(self._element)
        )

    def __len__(self):
        return len(self._elements)

    def __iter__(self):
        return iter(list(self._elements))

    def __eq__(self, other):
        if not isinstance(other, Array):
            return NotImplemented
        return (
            self._element == other._element and
            self._dimensions == other._dimensions and
            self._elements == other._elements
        )

    __hash__ = None

    def __deepcopy__(self, memo):
        # descriptors are immutable and shared
        return type(self)(self._element, self._dimensions, *copy.deepcopy(self._elements, memo))

    def _values(self):
        entries = []
        for entry in self._elements:
            if isinstance(entry, Array):
                entries.append(entry._values())
            else:
                entries.append(display(entry))
        return "{ %s }" % ", ".join(entries)

    def __str__(self):
        return "%s%s %s" % (self._element.display_name, "[]" * self._dimensions, self._values())

    def __repr__(self):
        return f"{type(self).__typename__}({str(self)!r})"


__all__ = (
    "Array",
)
