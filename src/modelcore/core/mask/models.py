"""FieldMask: a selection tree describing which fields of a nested value matter.

Usage:
    mask = FieldMask({"title": True, "author": {"name": True}})

    mask.get("author")       # FieldMask({"name": True})
    mask.get("title")        # True
    mask.get("missing")      # False

    wider = mask | FieldMask({"author": {"email": True}})
    narrower = wider - FieldMask({"title": True})
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any, Literal, Protocol, runtime_checkable

from modelcore.core.errors import InvalidArgumentError
from modelcore.core.mask.operations import (
    FieldTree,
    check_name,
    copy_fields,
    includes_fields,
    merge_fields,
    remove_fields,
)


@runtime_checkable
class FieldMaskLike(Protocol):
    """Anything exposing a field selection tree."""

    def __field_mask__(self) -> Mapping[str, Any]: ...


def is_field_mask(obj: Any) -> bool:
    """Check whether an object can be used as a field mask.

    Args:
        obj: Object to check.

    Returns:
        True if obj implements the FieldMaskLike protocol.
    """
    return isinstance(obj, FieldMaskLike)


def _tree_of(obj: Any) -> Mapping[str, Any]:
    if not is_field_mask(obj):
        raise InvalidArgumentError(f"Expected a FieldMask (received: {type(obj).__name__})")
    return obj.__field_mask__()


class FieldMask:
    """Selection of field paths over a (possibly nested) object.

    The backing tree is copied on construction, so masks never share
    substructure. ``add`` and ``remove`` return new masks; ``set`` updates the
    receiver for incremental building.
    """

    __slots__ = ("_fields",)

    __hash__ = None  # type: ignore[assignment]

    def __init__(self, fields: Mapping[str, Any] | None = None) -> None:
        if fields is None:
            fields = {}
        if not isinstance(fields, Mapping):
            raise InvalidArgumentError(f"Expected a mapping (received: {type(fields).__name__})")
        self._fields: FieldTree = copy_fields(fields)

    def __field_mask__(self) -> Mapping[str, Any]:
        return self._fields

    def serialize(self) -> FieldTree:
        """Return a deep copy of the selection tree."""
        return copy_fields(self._fields)

    def get(self, name: str) -> FieldMask | bool:
        """Look up the selection for one field.

        Args:
            name: Field name.

        Returns:
            False if the field is not selected, True if it is selected whole,
            otherwise a FieldMask of its selected subfields.

        Raises:
            InvalidArgumentError: If name is not a non-empty string.
        """
        subfields = self._fields.get(check_name(name))
        if subfields is None:
            return False
        if subfields is True:
            return True
        return FieldMask(subfields)

    def has(self, name: str) -> bool:
        """Check whether a field is selected, whole or partially."""
        return check_name(name) in self._fields

    def set(self, name: str, subfields: Literal[True] | FieldMaskLike) -> None:
        """Record the selection for a field, replacing any previous one.

        Args:
            name: Field name.
            subfields: True to select the field whole, or a mask of its subfields.

        Raises:
            InvalidArgumentError: If name is invalid or subfields is neither True
                nor a field mask.
        """
        check_name(name)
        if subfields is True:
            self._fields[name] = True
            return
        self._fields[name] = copy_fields(_tree_of(subfields))

    def is_empty(self) -> bool:
        """Check whether nothing is selected."""
        return not self._fields

    def includes(self, other: FieldMaskLike) -> bool:
        """Check that every path selected by ``other`` is also selected here."""
        return includes_fields(self._fields, _tree_of(other))

    @staticmethod
    def is_field_mask(obj: Any) -> bool:
        """Check whether an object can be used as a field mask."""
        return is_field_mask(obj)

    @staticmethod
    def is_equal(mask: FieldMaskLike, other: FieldMaskLike) -> bool:
        """Structural equality of two masks."""
        return copy_fields(_tree_of(mask)) == copy_fields(_tree_of(other))

    @staticmethod
    def add(mask: FieldMaskLike, other: FieldMaskLike) -> FieldMask:
        """Union of two masks.

        Raises:
            InvalidArgumentError: If either argument is not a field mask.
            IncompatibleMaskError: If a path is whole in one mask and partial in the other.
        """
        return FieldMask(merge_fields(_tree_of(mask), _tree_of(other)))

    @staticmethod
    def remove(mask: FieldMaskLike, other: FieldMaskLike) -> FieldMask:
        """Paths of ``mask`` not covered by ``other``.

        Raises:
            InvalidArgumentError: If either argument is not a field mask.
        """
        return FieldMask(remove_fields(_tree_of(mask), _tree_of(other)))

    def __or__(self, other: Any) -> FieldMask:
        if not is_field_mask(other):
            return NotImplemented
        return FieldMask.add(self, other)

    def __sub__(self, other: Any) -> FieldMask:
        if not is_field_mask(other):
            return NotImplemented
        return FieldMask.remove(self, other)

    def __eq__(self, other: object) -> bool:
        if not is_field_mask(other):
            return NotImplemented
        return FieldMask.is_equal(self, other)  # type: ignore[arg-type]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name in self._fields

    def __bool__(self) -> bool:
        return not self.is_empty()

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __repr__(self) -> str:
        return f"FieldMask({self._fields!r})"
