"""Pure functions over field selection trees.

A tree maps field names to either ``True`` (the field is selected whole) or a
nested tree (the field is selected partially). These functions never mutate
their inputs.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from modelcore.core.errors import IncompatibleMaskError, InvalidArgumentError

type FieldTree = dict[str, Any]


def check_name(name: Any) -> str:
    """Validate a field name.

    Args:
        name: Candidate field name.

    Returns:
        The name unchanged.

    Raises:
        InvalidArgumentError: If name is not a non-empty string.
    """
    if not isinstance(name, str) or name == "":
        raise InvalidArgumentError(f"Field name must be a non-empty string (received: {name!r})")
    return name


def copy_fields(fields: Mapping[str, Any]) -> FieldTree:
    """Validate a raw tree and return a deep copy of it.

    Args:
        fields: Raw tree.

    Returns:
        Independent copy sharing no substructure with the input.

    Raises:
        InvalidArgumentError: If a name is not a non-empty string, or a value is
            neither True nor a mapping.
    """
    copied: FieldTree = {}
    for name, subfields in fields.items():
        check_name(name)
        if subfields is True:
            copied[name] = True
        elif isinstance(subfields, Mapping):
            copied[name] = copy_fields(subfields)
        else:
            raise InvalidArgumentError(
                f"Field '{name}' must map to True or a nested mapping "
                f"(received: {type(subfields).__name__})"
            )
    return copied


def includes_fields(fields: Mapping[str, Any], other_fields: Mapping[str, Any]) -> bool:
    """Check that every path selected by ``other_fields`` is selected by ``fields``.

    Only names are checked level by level: a leaf on the ``fields`` side covers
    anything beneath it, and a leaf on the other side only requires the name to
    be present.

    Args:
        fields: Tree that should include the other.
        other_fields: Tree whose paths are checked.

    Returns:
        True if all paths are included, False on the first missing one.
    """
    for name, other_subfields in other_fields.items():
        subfields = fields.get(name)
        if subfields is None:
            return False
        if subfields is True or other_subfields is True:
            continue
        if not includes_fields(subfields, other_subfields):
            return False
    return True


def merge_fields(fields: Mapping[str, Any], other_fields: Mapping[str, Any]) -> FieldTree:
    """Union of two trees.

    Args:
        fields: First tree.
        other_fields: Second tree.

    Returns:
        New tree selecting every path of both inputs.

    Raises:
        IncompatibleMaskError: If one tree selects a field whole and the other
            selects it partially.
    """
    merged: FieldTree = dict(fields)

    for name, other_subfields in other_fields.items():
        subfields = fields.get(name)

        if other_subfields is True:
            if isinstance(subfields, Mapping):
                raise IncompatibleMaskError(
                    f"Cannot merge incompatible field masks (field '{name}' is both whole and partial)"
                )
            merged[name] = True
        else:
            if subfields is True:
                raise IncompatibleMaskError(
                    f"Cannot merge incompatible field masks (field '{name}' is both whole and partial)"
                )
            merged[name] = merge_fields(subfields or {}, other_subfields)

    return merged


def remove_fields(fields: Mapping[str, Any], other_fields: Mapping[str, Any]) -> FieldTree:
    """Difference of two trees.

    A leaf in ``other_fields`` removes the whole subtree. A nested entry is
    subtracted recursively and the name is kept only if something remains; a leaf
    in ``fields`` has no enumerable subfields, so it leaves nothing behind.

    Args:
        fields: Tree to subtract from.
        other_fields: Tree to subtract.

    Returns:
        New tree with the paths of ``fields`` not covered by ``other_fields``.
    """
    remaining: FieldTree = {}

    for name, subfields in fields.items():
        other_subfields = other_fields.get(name)

        if other_subfields is None:
            remaining[name] = subfields
        elif isinstance(other_subfields, Mapping):
            if subfields is True:
                continue
            rest = remove_fields(subfields, other_subfields)
            if rest:
                remaining[name] = rest

    return remaining
