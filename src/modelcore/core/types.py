"""Core type definitions for modelcore."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, Final

if TYPE_CHECKING:
    from modelcore.core.model.field import Field
    from modelcore.core.mask.models import FieldMaskLike


class _Missing:
    """Marker for an absent value, distinct from an explicit ``None``."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _Missing:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> _Missing:
        return self


MISSING: Final = _Missing()

type IncludeFields = bool | Sequence[str] | FieldMaskLike | Callable[[Field], bool]
"""Field selection accepted by ``Model.serialize(include_fields=...)``."""
