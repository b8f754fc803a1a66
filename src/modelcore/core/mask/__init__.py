"""Field mask functionality: selection trees and their algebra."""

from modelcore.core.mask.models import FieldMask, FieldMaskLike, is_field_mask
from modelcore.core.mask.operations import (
    copy_fields,
    includes_fields,
    merge_fields,
    remove_fields,
)

__all__ = [
    # Models
    "FieldMask",
    "FieldMaskLike",
    "is_field_mask",
    # Operations
    "copy_fields",
    "includes_fields",
    "merge_fields",
    "remove_fields",
]
