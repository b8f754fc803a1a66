"""Model functionality: base class, field descriptor, type registry, and capabilities."""

from modelcore.core.model.core import Model
from modelcore.core.model.field import Field, SerializeOptions, field
from modelcore.core.model.models import ModelLike, is_model, is_model_type
from modelcore.core.model.registry import ModelRegistry

__all__ = [
    # Models
    "ModelLike",
    "is_model",
    "is_model_type",
    # Field
    "Field",
    "field",
    "SerializeOptions",
    # Core
    "Model",
    "ModelRegistry",
]
