"""Error kinds raised by the modeling core.

Every error is raised synchronously to the immediate caller. Each class also
inherits the closest builtin exception so callers may catch either.
"""


class ModelCoreError(Exception):
    """Base class for all modelcore errors."""

    pass


class InvalidArgumentError(ModelCoreError, ValueError):
    """Raised when a FieldMask operation receives an invalid name or a non-mask."""

    pass


class IncompatibleMaskError(ModelCoreError, ValueError):
    """Raised when merging masks that select the same path both whole and partially."""

    pass


class TypeMismatchError(ModelCoreError, TypeError):
    """Raised when a value cannot be turned into the expected model or field type."""

    pass


class DuplicateFieldError(ModelCoreError, ValueError):
    """Raised when a field name is defined twice along a model's inheritance chain."""

    pass


class UnknownTypeError(ModelCoreError, LookupError):
    """Raised when a type tag is not present in the model registry."""

    pass


class RegistryMissingError(ModelCoreError, LookupError):
    """Raised when a tagged lookup is attempted on a model with no registry installed."""

    pass


class DefaultResolutionError(ModelCoreError, RuntimeError):
    """Raised when a chain of default producers does not settle on a value."""

    pass
