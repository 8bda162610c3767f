"""Exceptions raised by the typed_models library."""

from __future__ import annotations

from typing import Any


class TypedModelsError(Exception):
    """Base class for all typed_models errors.

    Subclasses declare a ``template`` formatted with the keyword fields given
    at construction. Each field is also exposed as an attribute so callers can
    inspect the offending value without parsing the message.
    """

    template = "{message}"

    def __init__(self, message: str | None = None, **fields: Any) -> None:
        self.fields = fields
        for key, value in fields.items():
            setattr(self, key, value)
        if message is None:
            message = self.template.format(**fields)
        super().__init__(message)


# ---------------------------------------------------------------------------
# Type registry
# ---------------------------------------------------------------------------


class InvalidTypeError(TypedModelsError, TypeError):
    template = "Invalid type `{type_expr}`"


InvalidTypeNameError = InvalidTypeError


class CannotOverridePrimitiveError(TypedModelsError, ValueError):
    template = "Cannot override primitive type `{type_name}`"


class CannotOverrideDefinedError(TypedModelsError, ValueError):
    template = "Type `{type_name}` is already defined"


class CannotDefineArrayError(TypedModelsError, ValueError):
    template = "Cannot define array type `{type_expr}`"


class CannotUndefinePrimitiveError(TypedModelsError, ValueError):
    template = "Cannot undefine primitive type `{type_name}`"


class CannotUndefineArrayError(TypedModelsError, ValueError):
    template = "Cannot undefine array type `{type_expr}`"


class UnknownTypeError(TypedModelsError, LookupError):
    template = "Unknown type `{type_name}`"


class NotAnArrayError(TypedModelsError, ValueError):
    template = "Expected an array of `{type_name}` : {value!r}"


class ValidationFailure(TypedModelsError, ValueError):
    template = "Invalid {type_name} : {value!r}"


# ---------------------------------------------------------------------------
# Model engine
# ---------------------------------------------------------------------------


class InvalidModelError(TypedModelsError, TypeError):
    template = "Invalid model `{model}`"


class InvalidAttributeError(TypedModelsError, ValueError):
    template = "Invalid attribute `{attribute}` : {reason}"


class UndefinedModelInstanceError(TypedModelsError, TypeError):
    template = "Undefined Model instance `{model}`"


class UnknownModelNameError(TypedModelsError, LookupError):
    template = "Unknown model `{model}`"


class AttributeRequiredError(TypedModelsError, ValueError):
    template = "Attribute `{attribute}` is required"


class AttributeNotNullError(TypedModelsError, ValueError):
    template = "Attribute `{attribute}` cannot be null"


class PluginNotAFunctionError(TypedModelsError, TypeError):
    template = "Plugin is not a function : {plugin!r}"


class CircularReferenceError(TypedModelsError, ValueError):
    template = "Circular reference detected in `{model}`"


# ---------------------------------------------------------------------------
# Collection
# ---------------------------------------------------------------------------


class CollectionError(TypedModelsError, TypeError):
    pass
