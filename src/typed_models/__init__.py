"""Typed Models - A runtime type registry and model attribute engine."""

from typed_models.collection import Collection
from typed_models.exceptions import (
    AttributeNotNullError,
    AttributeRequiredError,
    CannotDefineArrayError,
    CannotOverrideDefinedError,
    CannotOverridePrimitiveError,
    CannotUndefineArrayError,
    CannotUndefinePrimitiveError,
    CircularReferenceError,
    CollectionError,
    InvalidAttributeError,
    InvalidModelError,
    InvalidTypeError,
    InvalidTypeNameError,
    NotAnArrayError,
    PluginNotAFunctionError,
    TypedModelsError,
    UndefinedModelInstanceError,
    UnknownModelNameError,
    UnknownTypeError,
    ValidationFailure,
)
from typed_models.model import (
    AttributeDescriptor,
    Model,
    ModelDescriptor,
    ModelRegistry,
)
from typed_models.parsing import TypeParser
from typed_models.schema import Schema
from typed_models.types import (
    PrimitiveType,
    TypeDescriptor,
    TypeRegistry,
    is_name_valid,
)

__all__ = [
    # Main API
    "Model",
    "ModelRegistry",
    "Schema",
    "Collection",
    # Type registry
    "TypeRegistry",
    "TypeDescriptor",
    "PrimitiveType",
    "TypeParser",
    "is_name_valid",
    # Descriptors
    "AttributeDescriptor",
    "ModelDescriptor",
    # Errors
    "TypedModelsError",
    "InvalidTypeError",
    "InvalidTypeNameError",
    "CannotOverridePrimitiveError",
    "CannotOverrideDefinedError",
    "CannotDefineArrayError",
    "CannotUndefinePrimitiveError",
    "CannotUndefineArrayError",
    "UnknownTypeError",
    "NotAnArrayError",
    "ValidationFailure",
    "InvalidModelError",
    "InvalidAttributeError",
    "UndefinedModelInstanceError",
    "UnknownModelNameError",
    "AttributeRequiredError",
    "AttributeNotNullError",
    "PluginNotAFunctionError",
    "CircularReferenceError",
    "CollectionError",
]

__version__ = "0.1.0"
