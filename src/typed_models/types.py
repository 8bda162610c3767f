"""Type registry for the typed_models library."""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from typed_models import validators
from typed_models.exceptions import (
    CannotDefineArrayError,
    CannotOverrideDefinedError,
    CannotOverridePrimitiveError,
    CannotUndefineArrayError,
    CannotUndefinePrimitiveError,
    InvalidTypeError,
    NotAnArrayError,
    UnknownTypeError,
    ValidationFailure,
)
from typed_models.parsing import TypeParser, TypeRef

logger = logging.getLogger(__name__)

Validator = Callable[[Any], Any]


class PrimitiveType(Enum):
    """Built-in primitive types supported by the type system."""

    INTEGER = "integer"
    NUMBER = "number"
    STRING = "string"
    BOOLEAN = "boolean"
    DATE = "date"
    ARRAY = "array"
    OBJECT = "object"

    @property
    def validator(self) -> Validator:
        """Return the validator for this primitive type."""
        return _PRIMITIVE_VALIDATORS[self]


_PRIMITIVE_VALIDATORS: dict[PrimitiveType, Validator] = {
    PrimitiveType.INTEGER: validators.validate_integer,
    PrimitiveType.NUMBER: validators.validate_number,
    PrimitiveType.STRING: validators.validate_string,
    PrimitiveType.BOOLEAN: validators.validate_boolean,
    PrimitiveType.DATE: validators.validate_date,
    PrimitiveType.ARRAY: validators.validate_array,
    PrimitiveType.OBJECT: validators.validate_object,
}


# Mapping from type name strings (including aliases) to PrimitiveType values
PRIMITIVE_TYPE_NAMES: dict[str, PrimitiveType] = {
    **{pt.value: pt for pt in PrimitiveType},
    "int": PrimitiveType.INTEGER,
    "float": PrimitiveType.NUMBER,
    "text": PrimitiveType.STRING,
    "bool": PrimitiveType.BOOLEAN,
    "datetime": PrimitiveType.DATE,
    "timestamp": PrimitiveType.DATE,
}

# Python classes that stand for a primitive when used as a type expression
BUILTIN_TYPE_NAMES: dict[type, str] = {
    int: "integer",
    float: "number",
    str: "string",
    bool: "boolean",
    datetime: "date",
    list: "array",
    dict: "object",
}


@dataclass(frozen=True)
class TypeDescriptor:
    """Parsed form of a type expression."""

    name: str
    is_array: bool = False

    @property
    def is_primitive(self) -> bool:
        """Return whether the name refers to a primitive type."""
        return self.name in PRIMITIVE_TYPE_NAMES

    def __str__(self) -> str:
        return f"{self.name}[]" if self.is_array else self.name


_parser: TypeParser | None = None


@functools.lru_cache(maxsize=1024)
def _parse_text(text: str) -> TypeRef:
    """Parse a type expression with the shared parser, caching the result."""
    global _parser
    if _parser is None:
        _parser = TypeParser()
    return _parser.parse(text)


def is_name_valid(name: Any) -> bool:
    """Check whether name is a legal, optionally dotted, identifier."""
    if not isinstance(name, str):
        return False
    try:
        type_ref = _parse_text(name)
    except SyntaxError:
        return False
    return not type_ref.is_array


def _class_validator(type_: type, type_name: str) -> Validator:
    """Build the default validator for a class-backed type."""

    def validate_instance(value: Any) -> Any:
        if value is None or isinstance(value, type_):
            return value
        raise ValidationFailure(type_name=type_name, value=value)

    validate_instance.__qualname__ = f"validate_{type_.__name__}"
    return validate_instance


class TypeRegistry:
    """Registry of all defined types.

    Primitives are resolved first and can be neither overridden nor removed.
    Custom types are keyed by their lower-cased name.
    """

    def __init__(self) -> None:
        self._validators: dict[str, Validator] = {}
        self._classes: dict[str, type] = {}
        self._names_by_class: dict[type, str] = {}

    def parse_type(self, type_expr: str | type) -> TypeDescriptor:
        """Parse a type expression into a descriptor.

        Args:
            type_expr: A string such as ``"ns.Foo[]"`` or a class.

        Returns:
            The descriptor with a lower-cased name.

        Raises:
            InvalidTypeError: If the expression is not a valid type expression.
        """
        if isinstance(type_expr, type):
            if type_expr in self._names_by_class:
                return TypeDescriptor(name=self._names_by_class[type_expr])
            if type_expr in BUILTIN_TYPE_NAMES:
                return TypeDescriptor(name=BUILTIN_TYPE_NAMES[type_expr])
            # Sanitized identifiers carry namespaces as underscores
            text = type_expr.__name__.replace("_", ".")
        elif isinstance(type_expr, str):
            text = type_expr.strip()
        else:
            raise InvalidTypeError(type_expr=type_expr)

        try:
            type_ref = _parse_text(text)
        except SyntaxError as e:
            raise InvalidTypeError(type_expr=type_expr) from e

        return TypeDescriptor(name=type_ref.name.lower(), is_array=type_ref.is_array)

    def is_valid_type(self, type_expr: Any) -> bool:
        """Return whether type_expr is syntactically a valid type expression."""
        try:
            self.parse_type(type_expr)
        except InvalidTypeError:
            return False
        return True

    def is_defined(self, type_expr: Any) -> bool:
        """Return whether the type named by type_expr is primitive or defined."""
        try:
            descriptor = self.parse_type(type_expr)
        except InvalidTypeError:
            return False
        return descriptor.is_primitive or descriptor.name in self._validators

    def get_validator(self, type_expr: str | type) -> Validator:
        """Get the validator for a type, raising if not found."""
        descriptor = self.parse_type(type_expr)
        return self._lookup(descriptor)

    def _lookup(self, descriptor: TypeDescriptor) -> Validator:
        primitive = PRIMITIVE_TYPE_NAMES.get(descriptor.name)
        if primitive is not None:
            return primitive.validator
        validator = self._validators.get(descriptor.name)
        if validator is None:
            raise UnknownTypeError(type_name=descriptor.name)
        return validator

    def define(
        self,
        name_or_type: str | type,
        type_or_validator: type | Validator | None = None,
        validator: Validator | None = None,
    ) -> Validator:
        """Define a custom type.

        Call shapes:
            ``define(cls)``: name taken from the class, default validator.
            ``define(name, cls)``: default validator accepting instances of cls.
            ``define(name, cls, validator)``: explicit validator.
            ``define(name, fn)``: fn is the validator.

        Returns:
            The registered validator.
        """
        if isinstance(name_or_type, type) and type_or_validator is None:
            type_ = name_or_type
            type_expr: str | type = name_or_type
        else:
            type_ = None
            type_expr = name_or_type
            if isinstance(type_or_validator, type):
                type_ = type_or_validator
            elif callable(type_or_validator) and validator is None:
                validator = type_or_validator
            else:
                raise InvalidTypeError(type_expr=type_or_validator)

        if validator is not None and not callable(validator):
            raise InvalidTypeError(type_expr=validator)

        descriptor = self.parse_type(type_expr)
        if descriptor.is_array:
            raise CannotDefineArrayError(type_expr=type_expr)
        if descriptor.is_primitive:
            raise CannotOverridePrimitiveError(type_name=descriptor.name)

        existing = self._validators.get(descriptor.name)
        if existing is not None:
            same_class = validator is None and self._classes.get(descriptor.name) is type_
            if existing is validator or same_class:
                return existing
            raise CannotOverrideDefinedError(type_name=descriptor.name)

        if validator is None:
            validator = _class_validator(type_, descriptor.name)

        self._validators[descriptor.name] = validator
        if type_ is not None:
            self._classes[descriptor.name] = type_
            self._names_by_class[type_] = descriptor.name

        logger.debug("Defined type %s", descriptor.name)
        return validator

    def undefine(self, type_expr: str | type) -> Validator | bool:
        """Remove a custom type.

        Returns:
            The removed validator, or False if the type was not defined.
        """
        descriptor = self.parse_type(type_expr)
        if descriptor.is_array:
            raise CannotUndefineArrayError(type_expr=type_expr)
        if descriptor.is_primitive:
            raise CannotUndefinePrimitiveError(type_name=descriptor.name)

        validator = self._validators.pop(descriptor.name, None)
        if validator is None:
            return False

        type_ = self._classes.pop(descriptor.name, None)
        if type_ is not None:
            self._names_by_class.pop(type_, None)

        logger.debug("Undefined type %s", descriptor.name)
        return validator

    def validate(self, type_expr: str | type, value: Any) -> Any:
        """Validate (and possibly coerce) a value against a type.

        ``None`` is returned unchanged without invoking the validator. Array
        types validate every element in place and return the same list.

        Raises:
            UnknownTypeError: If the type is neither primitive nor defined.
            NotAnArrayError: If an array type is given a non-list value.
        """
        descriptor = self.parse_type(type_expr)
        validator = self._lookup(descriptor)

        if value is None:
            return value

        if descriptor.is_array:
            if not isinstance(value, list):
                raise NotAnArrayError(type_name=descriptor.name, value=value)
            for i, element in enumerate(value):
                if element is not None:
                    value[i] = validator(element)
            return value

        return validator(value)

    def get_defined_names(self) -> list[str]:
        """List all custom type names, in definition order."""
        return list(self._validators.keys())

    def reset(self) -> None:
        """Remove every custom type."""
        self._validators.clear()
        self._classes.clear()
        self._names_by_class.clear()

    def __contains__(self, type_expr: Any) -> bool:
        return self.is_defined(type_expr)


# Process-wide default registry
registry = TypeRegistry()
