"""Model base class and model registry."""

from __future__ import annotations

import copy
import inspect
import keyword
import logging
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, ClassVar

from typed_models.exceptions import (
    AttributeNotNullError,
    AttributeRequiredError,
    CannotDefineArrayError,
    CannotOverrideDefinedError,
    CircularReferenceError,
    InvalidAttributeError,
    InvalidModelError,
    InvalidTypeError,
    PluginNotAFunctionError,
    UndefinedModelInstanceError,
    UnknownModelNameError,
    ValidationFailure,
)
from typed_models.types import TypeRegistry
from typed_models.types import registry as default_types

logger = logging.getLogger(__name__)

Plugin = Callable[[type, Mapping[str, "AttributeDescriptor"]], Any]

# Marks an attribute without a default, or a slot without a value
_MISSING: Any = object()

# Declaration keys understood by the engine; anything else goes to options
_DECLARATION_KEYS = frozenset(
    {"type", "default", "primary", "alias", "required", "not_null", "parser", "compiler"}
)

# Ids of the containers / instances currently being imported or exported
_import_stack: ContextVar[tuple[int, ...]] = ContextVar("_import_stack", default=())
_export_stack: ContextVar[tuple[int, ...]] = ContextVar("_export_stack", default=())


@contextmanager
def _guard(stack: ContextVar[tuple[int, ...]], obj: Any, model_name: str) -> Iterator[None]:
    ancestors = stack.get()
    if id(obj) in ancestors:
        raise CircularReferenceError(model=model_name)
    token = stack.set(ancestors + (id(obj),))
    try:
        yield
    finally:
        stack.reset(token)


@dataclass(frozen=True)
class AttributeDescriptor:
    """Declarative metadata for one model attribute."""

    name: str
    type_expr: str | type
    default: Any = _MISSING
    primary: bool = False
    alias: str | None = None
    required: bool = False
    not_null: bool = False
    parser: Callable[[Any], Any] | None = None
    compiler: Callable[[Any], Any] | None = None
    options: Mapping[str, Any] = field(default_factory=dict)

    @property
    def has_default(self) -> bool:
        return self.default is not _MISSING

    def get_default(self) -> Any:
        """Return the default value, calling it if it is a thunk.

        Container defaults are copied so instances never share them.
        """
        if callable(self.default):
            return self.default()
        return copy.deepcopy(self.default)

    @classmethod
    def from_declaration(
        cls, name: str, declaration: Any, types: TypeRegistry
    ) -> AttributeDescriptor:
        """Normalize a declaration (type shorthand or mapping) into a descriptor.

        Raises:
            InvalidAttributeError: If the declaration is malformed.
            InvalidTypeError: If the declared type is not a valid type expression.
        """
        if isinstance(declaration, AttributeDescriptor):
            declaration = {
                "type": declaration.type_expr,
                "default": declaration.default,
                "primary": declaration.primary,
                "alias": declaration.alias,
                "required": declaration.required,
                "not_null": declaration.not_null,
                "parser": declaration.parser,
                "compiler": declaration.compiler,
                **declaration.options,
            }
        elif isinstance(declaration, (str, type)):
            declaration = {"type": declaration}
        elif not isinstance(declaration, Mapping):
            raise InvalidAttributeError(attribute=name, reason="invalid declaration")

        type_expr = declaration.get("type")
        if type_expr is None:
            raise InvalidAttributeError(attribute=name, reason="missing type")
        types.parse_type(type_expr)

        alias = declaration.get("alias")
        if alias is not None and not isinstance(alias, str):
            raise InvalidAttributeError(attribute=name, reason="alias must be a string")

        for hook in ("parser", "compiler"):
            if declaration.get(hook) is not None and not callable(declaration[hook]):
                raise InvalidAttributeError(attribute=name, reason=f"{hook} must be callable")

        return cls(
            name=name,
            type_expr=type_expr,
            default=declaration.get("default", _MISSING),
            primary=bool(declaration.get("primary", False)),
            alias=alias,
            required=bool(declaration.get("required", False)),
            not_null=bool(declaration.get("not_null", False)),
            parser=declaration.get("parser"),
            compiler=declaration.get("compiler"),
            options=MappingProxyType(
                {k: v for k, v in declaration.items() if k not in _DECLARATION_KEYS}
            ),
        )


@dataclass(frozen=True)
class ModelDescriptor:
    """Metadata owned by a defined model class."""

    name: str
    model_type: type[Model]
    attributes: Mapping[str, AttributeDescriptor]
    primary_attributes: tuple[str, ...]
    models: ModelRegistry = field(repr=False, compare=False)

    @property
    def types(self) -> TypeRegistry:
        return self.models.types

    @property
    def is_schemaless(self) -> bool:
        """Return whether the model was defined without attributes."""
        return not self.attributes


class AttributeAccessor:
    """Data descriptor installed on a model class for one attribute."""

    def __init__(self, attribute: AttributeDescriptor, types: TypeRegistry) -> None:
        self.attribute = attribute
        self.types = types

    def __get__(self, instance: Model | None, owner: type | None = None) -> Any:
        """Return the stored value passed through ``parser``.

        An absent value without a default reads as ``None`` and is never
        handed to ``parser``.
        """
        if instance is None:
            return self
        if self.attribute.name not in instance._data and not self.attribute.has_default:
            return None
        value = self.get_raw(instance)
        if self.attribute.parser is not None:
            value = self.attribute.parser(value)
        return value

    def get_raw(self, instance: Model) -> Any:
        """Return the stored value without ``parser``, materializing the default."""
        attribute = self.attribute
        data = instance._data

        if attribute.name not in data:
            if not attribute.has_default:
                return None
            # Lazily evaluated once, not tracked as a change
            data[attribute.name] = self.types.validate(
                attribute.type_expr, attribute.get_default()
            )
        return data[attribute.name]

    def __set__(self, instance: Model, value: Any) -> None:
        attribute = self.attribute
        if attribute.compiler is not None:
            value = attribute.compiler(value)
        if value is None and attribute.not_null:
            raise AttributeNotNullError(attribute=attribute.name)
        instance._store(attribute.name, self.types.validate(attribute.type_expr, value))

    def __delete__(self, instance: Model) -> None:
        if self.attribute.required:
            raise AttributeRequiredError(attribute=self.attribute.name)
        instance._store(self.attribute.name, _MISSING)

    def __repr__(self) -> str:
        return f"AttributeAccessor({self.attribute.name!r}, {self.attribute.type_expr!r})"


def _format_date(value: datetime) -> str:
    text = value.isoformat(timespec="milliseconds")
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text


def _export_value(value: Any) -> Any:
    """Convert a value into plain JSON-compatible data."""
    if isinstance(value, Model):
        return value.to_json()
    if isinstance(value, list):
        return [_export_value(v) for v in value]
    if isinstance(value, datetime):
        return _format_date(value)
    return value


class Model:
    """Base class for all models.

    Subclasses become usable once passed to :meth:`Model.define` (or
    :meth:`ModelRegistry.define`), which installs one accessor per declared
    attribute. Engine-internal members start with an underscore; attribute
    names never do.
    """

    _schema: ClassVar[ModelDescriptor]

    def __init__(self, data: Any = None) -> None:
        schema = type(self).__dict__.get("_schema")
        if schema is None:
            raise UndefinedModelInstanceError(model=type(self).__name__)

        self._data: dict[str, Any] = {}
        self._previous: dict[str, Any] | None = None
        self._dirty = False

        if isinstance(data, (list, tuple)):
            for name, value in zip(schema.primary_attributes, data):
                setattr(self, name, value)
        elif data is not None:
            self.from_json(data)

        self._is_dirty = False

    # -- engine state -------------------------------------------------------

    @property
    def _is_dirty(self) -> bool:
        return self._dirty

    @_is_dirty.setter
    def _is_dirty(self, value: bool) -> None:
        self._dirty = bool(value)
        if not self._dirty:
            self._previous = None

    @property
    def _previous_data(self) -> dict[str, Any] | None:
        """Values replaced since the dirty flag was last cleared."""
        return self._previous

    @property
    def _is_new(self) -> bool:
        """Whether any primary attribute is unset or None."""
        model_type = type(self)
        return any(
            getattr(model_type, name).get_raw(self) is None
            for name in self._schema.primary_attributes
        )

    def _store(self, name: str, value: Any) -> None:
        """Write a slot value, recording the replaced value."""
        previous = self._data.get(name, _MISSING)
        if value is _MISSING:
            self._data.pop(name, None)
        else:
            self._data[name] = value

        # None is a stored value; only absent slots have no previous value
        if previous is not _MISSING and previous is not value and previous != value:
            if self._previous is None:
                self._previous = {}
            if name not in self._previous:
                self._previous[name] = (
                    copy.deepcopy(previous) if isinstance(previous, (list, dict)) else previous
                )
        self._dirty = True

    # -- plain data ---------------------------------------------------------

    def from_json(self, json: Mapping[str, Any]) -> Model:
        """Import plain data into this instance.

        Attributes are read under their own name first, then under their
        alias. Attributes missing from ``json`` are unset. Values of
        model-typed attributes are built into model instances recursively.

        Returns:
            The instance itself.
        """
        schema = self._schema
        if not isinstance(json, Mapping):
            raise ValidationFailure(type_name="object", value=json)

        with _guard(_import_stack, json, schema.name):
            if schema.is_schemaless:
                for key, value in json.items():
                    self._store(key, value)
                return self

            for name, attribute in schema.attributes.items():
                if name in json:
                    value = json[name]
                elif attribute.alias is not None and attribute.alias in json:
                    value = json[attribute.alias]
                else:
                    delattr(self, name)
                    continue
                setattr(self, name, self._import_value(attribute, value))

        return self

    def _import_value(self, attribute: AttributeDescriptor, value: Any) -> Any:
        if value is None:
            return value

        schema = self._schema
        descriptor = schema.types.parse_type(attribute.type_expr)
        nested = schema.models.find(descriptor.name)
        if nested is None:
            return value

        if descriptor.is_array:
            if not isinstance(value, list):
                return value
            return [_build_nested(nested, element) for element in value]
        return _build_nested(nested, value)

    def to_json(self) -> dict[str, Any]:
        """Export this instance as plain data.

        Unset attributes are omitted; nested models, lists and dates are
        converted recursively.
        """
        schema = self._schema
        result: dict[str, Any] = {}

        with _guard(_export_stack, self, schema.name):
            if schema.is_schemaless:
                for key, value in self._data.items():
                    if not key.startswith("_"):
                        result[key] = _export_value(value)
                return result

            for name in schema.attributes:
                value = getattr(self, name)
                if name in self._data:
                    result[name] = _export_value(value)

        return result

    def __repr__(self) -> str:
        fields = ", ".join(f"{k}={v!r}" for k, v in self._data.items())
        return f"{type(self).__name__}({fields})"

    # -- default registry shortcuts -----------------------------------------

    @classmethod
    def define(
        cls,
        name_or_type: str | type[Model],
        model_type_or_attributes: Any = None,
        attributes: Mapping[str, Any] | None = None,
    ) -> type[Model]:
        """Define a model in the default registry. See :meth:`ModelRegistry.define`."""
        return registry.define(name_or_type, model_type_or_attributes, attributes)

    @classmethod
    def get(cls, name: str | type) -> type[Model]:
        return registry.get(name)

    @classmethod
    def is_defined(cls, name: Any) -> bool:
        return registry.is_defined(name)

    @classmethod
    def undefine(cls, name: str | type) -> type[Model]:
        return registry.undefine(name)

    @classmethod
    def get_primary_attributes(cls, name: str | type) -> list[str]:
        return registry.get_primary_attributes(name)

    @classmethod
    def use(cls, plugin: Plugin) -> None:
        registry.use(plugin)


def _build_nested(schema: ModelDescriptor, value: Any) -> Any:
    if value is None or isinstance(value, schema.model_type):
        return value
    return schema.model_type(value)


def _check_attribute_name(model_type: type, name: Any) -> None:
    if not isinstance(name, str) or not name.isidentifier() or keyword.iskeyword(name):
        raise InvalidAttributeError(attribute=name, reason="not an identifier")
    if name.startswith("_"):
        raise InvalidAttributeError(attribute=name, reason="reserved prefix `_`")
    # Accessors inherited from a defined parent model may be redeclared
    member = inspect.getattr_static(model_type, name, _MISSING)
    if member is not _MISSING and not isinstance(member, AttributeAccessor):
        raise InvalidAttributeError(attribute=name, reason="shadows a model member")


class ModelRegistry:
    """Registry of defined models.

    Every model is also registered as a type in the underlying type registry,
    so models can declare attributes typed with other models.
    """

    def __init__(self, types: TypeRegistry | None = None) -> None:
        self.types = types if types is not None else TypeRegistry()
        self._models: dict[str, ModelDescriptor] = {}
        self._plugins: list[Plugin] = []

    def define(
        self,
        name_or_type: str | type[Model],
        model_type_or_attributes: Any = None,
        attributes: Mapping[str, Any] | None = None,
    ) -> type[Model]:
        """Define a model.

        Call shapes:
            ``define(ModelClass)``
            ``define(ModelClass, attributes)``
            ``define(name, ModelClass)``
            ``define(name, ModelClass, attributes)``

        Args:
            name_or_type: The model name, or the model class itself.
            model_type_or_attributes: The model class when a name is given,
                otherwise the attribute map.
            attributes: Mapping of attribute name to declaration (a type
                expression or a mapping with ``type``, ``default``,
                ``primary``, ``alias``, ``required``, ``not_null``,
                ``parser``, ``compiler``).

        Returns:
            The model class.

        Raises:
            InvalidModelError: If the class is not a strict Model subclass or
                is already defined.
            CannotOverrideDefinedError: If the name is already taken.
        """
        if isinstance(name_or_type, type):
            model_type = name_or_type
            if attributes is not None:
                raise InvalidModelError(model=model_type_or_attributes)
            attributes = model_type_or_attributes
        else:
            model_type = model_type_or_attributes

        if not (isinstance(model_type, type) and issubclass(model_type, Model)) or model_type is Model:
            raise InvalidModelError(model=model_type)
        if "_schema" in model_type.__dict__:
            raise InvalidModelError(f"Model `{model_type.__name__}` is already defined", model=model_type)
        if attributes is not None and not isinstance(attributes, Mapping):
            raise InvalidModelError(f"Invalid attributes for `{model_type.__name__}`", model=model_type)

        descriptor = self.types.parse_type(name_or_type)
        if descriptor.is_array:
            raise CannotDefineArrayError(type_expr=name_or_type)
        if descriptor.name in self._models:
            raise CannotOverrideDefinedError(type_name=descriptor.name)

        declared: dict[str, AttributeDescriptor] = {}
        for name, declaration in (attributes or {}).items():
            _check_attribute_name(model_type, name)
            declared[name] = AttributeDescriptor.from_declaration(name, declaration, self.types)
        primary = tuple(name for name, attribute in declared.items() if attribute.primary)

        self.types.define(descriptor.name, model_type)

        for attribute in declared.values():
            setattr(model_type, attribute.name, AttributeAccessor(attribute, self.types))

        schema = ModelDescriptor(
            name=descriptor.name,
            model_type=model_type,
            attributes=MappingProxyType(declared),
            primary_attributes=primary,
            models=self,
        )
        model_type._schema = schema
        self._models[descriptor.name] = schema
        logger.debug("Defined model %s (%d attributes)", descriptor.name, len(declared))

        for plugin in list(self._plugins):
            plugin(model_type, schema.attributes)

        return model_type

    def _key(self, name: Any) -> str:
        try:
            return self.types.parse_type(name).name
        except InvalidTypeError:
            raise UnknownModelNameError(model=name) from None

    def find(self, name: Any) -> ModelDescriptor | None:
        """Return the descriptor of a model, or None. Never raises."""
        try:
            return self._models.get(self.types.parse_type(name).name)
        except InvalidTypeError:
            return None

    def get_descriptor(self, name: str | type) -> ModelDescriptor:
        """Get a model descriptor by name, raising if not found."""
        schema = self._models.get(self._key(name))
        if schema is None:
            raise UnknownModelNameError(model=name)
        return schema

    def get(self, name: str | type) -> type[Model]:
        """Get a model class by name, raising if not found."""
        return self.get_descriptor(name).model_type

    def is_defined(self, name: Any) -> bool:
        return self.find(name) is not None

    def get_primary_attributes(self, name: str | type) -> list[str]:
        return list(self.get_descriptor(name).primary_attributes)

    def undefine(self, name: str | type) -> type[Model]:
        """Remove a model, its type entry and its accessors.

        Returns:
            The model class.
        """
        schema = self.get_descriptor(name)
        model_type = schema.model_type

        del self._models[schema.name]
        self.types.undefine(schema.name)
        for attribute_name in schema.attributes:
            if isinstance(model_type.__dict__.get(attribute_name), AttributeAccessor):
                delattr(model_type, attribute_name)
        del model_type._schema

        logger.debug("Undefined model %s", schema.name)
        return model_type

    def use(self, plugin: Plugin) -> None:
        """Register a plugin called with ``(model_type, attributes)`` on every define."""
        if not callable(plugin):
            raise PluginNotAFunctionError(plugin=plugin)
        if plugin in self._plugins:
            return
        self._plugins.append(plugin)
        logger.debug("Registered model plugin %r", plugin)

    def list_models(self) -> list[str]:
        """List all model names, in definition order."""
        return list(self._models.keys())

    def reset(self) -> None:
        """Undefine every model and drop every plugin."""
        for name in list(self._models):
            self.undefine(name)
        self._plugins.clear()

    def __contains__(self, name: Any) -> bool:
        return self.is_defined(name)


# Process-wide default registry
registry = ModelRegistry(default_types)
