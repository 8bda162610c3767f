"""Schema class for defining models from plain data."""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from typed_models.exceptions import InvalidModelError
from typed_models.model import Model, ModelRegistry


class Schema:
    """A set of models defined from a plain-data schema document.

    The document maps model names to attribute maps::

        {
            "Role": {"name": "text"},
            "User": {
                "id": {"type": "int", "primary": true},
                "roles": "Role[]"
            }
        }

    Model references are resolved lazily, so models may appear in any order.
    """

    def __init__(self, models: ModelRegistry) -> None:
        """Initialize a schema.

        Args:
            models: Model registry holding the defined models.
        """
        self.models = models
        self._names: list[str] = []

    @classmethod
    def parse(
        cls, source: str | Path | Mapping[str, Any], models: ModelRegistry | None = None
    ) -> Schema:
        """Parse a schema document and define its models.

        Args:
            source: JSON text, a path to a JSON file, or an already decoded
                mapping.
            models: Registry to define the models in. A fresh registry is
                used when omitted.

        Returns:
            A new Schema instance.
        """
        if isinstance(source, Path):
            return cls.load_file(source, models)
        if isinstance(source, str):
            source = json.loads(source)
        if not isinstance(source, Mapping):
            raise InvalidModelError("Schema document must be an object", model=source)

        schema = cls(models if models is not None else ModelRegistry())
        for name, attributes in source.items():
            schema.define(name, attributes)
        return schema

    @classmethod
    def load_file(cls, path: Path | str, models: ModelRegistry | None = None) -> Schema:
        """Read a JSON schema file and define its models."""
        with open(path) as f:
            return cls.parse(json.load(f), models)

    def define(self, name: str, attributes: Mapping[str, Any] | None) -> type[Model]:
        """Create a Model subclass named after the last segment of name and define it."""
        class_name = name.split(".")[-1].strip()
        model_type = type(class_name, (Model,), {"__module__": __name__})
        self.models.define(name, model_type, attributes or {})
        self._names.append(name)
        return model_type

    def get_model(self, name: str) -> type[Model]:
        """Get a model class by name.

        Raises:
            UnknownModelNameError: If the model is not defined.
        """
        return self.models.get(name)

    def list_models(self) -> list[str]:
        """List the model names defined by this schema, in document order."""
        return list(self._names)

    def load(self, name: str, data: Any) -> Model | list[Model]:
        """Import plain data into a model.

        Args:
            name: Name of the model.
            data: An object, or a list of objects.

        Returns:
            A model instance, or a list of instances for list input.
        """
        model_type = self.get_model(name)
        if isinstance(data, list):
            return [model_type(item) for item in data]
        return model_type(data)
