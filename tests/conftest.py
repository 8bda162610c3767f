"""Shared fixtures."""

import pytest

from typed_models import model as model_module
from typed_models import types as types_module
from typed_models.model import ModelRegistry
from typed_models.types import TypeRegistry


@pytest.fixture
def type_registry():
    """Create a fresh type registry."""
    return TypeRegistry()


@pytest.fixture
def models(type_registry):
    """Create a fresh model registry backed by its own type registry."""
    return ModelRegistry(type_registry)


@pytest.fixture
def default_registries():
    """Give access to the process-wide registries and reset them afterwards."""
    yield model_module.registry, types_module.registry
    model_module.registry.reset()
    types_module.registry.reset()
