"""In-memory collection of models with simple query helpers."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from typing import Any

from typed_models.exceptions import CollectionError
from typed_models.model import Model

# A callable (item, index) -> bool, a mapping of field values, or a scalar
Filter = Any


def _get_field(item: Any, key: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(key)
    return getattr(item, key, None)


class Collection:
    """An ordered list of items (usually models) supporting filtered lookups.

    A filter may be:
      - a callable ``(item, index) -> bool``;
      - a mapping, matching items whose fields all equal the given values;
      - any other value, matching items with at least one field equal to it.
        When ``model_type`` is known only its declared attributes are
        compared, otherwise every field of the item.
    """

    def __init__(
        self, items: list[Any] | None = None, model_type: type[Model] | None = None
    ) -> None:
        if items is None:
            items = []
        if not isinstance(items, list):
            raise CollectionError("Items must be a list")
        self.items = items
        self.model_type = model_type

    def _field_values(self, item: Any) -> list[Any]:
        if self.model_type is not None:
            return [getattr(item, name, None) for name in self.model_type._schema.attributes]
        if isinstance(item, Model):
            if item._schema.is_schemaless:
                return list(item._data.values())
            return [getattr(item, name) for name in item._schema.attributes]
        if isinstance(item, Mapping):
            return list(item.values())
        return list(vars(item).values())

    def _matcher(self, filter_: Filter) -> Callable[[Any, int], bool]:
        if callable(filter_) and not isinstance(filter_, type):
            return filter_
        if filter_ is None:
            return lambda item, index: False
        if isinstance(filter_, Mapping):
            return lambda item, index: all(
                _get_field(item, key) == value for key, value in filter_.items()
            )
        return lambda item, index: any(value == filter_ for value in self._field_values(item))

    def find(self, filter_: Filter) -> Any | None:
        """Return the first item matching the filter, or None."""
        match = self._matcher(filter_)
        for index, item in enumerate(self.items):
            if match(item, index):
                return item
        return None

    def find_all(self, filter_: Filter) -> Collection:
        """Return a new collection of every item matching the filter."""
        match = self._matcher(filter_)
        items = [item for index, item in enumerate(self.items) if match(item, index)]
        return Collection(items, model_type=self.model_type)

    def remove(self, filter_: Filter) -> Any | None:
        """Remove and return the first item matching the filter, or None."""
        match = self._matcher(filter_)
        for index, item in enumerate(self.items):
            if match(item, index):
                return self.items.pop(index)
        return None

    def remove_all(self, filter_: Filter) -> int:
        """Remove every item matching the filter and return how many were removed."""
        match = self._matcher(filter_)
        kept = [item for index, item in enumerate(self.items) if not match(item, index)]
        count = len(self.items) - len(kept)
        self.items[:] = kept
        return count

    def to_json(self) -> list[Any]:
        return [item.to_json() if isinstance(item, Model) else item for item in self.items]

    def __iter__(self) -> Iterator[Any]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index: int) -> Any:
        return self.items[index]

    def __repr__(self) -> str:
        return f"Collection({self.items!r})"
