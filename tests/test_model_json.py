"""Tests for importing and exporting model data."""

from datetime import datetime, timezone

import pytest

from typed_models.exceptions import (
    AttributeRequiredError,
    CircularReferenceError,
    NotAnArrayError,
    ValidationFailure,
)
from typed_models.model import Model


@pytest.fixture
def user_models(models):
    """Define User before Role so the reference resolves lazily."""

    class User(Model):
        pass

    class Role(Model):
        pass

    models.define(User, {
        "id": {"type": "int", "primary": True},
        "login": {"type": "text", "alias": "username"},
        "role": "Role",
        "roles": "Role[]",
    })
    models.define(Role, {"name": "text"})
    return User, Role


class TestPrimitives:
    """Tests for primitive attribute round trips."""

    def test_round_trip(self, models):
        class Foo(Model):
            pass

        models.define(Foo, {
            "i": "int",
            "n": "number",
            "s": "string",
            "b": "boolean",
            "d": "date",
            "o": "object",
            "a": "array",
        })
        data = {
            "i": 1,
            "n": 1.5,
            "s": "foo",
            "b": True,
            "d": "2020-01-02T03:04:05.000Z",
            "o": {"x": 1},
            "a": [1, "two"],
        }

        foo = Foo(data)

        assert foo.d == datetime(2020, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        assert foo.to_json() == data

    def test_coerced_values_exported(self, models):
        class Foo(Model):
            pass

        models.define(Foo, {"i": "int", "tags": "text[]"})

        assert Foo({"i": "12", "tags": [1, "a", None]}).to_json() == {"i": 12, "tags": ["1", "a", None]}

    def test_naive_date_export(self, models):
        class Foo(Model):
            pass

        models.define(Foo, {"d": "date"})

        foo = Foo()
        foo.d = datetime(2020, 1, 2, 3, 4, 5, 678000)
        assert foo.to_json() == {"d": "2020-01-02T03:04:05.678"}

    def test_epoch_millis_export(self, models):
        class Foo(Model):
            pass

        models.define(Foo, {"d": "date"})

        assert Foo({"d": 0}).to_json() == {"d": "1970-01-01T00:00:00.000Z"}

    def test_none_exported(self, models):
        class Foo(Model):
            pass

        models.define(Foo, {"s": "text"})

        assert Foo({"s": None}).to_json() == {"s": None}


class TestFromJson:
    """Tests for Model.from_json."""

    def test_returns_self(self, models):
        class Foo(Model):
            pass

        models.define(Foo, {"id": "int"})
        foo = Foo()

        assert foo.from_json({"id": 1}) is foo
        assert foo.id == 1

    @pytest.mark.parametrize("value", ["abc", 1, True])
    def test_rejects_non_mappings(self, models, value):
        class Foo(Model):
            pass

        models.define(Foo, {"id": "int"})

        with pytest.raises(ValidationFailure):
            Foo().from_json(value)

    def test_missing_keys_are_unset(self, models):
        class Foo(Model):
            pass

        models.define(Foo, {"id": "int", "name": "text"})
        foo = Foo({"id": 1, "name": "x"})

        foo.from_json({"id": 2})

        assert foo.to_json() == {"id": 2}
        assert foo.name is None
        assert foo._previous_data == {"id": 1, "name": "x"}
        assert foo._is_dirty is True

    def test_missing_required_key(self, models):
        class Foo(Model):
            pass

        models.define(Foo, {"id": {"type": "int", "required": True}})

        with pytest.raises(AttributeRequiredError):
            Foo({"other": 1})

    def test_alias(self, user_models):
        User, _ = user_models

        assert User({"username": "bob"}).login == "bob"
        assert User({"username": "bob", "login": "alice"}).login == "alice"
        assert User({"username": "bob"}).to_json() == {"login": "bob"}

    def test_unknown_keys_ignored(self, user_models):
        User, _ = user_models

        assert User({"id": 1, "extra": True}).to_json() == {"id": 1}


class TestDefaults:
    """Tests for defaults in exported data."""

    def test_defaults_exported(self, models):
        class Foo(Model):
            pass

        models.define(Foo, {
            "name": {"type": "text", "default": "foo"},
            "count": "int",
        })

        assert Foo().to_json() == {"name": "foo"}
        assert Foo({"count": 1}).to_json() == {"name": "foo", "count": 1}


class TestNestedModels:
    """Tests for model-typed attributes."""

    def test_nested_import(self, user_models):
        User, Role = user_models

        user = User({"id": 1, "role": {"name": "admin"}})

        assert isinstance(user.role, Role)
        assert user.role.name == "admin"
        assert user.role._is_dirty is False
        assert user.to_json() == {"id": 1, "role": {"name": "admin"}}

    def test_array_of_models(self, user_models):
        User, Role = user_models
        data = {"id": 1, "roles": [{"name": "a"}, None, {"name": "b"}]}

        user = User(data)

        assert isinstance(user.roles[0], Role)
        assert user.roles[1] is None
        assert [role.name for role in user.roles if role] == ["a", "b"]
        assert user.to_json() == data

    def test_existing_instance_kept(self, user_models):
        User, Role = user_models
        role = Role({"name": "admin"})

        user = User({"role": role, "roles": [role]})

        assert user.role is role
        assert user.roles[0] is role

    def test_non_list_for_array_of_models(self, user_models):
        User, _ = user_models

        with pytest.raises(NotAnArrayError):
            User({"roles": {"name": "a"}})

    def test_invalid_nested_value(self, user_models):
        User, _ = user_models

        with pytest.raises(ValidationFailure):
            User({"role": "admin"})

    def test_nested_round_trip_through_json(self, user_models):
        User, _ = user_models
        user = User({"id": 1, "roles": [{"name": "a"}]})

        copy = User(user.to_json())

        assert copy.to_json() == user.to_json()
        assert copy.roles[0] is not user.roles[0]


class TestSchemaless:
    """Tests for models defined without attributes."""

    def test_empty_export(self, models):
        class Foo(Model):
            pass

        models.define(Foo)

        assert Foo().to_json() == {}

    def test_merge_import(self, models):
        class Foo(Model):
            pass

        models.define(Foo)
        foo = Foo({"a": 1, "b": {"c": 123}, "d": [1, 2, 3]})

        assert foo._is_dirty is False
        foo.from_json({"b": {"c": 456}, "d": [4]})

        assert foo.to_json() == {"a": 1, "b": {"c": 456}, "d": [4]}
        assert foo._previous_data == {"b": {"c": 123}, "d": [1, 2, 3]}
        assert foo._is_dirty is True

    def test_underscore_keys_not_exported(self, models):
        class Foo(Model):
            pass

        models.define(Foo)

        assert Foo({"_hidden": 1, "a": 2}).to_json() == {"a": 2}


class TestCircularReferences:
    """Tests for cycle detection."""

    @pytest.fixture
    def node_type(self, models):
        class Node(Model):
            pass

        models.define(Node, {"name": "text", "next": "Node"})
        return Node

    def test_circular_export(self, node_type):
        first = node_type({"name": "first"})
        second = node_type({"name": "second"})
        first.next = second
        second.next = first

        with pytest.raises(CircularReferenceError, match="node"):
            first.to_json()

    def test_self_reference_export(self, node_type):
        node = node_type()
        node.next = node

        with pytest.raises(CircularReferenceError):
            node.to_json()

    def test_circular_import(self, node_type):
        data = {"name": "loop"}
        data["next"] = data

        with pytest.raises(CircularReferenceError):
            node_type(data)

    def test_shared_instances_are_not_cycles(self, models):
        class Leaf(Model):
            pass

        class Pair(Model):
            pass

        models.define(Leaf, {"value": "int"})
        models.define(Pair, {"left": "Leaf", "right": "Leaf"})
        leaf = Leaf({"value": 1})
        pair = Pair()
        pair.left = leaf
        pair.right = leaf

        assert pair.to_json() == {"left": {"value": 1}, "right": {"value": 1}}

    def test_guard_released_after_error(self, node_type):
        node = node_type()
        node.next = node
        with pytest.raises(CircularReferenceError):
            node.to_json()

        node.next = None
        assert node.to_json() == {"next": None}
