"""Unit tests for schemas, the schema registry and record hashing."""

import hashlib

import pytest

from blob_orm.components.hashing import record_hash, stringify_value
from blob_orm.components.schema import FieldType, SchemaRegistry, TableSchema
from blob_orm.core.errors import (
    FieldTypeMismatchError,
    InvalidSchemaError,
    SchemaNotRegisteredError,
)


@pytest.fixture
def schema():
    """Schema of the users table used across tests."""
    return TableSchema.from_dict({
        "fields": {"name": "string", "age": "number", "email": "string", "active": "boolean"},
        "hashFields": ["name", "email"],
        "indexFields": ["email"],
    })


def test_schema_from_dict(schema):
    """Test parsing of the external schema description."""
    assert schema.field_names == ["name", "age", "email", "active"]
    assert schema.fields["age"] is FieldType.NUMBER
    assert schema.hash_fields == ("name", "email")
    assert schema.index_fields == ("email",)


def test_schema_from_dict_snake_case():
    """Test that snake_case keys are accepted and indexes are optional."""
    schema = TableSchema.from_dict({"fields": {"id": "string"}, "hash_fields": ["id"]})

    assert schema.hash_fields == ("id",)
    assert schema.index_fields == ()


def test_schema_rejects_unknown_hash_field():
    """Test that hash fields must be declared fields."""
    with pytest.raises(InvalidSchemaError, match="hash"):
        TableSchema(fields={"a": "string"}, hash_fields=("b",))


def test_schema_rejects_unknown_index_field():
    """Test that index fields must be declared fields."""
    with pytest.raises(InvalidSchemaError, match="index"):
        TableSchema(fields={"a": "string"}, hash_fields=("a",), index_fields=("c",))


def test_schema_rejects_unknown_type():
    """Test that only string, number and boolean are valid types."""
    with pytest.raises(InvalidSchemaError):
        TableSchema(fields={"a": "date"}, hash_fields=("a",))


def test_schema_rejects_missing_keys():
    """Test that a description without hashFields is rejected."""
    with pytest.raises(InvalidSchemaError):
        TableSchema.from_dict({"fields": {"a": "string"}})


def test_validate_accepts_matching_record(schema):
    """Test validation of a well-typed record."""
    schema.validate({"name": "Alice", "age": 25, "email": "a@x.com", "active": True})
    schema.validate({"name": "Alice", "age": 25.5, "email": "a@x.com", "active": False})


@pytest.mark.parametrize("field, value, actual", [
    ("age", "25", "string"),
    ("age", True, "boolean"),
    ("active", 1, "number"),
    ("name", None, "NoneType"),
])
def test_validate_rejects_mismatch(schema, field, value, actual):
    """Test that runtime types must equal declared types."""
    record = {"name": "Alice", "age": 25, "email": "a@x.com", "active": True}
    record[field] = value

    with pytest.raises(FieldTypeMismatchError) as exc_info:
        schema.validate(record)

    assert exc_info.value.field == field
    assert exc_info.value.actual == actual


def test_validate_rejects_missing_field(schema):
    """Test that every schema field must be present."""
    with pytest.raises(FieldTypeMismatchError) as exc_info:
        schema.validate({"name": "Alice", "email": "a@x.com", "active": True})

    assert exc_info.value.field == "age"
    assert exc_info.value.actual == "missing"


def test_project_drops_unknown_fields(schema):
    """Test that projection keeps schema fields in schema order."""
    record = {"email": "a@x.com", "extra": 1, "active": True, "age": 3, "name": "A"}

    projected = schema.project(record)

    assert list(projected) == ["name", "age", "email", "active"]
    assert "extra" not in projected


def test_record_hash_known_value():
    """Test the address of the reference record."""
    record = {"name": "Alice Smith", "age": 25, "email": "alice@example.com"}

    assert record_hash(record, ["name", "email"]) == "730fc31af1d5f2e0b083f55f29f3be3e"


def test_record_hash_ignores_non_hash_fields(schema):
    """Test that only hash-field values contribute to the address."""
    a = {"name": "Alice", "age": 25, "email": "a@x.com", "active": True}
    b = {"name": "Alice", "age": 99, "email": "a@x.com", "active": False}

    assert schema.hash(a) == schema.hash(b)


def test_record_hash_ignores_property_order(schema):
    """Test that the record's key order does not matter."""
    a = {"name": "Alice", "age": 25, "email": "a@x.com", "active": True}
    b = {"active": True, "email": "a@x.com", "age": 25, "name": "Alice"}

    assert schema.hash(a) == schema.hash(b)


def test_record_hash_follows_hash_field_order():
    """Test that the hash-field order does matter."""
    record = {"a": "x", "b": "y"}

    assert record_hash(record, ["a", "b"]) != record_hash(record, ["b", "a"])


def test_record_hash_skips_absent_fields():
    """Test that absent hash fields are skipped rather than rendered."""
    expected = hashlib.md5(b"x").hexdigest()

    assert record_hash({"a": "x"}, ["a", "b"]) == expected
    assert record_hash({"a": "x", "b": None}, ["a", "b"]) == expected


@pytest.mark.parametrize("value, text", [
    ("abc", "abc"),
    (25, "25"),
    (25.0, "25"),
    (2.5, "2.5"),
    (-3, "-3"),
    (True, "true"),
    (False, "false"),
])
def test_stringify_value(value, text):
    """Test the canonical text of scalar values."""
    assert stringify_value(value) == text


def test_registry_register_and_lookup(schema):
    """Test registering and looking up schemas."""
    registry = SchemaRegistry()
    registry.register("users", schema)

    assert registry.lookup("users") is schema
    assert "users" in registry
    assert registry.tables() == ["users"]


def test_registry_overwrites(schema):
    """Test that registering twice replaces the schema."""
    registry = SchemaRegistry()
    other = TableSchema(fields={"id": "string"}, hash_fields=("id",))
    registry.register("users", schema)
    registry.register("users", other)

    assert registry.lookup("users") is other


def test_registry_lookup_unregistered():
    """Test lookup of an unknown table."""
    with pytest.raises(SchemaNotRegisteredError) as exc_info:
        SchemaRegistry().lookup("ghost")

    assert exc_info.value.table == "ghost"


def test_registry_rename_and_unregister(schema):
    """Test moving and removing registrations."""
    registry = SchemaRegistry()
    registry.register("old", schema)
    registry.rename("old", "new")

    assert "old" not in registry
    assert registry.lookup("new") is schema

    registry.unregister("new")
    assert registry.tables() == []


def test_registries_are_independent(schema):
    """Test that two registries do not share state."""
    first = SchemaRegistry()
    second = SchemaRegistry()
    first.register("users", schema)

    assert "users" not in second
