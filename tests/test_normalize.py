"""Tests for resource model normalization."""

import pytest

from apipls.errors import ConfigurationError
from apipls.resource_model import normalize_resource_model
from apipls.resource_model.fields import normalize_field
from apipls.resource_model.pagination import normalize_pagination
from apipls.resource_model.relationships import normalize_relationship


MODELS = [
    {"name": "book"},
    {"name": "person", "plural_form": "people", "attributes": {"first_name": "string"}},
    {"name": "cat", "relationships": {"owner": "person"}, "pagination": True},
    {"name": "log", "built_in_meta": {"created_at": False, "updated_at": False}},
    {"name": "note", "meta": {"created_at": {"type": "string"}, "source": None}},
    {
        "name": "pasta",
        "actions": {"delete": False},
        "pagination": {"enabled": True, "defaultPageSize": 3},
        "built_in_meta": {"updated_at": False},
    },
]


def test_missing_name_fails() -> None:
    with pytest.raises(ConfigurationError):
        normalize_resource_model({"attributes": {"title": "string"}})


def test_defaults() -> None:
    model = normalize_resource_model({"name": "book"})

    assert model["plural_form"] == "books"
    assert model["attributes"] == {}
    assert model["relationships"] == {}
    assert model["actions"] == {
        "create": True,
        "read_one": True,
        "read_many": True,
        "update": True,
        "delete": True,
    }
    assert model["pagination"] == {"enabled": False, "defaultPageNumber": 1, "defaultPageSize": 10}
    assert set(model["meta"]) == {"created_at", "updated_at"}
    assert model["meta"]["created_at"]["read_only"] is True


def test_user_values_win() -> None:
    model = normalize_resource_model(
        {"name": "person", "plural_form": "people", "actions": {"delete": False}}
    )

    assert model["plural_form"] == "people"
    assert model["actions"]["delete"] is False
    assert model["actions"]["create"] is True


@pytest.mark.parametrize("raw", MODELS, ids=[m["name"] for m in MODELS])
def test_normalization_is_idempotent(raw: dict) -> None:
    once = normalize_resource_model(raw)
    assert normalize_resource_model(once) == once


def test_built_in_meta_can_be_disabled() -> None:
    model = normalize_resource_model({"name": "pasta", "built_in_meta": {"updated_at": False}})
    assert list(model["meta"]) == ["created_at"]

    model = normalize_resource_model(
        {"name": "pasta", "built_in_meta": {"created_at": False, "updated_at": False}}
    )
    assert model["meta"] == {}


def test_user_meta_is_kept_and_replaces_built_in() -> None:
    model = normalize_resource_model(
        {"name": "note", "meta": {"created_at": "string", "source": "text"}}
    )

    assert model["meta"]["source"]["type"] == "text"
    assert model["meta"]["created_at"]["type"] == "string"
    assert model["meta"]["created_at"]["read_only"] is False
    assert model["meta"]["updated_at"]["type"] == "datetime"


def test_unknown_top_level_keys_are_dropped() -> None:
    model = normalize_resource_model({"name": "book", "colour": "blue"})
    assert "colour" not in model


def test_field_shorthand() -> None:
    assert normalize_field("integer")["type"] == "integer"
    assert normalize_field(None) == normalize_field({})
    assert normalize_field({"required": True, "nonsense": 1}) == {
        "type": "string",
        "required": True,
        "nullable": True,
        "unique": False,
        "max_length": None,
        "read_only": False,
    }


@pytest.mark.parametrize(
    "model",
    [
        {"name": "book", "attributes": {"pages": 300}},
        {"name": "book", "attributes": ["title", "pages"]},
        {"name": "book", "meta": "source"},
        {"name": "book", "relationships": {"author": 5}},
        {"name": "book", "relationships": [{"author": "person"}]},
        {"name": "book", "pagination": 5},
        {"name": "book", "actions": ["create"]},
        {"name": "book", "built_in_meta": False},
    ],
)
def test_malformed_sections_fail(model: dict) -> None:
    with pytest.raises(ConfigurationError):
        normalize_resource_model(model)


def test_relationship_defaults() -> None:
    assert normalize_relationship("owner", "person") == {
        "resource": "person",
        "cardinality": "many-to-one",
        "nullable": True,
        "foreign_key": "owner_id",
    }
    assert normalize_relationship("person", None)["resource"] == "person"


def test_relationship_foreign_key_is_derived_from_name() -> None:
    rel = normalize_relationship("owner", {"resource": "person", "foreign_key": "who"})
    assert rel["foreign_key"] == "owner_id"


def test_pagination_shorthand() -> None:
    assert normalize_pagination(True)["enabled"] is True
    assert normalize_pagination(None) == {
        "enabled": False,
        "defaultPageNumber": 1,
        "defaultPageSize": 10,
    }
    assert normalize_pagination({"defaultPageSize": 3})["defaultPageSize"] == 3
