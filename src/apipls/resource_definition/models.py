"""Immutable runtime description of a resource.

A :class:`ResourceDefinition` is compiled once at startup from a normalized
resource model and shared read-only by every request handler.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Action(str, Enum):
    CREATE = "create"
    READ_ONE = "read_one"
    READ_MANY = "read_many"
    UPDATE = "update"
    DELETE = "delete"


class FieldSpec(BaseModel):
    """A typed attribute or meta column."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: str = "string"
    required: bool = False
    nullable: bool = True
    unique: bool = False
    max_length: int | None = None
    read_only: bool = False


class RelationshipSpec(BaseModel):
    """A one-hop reference stored as ``foreign_key`` on the owning table."""

    model_config = ConfigDict(frozen=True)

    name: str
    resource: str
    plural_form: str
    foreign_key: str
    cardinality: str = "many-to-one"
    nullable: bool = True


class Actions(BaseModel):
    model_config = ConfigDict(frozen=True)

    create: bool = True
    read_one: bool = True
    read_many: bool = True
    update: bool = True
    delete: bool = True

    def is_enabled(self, action: Action) -> bool:
        return getattr(self, action.value)

    def enabled(self) -> list[str]:
        """Names of the enabled actions, in declaration order."""
        return [action.value for action in Action if self.is_enabled(action)]


class PaginationPolicy(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    enabled: bool = False
    default_page_number: int = Field(default=1, ge=1, alias="defaultPageNumber")
    default_page_size: int = Field(default=10, ge=1, alias="defaultPageSize")


class PayloadSchema(BaseModel):
    """Validation models for the writable sections of one write action."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    attributes: type[BaseModel]
    meta: type[BaseModel]


class ResourceDefinition(BaseModel):
    """Complete, compiled description of one table-backed resource."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    plural_form: str
    attributes: tuple[FieldSpec, ...] = ()
    meta: tuple[FieldSpec, ...] = ()
    relationships: tuple[RelationshipSpec, ...] = ()
    actions: Actions = Actions()
    pagination: PaginationPolicy = PaginationPolicy()
    validations: Mapping[str, PayloadSchema] = Field(default_factory=dict)

    @property
    def table_name(self) -> str:
        return self.name

    @property
    def attribute_names(self) -> list[str]:
        return [field.name for field in self.attributes]

    @property
    def writable_attribute_names(self) -> list[str]:
        return [field.name for field in self.attributes if not field.read_only]

    @property
    def meta_names(self) -> list[str]:
        return [field.name for field in self.meta]

    @property
    def writable_meta_names(self) -> list[str]:
        return [field.name for field in self.meta if not field.read_only]

    @property
    def relationship_names(self) -> list[str]:
        return [rel.name for rel in self.relationships]

    @property
    def columns(self) -> list[str]:
        """Every column this resource's table is known to have."""
        return [
            "id",
            *self.attribute_names,
            *self.meta_names,
            *(rel.foreign_key for rel in self.relationships),
        ]

    def relationship(self, name: str) -> RelationshipSpec | None:
        for rel in self.relationships:
            if rel.name == name:
                return rel
        return None


def project(values: Mapping[str, Any] | None, names: Iterable[str]) -> dict[str, Any]:
    """Keep only the keys of ``values`` that appear in ``names``.

    This is the single whitelisting routine applied to every inbound
    payload section before anything reaches the statement builder.
    """
    if not isinstance(values, Mapping):
        return {}
    return {name: values[name] for name in names if name in values}
