"""SQLAlchemy table metadata derived from resource definitions.

Only used to provision empty tables (tests, ``APIPLS_CREATE_TABLES``); the
CRUD path never goes through these objects.
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    func,
)
from sqlalchemy.types import TypeEngine

from apipls.resource_definition import FieldSpec, ResourceDefinition


def _column_type(field: FieldSpec) -> TypeEngine:
    match field.type:
        case "string":
            return String(field.max_length) if field.max_length else String()
        case "text":
            return Text()
        case "integer":
            return Integer()
        case "float":
            return Float()
        case "boolean":
            return Boolean()
        case "date":
            return Date()
        case _:
            return DateTime(timezone=True)


def _column(field: FieldSpec) -> Column:
    # Read-only timestamps are filled in by the database
    server_default = func.now() if field.read_only and field.type == "datetime" else None
    return Column(
        field.name,
        _column_type(field),
        nullable=field.nullable,
        unique=field.unique,
        server_default=server_default,
    )


def build_metadata(definitions: Iterable[ResourceDefinition]) -> MetaData:
    """Describe one table per resource, named after its singular name."""
    metadata = MetaData()
    for definition in definitions:
        columns = [Column("id", Integer, primary_key=True, autoincrement=True)]
        columns += [_column(field) for field in (*definition.attributes, *definition.meta)]
        columns += [
            Column(
                rel.foreign_key,
                Integer,
                ForeignKey(f"{rel.resource}.id"),
                nullable=rel.nullable,
                unique=rel.cardinality == "one-to-one",
            )
            for rel in definition.relationships
        ]
        Table(definition.table_name, metadata, *columns)
    return metadata
