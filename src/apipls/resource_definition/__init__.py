"""Compiled, immutable resource definitions used at request time."""

from apipls.resource_definition.generate import generate_definitions
from apipls.resource_definition.models import (
    Action,
    Actions,
    FieldSpec,
    PaginationPolicy,
    RelationshipSpec,
    ResourceDefinition,
    project,
)

__all__ = [
    "Action",
    "Actions",
    "FieldSpec",
    "PaginationPolicy",
    "RelationshipSpec",
    "ResourceDefinition",
    "generate_definitions",
    "project",
]
