"""Compile normalized resource models into runtime resource definitions."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import Any

import pydantic

from apipls.errors import ConfigurationError
from apipls.resource_definition.models import (
    Actions,
    FieldSpec,
    PaginationPolicy,
    RelationshipSpec,
    ResourceDefinition,
)
from apipls.resource_definition.validation import PYTHON_TYPES, build_validations
from apipls.resource_model.relationships import CARDINALITIES
from apipls.sql import TOTAL_COUNT

logger = logging.getLogger(__name__)

IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
URL_SEGMENT = re.compile(r"^[A-Za-z0-9_-]+$")

# Column names the generated statements already use
RESERVED_NAMES = {"id": "primary key", TOTAL_COUNT: "pagination row count"}


def _check_identifier(resource: str, kind: str, name: str) -> None:
    if not isinstance(name, str) or not IDENTIFIER.match(name):
        raise ConfigurationError(f"{resource}: {kind} {name!r} is not a valid SQL identifier.")


def _fields(resource: str, kind: str, specs: dict[str, dict[str, Any]]) -> tuple[FieldSpec, ...]:
    fields = []
    for name, spec in specs.items():
        _check_identifier(resource, kind, name)
        if spec["type"] not in PYTHON_TYPES:
            raise ConfigurationError(f"{resource}: {kind} {name!r} has unknown type {spec['type']!r}.")
        try:
            fields.append(FieldSpec(name=name, **spec))
        except pydantic.ValidationError as exc:
            raise ConfigurationError(f"{resource}: {kind} {name!r} is invalid: {exc}") from exc
    return tuple(fields)


def _check_disjoint(model: dict[str, Any]) -> None:
    resource = model["name"]
    seen: dict[str, str] = {}
    sections = (
        ("attribute", list(model["attributes"])),
        ("meta field", list(model["meta"])),
        ("relationship", list(model["relationships"])),
        ("relationship column", [rel["foreign_key"] for rel in model["relationships"].values()]),
    )
    for kind, names in sections:
        for name in names:
            if name in RESERVED_NAMES:
                raise ConfigurationError(
                    f"{resource}: {name!r} is reserved for the {RESERVED_NAMES[name]}."
                )
            if name in seen:
                raise ConfigurationError(
                    f"{resource}: {kind} {name!r} collides with {seen[name]} {name!r}."
                )
            seen.setdefault(name, kind)


def _relationships(
    model: dict[str, Any], plural_forms: dict[str, str]
) -> tuple[RelationshipSpec, ...]:
    resource = model["name"]
    relationships = []
    for name, spec in model["relationships"].items():
        _check_identifier(resource, "relationship", name)
        target = spec["resource"]
        if target not in plural_forms:
            raise ConfigurationError(
                f"{resource}: relationship {name!r} references unknown resource {target!r}."
            )
        if spec["cardinality"] not in CARDINALITIES:
            raise ConfigurationError(
                f"{resource}: relationship {name!r} has unknown cardinality {spec['cardinality']!r}."
            )
        relationships.append(
            RelationshipSpec(
                name=name,
                resource=target,
                plural_form=plural_forms[target],
                foreign_key=spec["foreign_key"],
                cardinality=spec["cardinality"],
                nullable=spec["nullable"],
            )
        )
    return tuple(relationships)


def _class_prefix(name: str) -> str:
    return "".join(part.title() for part in name.split("_"))


def generate_definitions(models: Iterable[dict[str, Any]]) -> list[ResourceDefinition]:
    """Build a :class:`ResourceDefinition` for every normalized model.

    Relationship targets are resolved against the whole set, so the result
    does not depend on the order of ``models``.

    Raises:
        ConfigurationError: On duplicate names, invalid identifiers, field
            collisions, unknown types, or dangling relationship targets.
    """
    models = list(models)

    plural_forms: dict[str, str] = {}
    for model in models:
        name, plural_form = model["name"], model["plural_form"]
        _check_identifier(name, "resource name", name)
        if not isinstance(plural_form, str) or not URL_SEGMENT.match(plural_form):
            raise ConfigurationError(f"{name}: plural form {plural_form!r} is not a valid URL segment.")
        if name in plural_forms:
            raise ConfigurationError(f"Resource {name!r} is defined more than once.")
        if plural_form in plural_forms.values():
            raise ConfigurationError(f"Plural form {plural_form!r} is used by more than one resource.")
        plural_forms[name] = plural_form

    definitions = []
    for model in models:
        name = model["name"]
        _check_disjoint(model)
        attributes = _fields(name, "attribute", model["attributes"])
        meta = _fields(name, "meta field", model["meta"])
        try:
            pagination = PaginationPolicy.model_validate(model["pagination"])
        except pydantic.ValidationError as exc:
            raise ConfigurationError(f"{name}: invalid pagination policy: {exc}") from exc

        definitions.append(
            ResourceDefinition(
                name=name,
                plural_form=model["plural_form"],
                attributes=attributes,
                meta=meta,
                relationships=_relationships(model, plural_forms),
                actions=Actions(**model["actions"]),
                pagination=pagination,
                validations=build_validations(_class_prefix(name), list(attributes), list(meta)),
            )
        )
        logger.debug("Generated resource definition for %s", name)

    return definitions
