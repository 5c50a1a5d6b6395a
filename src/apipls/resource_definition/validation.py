"""Per-action payload validation models derived from field specs."""

from __future__ import annotations

import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, create_model

from apipls.resource_definition.models import FieldSpec, PayloadSchema

PYTHON_TYPES: dict[str, type] = {
    "string": str,
    "text": str,
    "integer": int,
    "float": float,
    "boolean": bool,
    "date": datetime.date,
    "datetime": datetime.datetime,
}

_PAYLOAD_CONFIG = ConfigDict(extra="ignore")


def _field_definition(field: FieldSpec, partial: bool) -> tuple[Any, Any]:
    annotation: Any = PYTHON_TYPES[field.type]
    if field.nullable:
        annotation = annotation | None

    constraints: dict[str, Any] = {"alias": field.name}
    if field.max_length is not None and field.type in ("string", "text"):
        constraints["max_length"] = field.max_length
    if field.type == "integer":
        # BIGINT range; larger values overflow the driver
        constraints.update(ge=-(2**63), le=2**63 - 1)

    if field.required and not partial:
        return annotation, Field(..., **constraints)
    return annotation, Field(default=None, **constraints)


def build_payload_model(
    model_name: str, fields: list[FieldSpec], partial: bool
) -> type[BaseModel]:
    """Create a pydantic model validating one payload section.

    Args:
        model_name: Class name for the generated model.
        fields: Writable fields of the section.
        partial: If true, no field is required (used for updates).
    """
    # Python names are positional; user field names only appear as aliases
    definitions = {
        f"field_{index}": _field_definition(field, partial)
        for index, field in enumerate(fields)
    }
    return create_model(model_name, __config__=_PAYLOAD_CONFIG, **definitions)


def build_validations(
    class_prefix: str, attributes: list[FieldSpec], meta: list[FieldSpec]
) -> dict[str, PayloadSchema]:
    """Build the ``create`` and ``update`` payload schemas for a resource."""
    writable_attributes = [field for field in attributes if not field.read_only]
    writable_meta = [field for field in meta if not field.read_only]
    return {
        action: PayloadSchema(
            attributes=build_payload_model(
                f"{class_prefix}{action.title()}Attributes", writable_attributes, partial
            ),
            meta=build_payload_model(f"{class_prefix}{action.title()}Meta", writable_meta, partial),
        )
        for action, partial in (("create", False), ("update", True))
    }


def validate_section(schema: type[BaseModel], values: dict[str, Any]) -> dict[str, Any]:
    """Validate and coerce a whitelisted payload section.

    Raises:
        pydantic.ValidationError: If a value has the wrong type or a
            required field is missing.
    """
    validated = schema.model_validate(values)
    return validated.model_dump(by_alias=True, exclude_unset=True)
