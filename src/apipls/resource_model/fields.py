"""Default resolution for attribute and meta field declarations."""

from __future__ import annotations

from typing import Any

from apipls.errors import ConfigurationError

FIELD_TYPES = ("string", "text", "integer", "float", "boolean", "date", "datetime")

FIELD_DEFAULTS: dict[str, Any] = {
    "type": "string",
    "required": False,
    "nullable": True,
    "unique": False,
    "max_length": None,
    "read_only": False,
}


def normalize_field(spec: Any) -> dict[str, Any]:
    """Return a complete field spec.

    A bare string is shorthand for the field type and ``None`` accepts every
    default. Unknown keys are dropped.
    """
    if spec is None:
        spec = {}
    elif isinstance(spec, str):
        spec = {"type": spec}
    elif not isinstance(spec, dict):
        raise ConfigurationError(f"Field declarations must be a type name or a mapping, got {spec!r}.")
    field = dict(FIELD_DEFAULTS)
    field.update({key: value for key, value in spec.items() if key in FIELD_DEFAULTS})
    return field


def normalize_fields(fields: dict[str, Any] | None) -> dict[str, dict[str, Any]]:
    """Normalize every field of an ``attributes`` or ``meta`` mapping."""
    if fields is not None and not isinstance(fields, dict):
        raise ConfigurationError(f"Attributes and meta must be mappings, got {fields!r}.")
    return {name: normalize_field(spec) for name, spec in (fields or {}).items()}
