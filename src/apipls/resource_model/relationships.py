"""Default resolution for relationship declarations."""

from __future__ import annotations

from typing import Any

from apipls.errors import ConfigurationError

CARDINALITIES = ("many-to-one", "one-to-one")


def foreign_key(name: str) -> str:
    """Column on the owning table that holds the related row's id."""
    return f"{name}_id"


def normalize_relationship(name: str, spec: Any) -> dict[str, Any]:
    """Return a complete relationship spec.

    A bare string names the target resource. The target defaults to the
    relationship's own name and the foreign key is always ``<name>_id``.
    """
    if spec is None:
        spec = {}
    elif isinstance(spec, str):
        spec = {"resource": spec}
    elif not isinstance(spec, dict):
        raise ConfigurationError(
            f"Relationship {name!r} must be a resource name or a mapping, got {spec!r}."
        )
    return {
        "resource": spec.get("resource", name),
        "cardinality": spec.get("cardinality", "many-to-one"),
        "nullable": spec.get("nullable", True),
        "foreign_key": foreign_key(name),
    }


def normalize_relationships(relationships: dict[str, Any] | None) -> dict[str, dict[str, Any]]:
    if relationships is not None and not isinstance(relationships, dict):
        raise ConfigurationError(f"Relationships must be a mapping, got {relationships!r}.")
    return {
        name: normalize_relationship(name, spec)
        for name, spec in (relationships or {}).items()
    }
