"""Turn a hand-written, possibly incomplete resource model into a complete one.

Resource models written by hand may leave out anything that has a sensible
default. ``normalize_resource_model`` fills in the blanks and is idempotent:
feeding its output back in yields the same model.
"""

from __future__ import annotations

import copy
from typing import Any

from apipls.errors import ConfigurationError
from apipls.resource_model.built_in_meta import BUILT_IN_META, normalize_built_in_meta
from apipls.resource_model.fields import normalize_fields
from apipls.resource_model.pagination import normalize_pagination
from apipls.resource_model.relationships import normalize_relationships

ACTIONS = ("create", "read_one", "read_many", "update", "delete")

RESOURCE_KEYS = (
    "name",
    "plural_form",
    "attributes",
    "meta",
    "relationships",
    "actions",
    "pagination",
    "built_in_meta",
)


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``; override wins."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _toggles(resource: dict[str, Any], key: str) -> dict[str, Any]:
    toggles = resource[key]
    if toggles is None:
        return {}
    if not isinstance(toggles, dict):
        raise ConfigurationError(f"{resource['name']}: {key} must be a mapping, got {toggles!r}.")
    return toggles


def _skeleton(name: str) -> dict[str, Any]:
    return {
        # "book" => "books"
        "plural_form": f"{name}s",
        "attributes": {},
        "meta": {},
        "relationships": {},
        "actions": {action: True for action in ACTIONS},
        "pagination": {},
        "built_in_meta": {"created_at": True, "updated_at": True},
    }


def normalize_resource_model(resource_model: dict[str, Any]) -> dict[str, Any]:
    """Return the complete form of ``resource_model``.

    Raises:
        ConfigurationError: If the model has no ``name``.
    """
    name = resource_model.get("name")
    if not name:
        raise ConfigurationError("Resource models must have a name.")

    resource = _merge(_skeleton(name), resource_model)

    resource["attributes"] = normalize_fields(resource["attributes"])
    resource["relationships"] = normalize_relationships(resource["relationships"])
    resource["pagination"] = normalize_pagination(resource["pagination"])
    actions = _toggles(resource, "actions")
    resource["actions"] = {action: bool(actions.get(action, True)) for action in ACTIONS}

    toggles = _toggles(resource, "built_in_meta")
    # User-defined meta replaces a built-in of the same name
    meta = normalize_built_in_meta(toggles)
    meta.update(normalize_fields(resource["meta"]))
    resource["meta"] = meta
    resource["built_in_meta"] = {
        key: bool(toggles.get(key, True)) for key in BUILT_IN_META
    }

    return {key: resource[key] for key in RESOURCE_KEYS}
