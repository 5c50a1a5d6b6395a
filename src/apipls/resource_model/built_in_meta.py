"""System-managed meta fields added to every resource unless disabled."""

from __future__ import annotations

from typing import Any

from apipls.resource_model.fields import normalize_field

BUILT_IN_META = ("created_at", "updated_at")


def normalize_built_in_meta(built_in_meta: dict[str, bool] | None) -> dict[str, dict[str, Any]]:
    """Return field specs for the enabled built-in meta fields.

    Built-ins are read-only timestamps; clients can never write them.
    """
    enabled = {name: True for name in BUILT_IN_META}
    enabled.update(built_in_meta or {})
    return {
        name: normalize_field({"type": "datetime", "nullable": False, "read_only": True})
        for name in BUILT_IN_META
        if enabled[name]
    }
