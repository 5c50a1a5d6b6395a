"""Default resolution for a resource's pagination policy."""

from __future__ import annotations

from typing import Any

from apipls.errors import ConfigurationError

PAGINATION_DEFAULTS: dict[str, Any] = {
    "enabled": False,
    "defaultPageNumber": 1,
    "defaultPageSize": 10,
}


def normalize_pagination(pagination: Any) -> dict[str, Any]:
    """Return a complete pagination policy.

    ``True``/``False`` toggle pagination with the default page settings.
    """
    if isinstance(pagination, bool):
        pagination = {"enabled": pagination}
    elif pagination is not None and not isinstance(pagination, dict):
        raise ConfigurationError(f"Pagination must be a boolean or a mapping, got {pagination!r}.")
    policy = dict(PAGINATION_DEFAULTS)
    policy.update(
        {key: value for key, value in (pagination or {}).items() if key in PAGINATION_DEFAULTS}
    )
    return policy
