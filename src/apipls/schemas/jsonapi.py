"""JSON:API envelope models using Pydantic v2.

Inbound write bodies are validated against :class:`JSONAPIRequest` before
any field is whitelisted. Error documents are rendered through
:class:`JSONAPIErrorResponse`. Resource objects themselves are plain dicts
built by the resource service, since their keys depend on the resource.

Reference: https://jsonapi.org/format/
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

JSONAPI_MEDIA_TYPE = "application/vnd.api+json"


# ---------------------------------------------------------------------------
# Request wrappers
# ---------------------------------------------------------------------------


class JSONAPIRequestData(BaseModel):
    """The ``data`` object inside a JSON:API write request body."""

    model_config = ConfigDict(extra="ignore")

    type: str
    id: str | int | None = None
    attributes: dict[str, Any] | None = None
    meta: dict[str, Any] | None = None
    relationships: dict[str, Any] | None = None


class JSONAPIRequest(BaseModel):
    """JSON:API request envelope wrapping ``{ data: { type, ... } }``."""

    data: JSONAPIRequestData


# ---------------------------------------------------------------------------
# Error documents
# ---------------------------------------------------------------------------


class JSONAPIError(BaseModel):
    """A single JSON:API error object."""

    status: str
    title: str
    detail: str | None = None


class JSONAPIErrorLinks(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    self_: str = Field(alias="self")


class JSONAPIErrorResponse(BaseModel):
    """JSON:API response envelope containing a list of errors."""

    errors: list[JSONAPIError]
    links: JSONAPIErrorLinks | None = None
