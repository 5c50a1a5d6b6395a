"""JSON:API content negotiation.

Two checks run before any route:

1. A request whose ``Content-Type`` is the JSON:API media type must not
   carry media type parameters (415).
2. If the request has an ``Accept`` header, it must admit the JSON:API
   media type without parameters (406).

Responses are sent as ``application/json`` rather than the JSON:API media
type: some browsers force a download for ``application/vnd.api+json``.
"""

import logging
from collections.abc import Awaitable, Callable

from fastapi import Request, Response

from apipls.api.responses import error_response
from apipls.errors import NotAcceptableError, UnsupportedMediaTypeError
from apipls.schemas.jsonapi import JSONAPI_MEDIA_TYPE

logger = logging.getLogger(__name__)


def parse_media_type(value: str) -> tuple[str, dict[str, str]]:
    """Split a media type header value into its type and parameters."""
    media_type, *raw_params = value.split(";")
    params = {}
    for raw in raw_params:
        key, sep, param_value = raw.partition("=")
        if sep:
            params[key.strip().lower()] = param_value.strip().strip('"')
    return media_type.strip().lower(), params


def content_type_has_params(content_type: str | None) -> bool:
    if not content_type:
        return False
    media_type, params = parse_media_type(content_type)
    return media_type == JSONAPI_MEDIA_TYPE and bool(params)


def accepts_jsonapi(accept: str | None) -> bool:
    """Whether an ``Accept`` header admits the unparameterized JSON:API type."""
    if not accept:
        return True
    for media_range in accept.split(","):
        media_type, params = parse_media_type(media_range)
        quality = params.pop("q", None)
        if quality is not None:
            try:
                if float(quality) <= 0:
                    continue
            except ValueError:
                continue
        if media_type in ("*/*", "application/*"):
            return True
        if media_type == JSONAPI_MEDIA_TYPE and not params:
            return True
    return False


async def jsonapi_headers(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """HTTP middleware enforcing the JSON:API header rules."""
    if content_type_has_params(request.headers.get("content-type")):
        logger.info("Content Type has JSON API content type headers with params.")
        return error_response(UnsupportedMediaTypeError())

    if not accepts_jsonapi(request.headers.get("accept")):
        logger.info("Request does not accept the JSON API media type.")
        return error_response(NotAcceptableError())

    response = await call_next(request)
    response.headers["Content-Disposition"] = "inline"
    return response
