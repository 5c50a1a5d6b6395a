"""Helpers rendering JSON:API documents as HTTP responses."""

from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response

from apipls.errors import JsonapiError
from apipls.schemas.jsonapi import JSONAPIError, JSONAPIErrorResponse


def document_response(document: dict[str, Any] | None, status_code: int = 200) -> Response:
    """Render a success document; ``None`` becomes an empty-bodied response."""
    if document is None:
        return Response(status_code=status_code)
    return JSONResponse(jsonable_encoder(document), status_code=status_code)


def error_response(exc: JsonapiError, links: dict[str, str] | None = None) -> JSONResponse:
    """Render one error as a ``{"errors": [...]}`` document."""
    body = JSONAPIErrorResponse(errors=[JSONAPIError(**exc.to_error())], links=links)
    return JSONResponse(
        body.model_dump(by_alias=True, exclude_none=True),
        status_code=exc.status_code,
    )
