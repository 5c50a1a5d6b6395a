"""Application-wide exception handlers rendering JSON:API error documents."""

import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from apipls.api.responses import error_response
from apipls.errors import GenericStoreError, JsonapiError, MethodNotAllowedError, RouteNotFoundError

logger = logging.getLogger(__name__)


async def jsonapi_error_handler(request: Request, exc: JsonapiError) -> JSONResponse:
    return error_response(exc)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Map routing-level HTTP errors onto the JSON:API taxonomy."""
    links = {"self": request.url.path}
    if exc.status_code == HTTPStatus.NOT_FOUND:
        logger.info("A 404 route was handled: %s", request.url.path)
        return error_response(RouteNotFoundError(), links=links)
    if exc.status_code == HTTPStatus.METHOD_NOT_ALLOWED:
        return error_response(MethodNotAllowedError(), links=links)

    error = JsonapiError(str(exc.detail))
    error.status_code = HTTPStatus(exc.status_code)
    error.title = error.status_code.phrase
    return error_response(error)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error while serving %s %s (request %s)",
        request.method,
        request.url.path,
        getattr(request.state, "request_id", None),
    )
    return error_response(GenericStoreError())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(JsonapiError, jsonapi_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
