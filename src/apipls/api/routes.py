"""Per-resource CRUD routes.

Every resource gets the same explicit route table. Each entry names the
action it serves; entries without an action, and entries whose action is
disabled on the resource, are served by the "not allowed" endpoint.
"""

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import APIRouter, Depends, Request, Response

from apipls.api.deps import get_store
from apipls.api.responses import document_response, error_response
from apipls.errors import JsonapiError, MethodNotAllowedError, ValidationError
from apipls.resource_definition import Action, ResourceDefinition
from apipls.services.resource_service import CrudRequest, CrudResponse, ResourceService
from apipls.store import ResourceStore

logger = logging.getLogger(__name__)

# (HTTP method, path below the collection URL, action served)
ROUTES: tuple[tuple[str, str, Action | None], ...] = (
    ("POST", "", Action.CREATE),
    ("GET", "", Action.READ_MANY),
    ("PATCH", "", None),
    ("DELETE", "", None),
    ("POST", "/{id}", None),
    ("GET", "/{id}", Action.READ_ONE),
    ("PATCH", "/{id}", Action.UPDATE),
    ("DELETE", "/{id}", Action.DELETE),
)

HANDLERS: dict[Action, Callable[[ResourceService, CrudRequest], Awaitable[CrudResponse]]] = {
    Action.CREATE: ResourceService.create,
    Action.READ_ONE: ResourceService.read,
    Action.READ_MANY: ResourceService.read,
    Action.UPDATE: ResourceService.update,
    Action.DELETE: ResourceService.delete,
}

WRITE_ACTIONS = (Action.CREATE, Action.UPDATE)


async def not_allowed(request: Request) -> Response:
    """Respond 405 for an action that is absent or disabled on a resource."""
    logger.info(
        "An action that is not allowed was attempted at an endpoint: %s %s",
        request.method,
        request.url.path,
    )
    return error_response(MethodNotAllowedError(), links={"self": request.url.path})


async def _read_body(request: Request) -> Any:
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValidationError("The request body must be a JSON document.") from exc


def _action_endpoint(definition: ResourceDefinition, location: str, action: Action):
    handler = HANDLERS[action]

    async def endpoint(request: Request, store: ResourceStore = Depends(get_store)) -> Response:
        service = ResourceService(definition, store, location)
        try:
            body = await _read_body(request) if action in WRITE_ACTIONS else None
            result = await handler(
                service,
                CrudRequest(
                    id=request.path_params.get("id"),
                    query=request.query_params,
                    body=body,
                    request_id=getattr(request.state, "request_id", None),
                ),
            )
        except JsonapiError as exc:
            logger.info(
                "%s on %s failed with %s: %s",
                action.value, definition.name, exc.status_code.value, exc.detail,
            )
            return error_response(exc)
        return document_response(result.document, result.status_code)

    endpoint.__name__ = f"{action.value}_{definition.name}"
    return endpoint


def build_resource_router(definition: ResourceDefinition, location: str) -> APIRouter:
    """Build the router serving one resource at ``location``."""
    router = APIRouter(prefix=location, tags=[definition.plural_form])
    for method, path, action in ROUTES:
        if action is None or not definition.actions.is_enabled(action):
            endpoint = not_allowed
        else:
            endpoint = _action_endpoint(definition, location, action)
        router.add_api_route(
            path,
            endpoint,
            methods=[method],
            response_model=None,
            include_in_schema=endpoint is not not_allowed,
        )
    return router
