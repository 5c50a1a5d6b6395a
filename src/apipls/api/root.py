"""Root redirect and the versioned index of resources."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, RedirectResponse

from apipls.api.deps import get_registry
from apipls.registry import ResourceRegistry

logger = logging.getLogger(__name__)


def build_root_router(root: str) -> APIRouter:
    """Build the router serving ``/`` and the versioned root at ``root``."""
    router = APIRouter()

    @router.get("/", include_in_schema=False)
    async def redirect_to_root() -> RedirectResponse:
        logger.info("A route to the root is being redirected.")
        return RedirectResponse(root)

    @router.get(root)
    async def versioned_root(registry: ResourceRegistry = Depends(get_registry)) -> JSONResponse:
        """List every resource with its collection URL and enabled actions."""
        logger.info("A request was made to the versioned root.")
        return JSONResponse(registry.index())

    return router
