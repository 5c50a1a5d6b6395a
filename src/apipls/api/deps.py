"""Shared FastAPI dependencies for the store and the resource registry."""

from fastapi import Request

from apipls.registry import ResourceRegistry
from apipls.store import ResourceStore


async def get_store(request: Request) -> ResourceStore:
    """Return the resource store stored on app state.

    The store wraps the engine created during the application lifespan and
    is stored on ``request.app.state.store``.
    """
    return request.app.state.store


async def get_registry(request: Request) -> ResourceRegistry:
    """Return the resource registry the app was built with."""
    return request.app.state.registry
