"""Service layer: CRUD actions over compiled resource definitions."""

from apipls.services.resource_service import CrudRequest, CrudResponse, ResourceService

__all__ = ["CrudRequest", "CrudResponse", "ResourceService"]
