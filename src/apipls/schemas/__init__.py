"""Pydantic schemas for API request/response models."""

from apipls.schemas.jsonapi import (
    JSONAPI_MEDIA_TYPE,
    JSONAPIError,
    JSONAPIErrorResponse,
    JSONAPIRequest,
    JSONAPIRequestData,
)
from apipls.schemas.pagination import PaginationLinks, PaginationMeta, build_pagination_links

__all__ = [
    "JSONAPI_MEDIA_TYPE",
    "JSONAPIError",
    "JSONAPIErrorResponse",
    "JSONAPIRequest",
    "JSONAPIRequestData",
    "PaginationLinks",
    "PaginationMeta",
    "build_pagination_links",
]
