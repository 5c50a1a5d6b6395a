"""Pytest configuration and fixtures."""

from __future__ import annotations

import copy
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from apipls.app import create_app
from apipls.config import Settings
from apipls.registry import ResourceRegistry
from apipls.resource_definition import ResourceDefinition
from apipls.store import ResourceStore, Statement, StoreError, StoreErrorKind

RESOURCE_MODELS: list[dict[str, Any]] = [
    {
        "name": "person",
        "plural_form": "people",
        "attributes": {
            "first_name": {"type": "string", "required": True, "max_length": 50},
            "last_name": "string",
            "age": "integer",
        },
        "pagination": {"enabled": True, "defaultPageSize": 10},
    },
    {
        "name": "cat",
        "attributes": {"name": {"type": "string", "required": True}},
        "meta": {"mood": "string"},
        "relationships": {"owner": {"resource": "person"}},
        "actions": {"delete": False},
    },
]


class FakeStore(ResourceStore):
    """In-memory store returning canned rows and recording every statement."""

    def __init__(
        self,
        rows: list[dict[str, Any]] | None = None,
        error: StoreError | None = None,
    ) -> None:
        self.rows = rows or []
        self.error = error
        self.statements: list[Statement] = []

    async def execute_one(self, statement: Statement) -> dict[str, Any]:
        self.statements.append(statement)
        if self.error is not None:
            raise self.error
        if not self.rows:
            raise StoreError(StoreErrorKind.NO_DATA)
        return self.rows[0]

    async def execute_many(self, statement: Statement) -> list[dict[str, Any]]:
        self.statements.append(statement)
        if self.error is not None:
            raise self.error
        return list(self.rows)


@pytest.fixture
def resource_models() -> list[dict[str, Any]]:
    return copy.deepcopy(RESOURCE_MODELS)


@pytest.fixture
def registry(resource_models: list[dict[str, Any]]) -> ResourceRegistry:
    return ResourceRegistry.from_models(resource_models, api_version=1)


@pytest.fixture
def person(registry: ResourceRegistry) -> ResourceDefinition:
    return registry.definitions[0]


@pytest.fixture
def cat(registry: ResourceRegistry) -> ResourceDefinition:
    return registry.definitions[1]


@pytest.fixture
def client(tmp_path: Path, registry: ResourceRegistry) -> Iterator[TestClient]:
    """App backed by a fresh SQLite file with one table per resource."""
    settings = Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'api.db'}",
        create_tables=True,
        resources_directory=str(tmp_path),
    )
    app = create_app(settings=settings, registry=registry)
    with TestClient(app) as test_client:
        yield test_client
