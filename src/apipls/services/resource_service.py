"""CRUD service for one resource definition.

Validates and whitelists request input against the definition, builds the
statement, runs it on the store and turns the resulting rows into JSON:API
resource objects. Failures are raised as :class:`~apipls.errors.JsonapiError`
subclasses; the route layer renders them.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import pydantic

from apipls.errors import (
    JsonapiError,
    NoValidFieldsError,
    ResourceNotFoundError,
    ValidationError,
    map_store_error,
)
from apipls.resource_definition.models import ResourceDefinition, project
from apipls.resource_definition.validation import validate_section
from apipls.schemas.jsonapi import JSONAPIRequest, JSONAPIRequestData
from apipls.schemas.pagination import PaginationMeta, build_pagination_links
from apipls.sql import (
    ALL_FIELDS,
    TOTAL_COUNT,
    Page,
    build_count,
    build_create,
    build_delete,
    build_read,
    build_update,
    parse_unsigned,
    resolve_page_value,
)
from apipls.store import ResourceStore, Statement, StoreError

logger = logging.getLogger(__name__)


@dataclass
class CrudRequest:
    """The parts of an HTTP request a CRUD action needs."""

    id: str | None = None
    query: Mapping[str, str] = field(default_factory=dict)
    body: Any = None
    request_id: str | None = None


@dataclass
class CrudResponse:
    status_code: int = 200
    document: dict[str, Any] | None = None


def _describe(exc: pydantic.ValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error["loc"])
    return f"{location}: {error['msg']}" if location else error["msg"]


class ResourceService:
    """Runs the CRUD actions of one resource against a store.

    Args:
        definition: The compiled resource definition.
        store: Store the statements are executed on.
        location: Collection URL of the resource, e.g. ``/v1/people``.
    """

    def __init__(self, definition: ResourceDefinition, store: ResourceStore, location: str) -> None:
        self.definition = definition
        self.store = store
        self.location = location

    # ------------------------------------------------------------------
    # Row to document
    # ------------------------------------------------------------------

    def to_resource(self, row: Mapping[str, Any]) -> dict[str, Any]:
        """Build the JSON:API resource object for one database row.

        ``attributes``, ``meta`` and ``relationships`` are left out when
        empty, and a relationship is only present when its foreign key
        column holds a value.
        """
        definition = self.definition
        resource_id = str(row["id"])
        resource: dict[str, Any] = {"id": resource_id, "type": definition.plural_form}

        attributes = {name: row[name] for name in definition.attribute_names if name in row}
        meta = {name: row[name] for name in definition.meta_names if name in row}

        relationships = {}
        for rel in definition.relationships:
            related_id = row.get(rel.foreign_key)
            if related_id is None:
                continue
            relationships[rel.name] = {
                "data": {"type": rel.plural_form, "id": str(related_id)},
                "links": {
                    "self": f"{self.location}/{resource_id}/relationships/{rel.name}",
                    "related": f"{self.location}/{resource_id}/{rel.name}",
                },
            }

        if attributes:
            resource["attributes"] = attributes
        if meta:
            resource["meta"] = meta
        if relationships:
            resource["relationships"] = relationships
        return resource

    def _single(self, row: Mapping[str, Any]) -> dict[str, Any]:
        return {
            "data": self.to_resource(row),
            "links": {"self": f"{self.location}/{row['id']}"},
        }

    # ------------------------------------------------------------------
    # Input handling
    # ------------------------------------------------------------------

    def _row_id(self, request: CrudRequest) -> int:
        # Ids are integer keys; anything else cannot match a row
        row_id = parse_unsigned(request.id)
        if row_id is None:
            raise ResourceNotFoundError()
        return row_id

    def _payload(self, request: CrudRequest) -> JSONAPIRequestData:
        try:
            data = JSONAPIRequest.model_validate(request.body).data
        except pydantic.ValidationError as exc:
            raise ValidationError(_describe(exc)) from exc

        if data.type != self.definition.plural_form:
            raise ValidationError(
                f"Expected data.type to be {self.definition.plural_form!r}, got {data.type!r}."
            )
        if request.id is not None and data.id is not None and str(data.id) != request.id:
            raise ValidationError("data.id does not match the id in the URL.")
        return data

    def _relationship_columns(self, raw: Mapping[str, Any] | None) -> dict[str, Any]:
        columns: dict[str, Any] = {}
        for name, linkage in project(raw, self.definition.relationship_names).items():
            rel = self.definition.relationship(name)
            if not isinstance(linkage, Mapping) or "data" not in linkage:
                raise ValidationError(f"relationships.{name} must contain a data member.")

            data = linkage["data"]
            if data is None:
                if not rel.nullable:
                    raise ValidationError(f"relationships.{name} cannot be emptied.")
                columns[rel.foreign_key] = None
                continue
            if not isinstance(data, Mapping):
                raise ValidationError(f"relationships.{name}.data must be an object.")
            if "type" in data and data["type"] != rel.plural_form:
                raise ValidationError(
                    f"relationships.{name}.data.type must be {rel.plural_form!r}."
                )

            related_id = parse_unsigned(data.get("id"))
            if related_id is None:
                raise ValidationError(f"relationships.{name}.data.id must be an integer id.")
            columns[rel.foreign_key] = related_id
        return columns

    def _columns(self, data: JSONAPIRequestData, action: str) -> dict[str, Any]:
        """Whitelist and validate the writable columns of a write payload.

        Returns an empty dict when the payload names no known field.
        """
        definition = self.definition
        attributes = project(data.attributes, definition.writable_attribute_names)
        meta = project(data.meta, definition.writable_meta_names)
        relationships = self._relationship_columns(data.relationships)

        if not (attributes or meta or relationships):
            return {}

        schema = definition.validations[action]
        try:
            attributes = validate_section(schema.attributes, attributes)
            meta = validate_section(schema.meta, meta)
        except pydantic.ValidationError as exc:
            raise ValidationError(_describe(exc)) from exc

        return {**attributes, **meta, **relationships}

    def _fields(self, request: CrudRequest) -> str | list[str]:
        raw = request.query.get(f"fields[{self.definition.plural_form}]")
        # ?fields[people]= with no value selects everything
        if not raw:
            return ALL_FIELDS

        attribute_names = self.definition.attribute_names
        requested = [name.strip() for name in raw.split(",")]
        selected = list(dict.fromkeys(name for name in requested if name in attribute_names))
        if not selected:
            raise NoValidFieldsError(self.definition.plural_form)

        # id and meta are always returned; fields only narrows attributes
        return ["id", *selected, *self.definition.meta_names]

    def _page(self, request: CrudRequest) -> Page | None:
        policy = self.definition.pagination
        if not policy.enabled:
            return None
        return Page(
            number=resolve_page_value(request.query.get("page[number]"), policy.default_page_number),
            size=resolve_page_value(request.query.get("page[size]"), policy.default_page_size),
        )

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _failed(
        self, exc: StoreError, action: str, statement: Statement, request: CrudRequest
    ) -> JsonapiError:
        logger.warning(
            "There was a query error with a CRUD request. resource=%s request_id=%s "
            "action=%s query=%s error=%s",
            self.definition.name,
            request.request_id,
            action,
            statement.sql,
            exc.message,
        )
        return map_store_error(exc, self.definition.plural_form)

    async def _execute_one(
        self, statement: Statement, action: str, request: CrudRequest
    ) -> dict[str, Any]:
        logger.info(
            "Running %s on %s (request %s): %s",
            action, self.definition.name, request.request_id, statement.sql,
        )
        try:
            row = await self.store.execute_one(statement)
        except StoreError as exc:
            raise self._failed(exc, action, statement, request) from exc
        logger.info("Finished %s on %s (request %s)", action, self.definition.name, request.request_id)
        return row

    async def _execute_many(
        self, statement: Statement, action: str, request: CrudRequest
    ) -> list[dict[str, Any]]:
        logger.info(
            "Running %s on %s (request %s): %s",
            action, self.definition.name, request.request_id, statement.sql,
        )
        try:
            rows = await self.store.execute_many(statement)
        except StoreError as exc:
            raise self._failed(exc, action, statement, request) from exc
        logger.info(
            "Finished %s on %s (request %s), %d row(s)",
            action, self.definition.name, request.request_id, len(rows),
        )
        return rows

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def create(self, request: CrudRequest) -> CrudResponse:
        """Insert a resource from the request body and return it with 201."""
        data = self._payload(request)
        columns = self._columns(data, "create")
        if not columns:
            raise NoValidFieldsError(self.definition.plural_form)

        statement = build_create(self.definition.table_name, columns, known=self.definition.columns)
        row = await self._execute_one(statement, "create", request)
        logger.info("Resource created. resource=%s id=%s", self.definition.name, row["id"])
        return CrudResponse(201, self._single(row))

    async def read(self, request: CrudRequest) -> CrudResponse:
        """Read one resource by id, or the (optionally paginated) collection."""
        fields = self._fields(request)
        table, known = self.definition.table_name, self.definition.columns

        if request.id is not None:
            statement = build_read(table, fields, id=self._row_id(request), known=known)
            row = await self._execute_one(statement, "read_one", request)
            return CrudResponse(200, self._single(row))

        page = self._page(request)
        statement = build_read(table, fields, page=page, known=known)
        rows = await self._execute_many(statement, "read_many", request)
        document: dict[str, Any] = {
            "data": [self.to_resource(row) for row in rows],
            "links": {"self": self.location},
        }

        if page is not None:
            if rows:
                total_count = int(rows[0][TOTAL_COUNT])
            elif page.number > 1:
                # Past the last page there is no row to carry the window count
                count = await self._execute_one(build_count(table), "read_many", request)
                total_count = int(count[TOTAL_COUNT])
            else:
                total_count = 0

            document["meta"] = PaginationMeta(
                page_number=page.number, page_size=page.size, total_count=total_count
            ).model_dump()
            links = build_pagination_links(self.location, page, total_count)
            document["links"].update(links.model_dump(exclude_none=True))

        return CrudResponse(200, document)

    async def update(self, request: CrudRequest) -> CrudResponse:
        """Apply the request body to one resource.

        A body that names no known field is not an error: the resource is
        read and returned unchanged, exactly as a GET would return it.
        """
        row_id = self._row_id(request)
        data = self._payload(request)
        columns = self._columns(data, "update")
        table = self.definition.table_name

        if not columns:
            statement = build_read(table, ALL_FIELDS, id=row_id)
        else:
            touch = [f.name for f in self.definition.meta if f.name == "updated_at" and f.read_only]
            statement = build_update(table, columns, row_id, touch=touch, known=self.definition.columns)

        row = await self._execute_one(statement, "update", request)
        return CrudResponse(200, self._single(row))

    async def delete(self, request: CrudRequest) -> CrudResponse:
        """Delete one resource; 204 with no body on success."""
        statement = build_delete(self.definition.table_name, self._row_id(request))
        await self._execute_one(statement, "delete", request)
        logger.info("Deleted a resource. resource=%s id=%s", self.definition.name, request.id)
        return CrudResponse(204)
