"""Store interface the CRUD controller executes statements against.

The controller only ever sees :class:`ResourceStore` and the closed set of
:class:`StoreErrorKind` values. :class:`SQLAlchemyStore` is the production
implementation: one ``text()`` statement per round trip on a shared async
engine, with driver errors classified into store error kinds.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine


# SQLSTATE class 23 codes shared by PostgreSQL drivers
_SQLSTATE_KINDS = {
    "23505": "UNIQUE_VIOLATION",
    "23503": "FOREIGN_KEY_VIOLATION",
    "23502": "NOT_NULL_VIOLATION",
    "23514": "CHECK_VIOLATION",
}

# SQLite reports constraint failures only through the message text
_SQLITE_MESSAGE_KINDS = {
    "UNIQUE constraint failed": "UNIQUE_VIOLATION",
    "FOREIGN KEY constraint failed": "FOREIGN_KEY_VIOLATION",
    "NOT NULL constraint failed": "NOT_NULL_VIOLATION",
    "CHECK constraint failed": "CHECK_VIOLATION",
}


@dataclass(frozen=True)
class Statement:
    """A parameterized SQL statement. Values only ever travel in ``params``."""

    sql: str
    params: dict[str, Any] = field(default_factory=dict)


class StoreErrorKind(str, Enum):
    NO_DATA = "no_data"
    MULTIPLE_ROWS = "multiple_rows"
    UNIQUE_VIOLATION = "unique_violation"
    FOREIGN_KEY_VIOLATION = "foreign_key_violation"
    NOT_NULL_VIOLATION = "not_null_violation"
    CHECK_VIOLATION = "check_violation"
    UNKNOWN = "unknown"


class StoreError(Exception):
    """A failed store round trip, tagged with its kind.

    Args:
        kind: Classification the controller maps to a client error.
        message: Operator-facing description; never sent to clients.
    """

    def __init__(self, kind: StoreErrorKind, message: str = "") -> None:
        super().__init__(message or kind.value)
        self.kind = kind
        self.message = message


class ResourceStore(ABC):
    """Executes statements built by :mod:`apipls.sql`."""

    @abstractmethod
    async def execute_one(self, statement: Statement) -> dict[str, Any]:
        """Execute a statement that must produce exactly one row.

        Raises:
            StoreError: ``NO_DATA`` for zero rows, ``MULTIPLE_ROWS`` for more
                than one, or a constraint/unknown kind on failure.
        """
        ...

    @abstractmethod
    async def execute_many(self, statement: Statement) -> list[dict[str, Any]]:
        """Execute a statement that may produce any number of rows."""
        ...


def classify_error(exc: SQLAlchemyError) -> StoreErrorKind:
    """Map a SQLAlchemy/driver exception onto a :class:`StoreErrorKind`."""
    if not isinstance(exc, IntegrityError):
        return StoreErrorKind.UNKNOWN

    orig = getattr(exc, "orig", None)
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code in _SQLSTATE_KINDS:
        return StoreErrorKind[_SQLSTATE_KINDS[code]]

    message = str(orig if orig is not None else exc)
    for prefix, kind in _SQLITE_MESSAGE_KINDS.items():
        if prefix in message:
            return StoreErrorKind[kind]
    return StoreErrorKind.UNKNOWN


class SQLAlchemyStore(ResourceStore):
    """Store backed by a shared :class:`AsyncEngine`.

    Each call checks out a connection, runs one statement in its own
    transaction and commits. Connection pooling is left to the engine.

    Args:
        engine: The application's async engine.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def _fetch(self, statement: Statement) -> list[dict[str, Any]]:
        try:
            async with self._engine.begin() as conn:
                result = await conn.execute(text(statement.sql), statement.params)
                if not result.returns_rows:
                    return []
                return [dict(row) for row in result.mappings().all()]
        except SQLAlchemyError as exc:
            kind = classify_error(exc)
            raise StoreError(kind, str(exc)) from exc

    async def execute_one(self, statement: Statement) -> dict[str, Any]:
        rows = await self._fetch(statement)
        if not rows:
            raise StoreError(StoreErrorKind.NO_DATA, "No data returned from the query.")
        if len(rows) > 1:
            raise StoreError(
                StoreErrorKind.MULTIPLE_ROWS,
                f"Expected one row, the query returned {len(rows)}.",
            )
        return rows[0]

    async def execute_many(self, statement: Statement) -> list[dict[str, Any]]:
        return await self._fetch(statement)
