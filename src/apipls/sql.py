"""Parameterized CRUD statements for resource tables.

Values are always bound parameters. Identifiers are the only text spliced
into SQL, and every one of them is checked against the set of columns the
resource definition knows about (and against the SQL identifier grammar)
before it is quoted.
"""

from __future__ import annotations

import re
from collections.abc import Collection, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from apipls.store import Statement

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_DIGITS = re.compile(r"[0-9]+")

ALL_FIELDS = "*"
TOTAL_COUNT = "total_count"

# Largest value a BIGINT column or bound integer parameter can hold
MAX_ROW_ID = 2**63 - 1
# Keeps (number - 1) * size within MAX_ROW_ID
MAX_PAGE_VALUE = 2**31 - 1


def parse_unsigned(raw: Any, maximum: int = MAX_ROW_ID) -> int | None:
    """Return ``raw`` as a non-negative integer no larger than ``maximum``.

    Accepts ints and strings of ASCII digits. Anything else, including
    values out of range, gives None.
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str):
        # Longer digit strings cannot fit in 64 bits
        if len(raw) > len(str(MAX_ROW_ID)) or not _DIGITS.fullmatch(raw):
            return None
        value = int(raw)
    else:
        return None
    return value if 0 <= value <= maximum else None


@dataclass(frozen=True)
class Page:
    """A resolved page request; ``number`` and ``size`` are both >= 1."""

    number: int
    size: int

    @property
    def offset(self) -> int:
        return (self.number - 1) * self.size


def resolve_page_value(raw: Any, default: int) -> int:
    """Coerce a ``page[number]``/``page[size]`` query value.

    Anything that is not an integer between 1 and ``MAX_PAGE_VALUE`` falls
    back to ``default``.
    """
    if isinstance(raw, str):
        raw = raw.strip()
    value = parse_unsigned(raw, MAX_PAGE_VALUE)
    return value if value else default


def quote_identifier(name: str, known: Collection[str] | None = None) -> str:
    """Return ``name`` as a quoted SQL identifier.

    Raises:
        ValueError: If ``name`` is not an identifier, or is not in ``known``.
    """
    if not isinstance(name, str) or not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid SQL identifier: {name!r}")
    if known is not None and name not in known:
        raise ValueError(f"Unknown column: {name!r}")
    return f'"{name}"'


def _projection(fields: str | Sequence[str], known: Collection[str] | None) -> str:
    if fields == ALL_FIELDS:
        return ALL_FIELDS
    return ", ".join(quote_identifier(field, known) for field in fields)


def build_create(
    table: str,
    columns: Mapping[str, Any],
    known: Collection[str] | None = None,
) -> Statement:
    """INSERT one row and return it."""
    names = [quote_identifier(column, known) for column in columns]
    placeholders = [f":{column}" for column in columns]
    sql = (
        f"INSERT INTO {quote_identifier(table)} ({', '.join(names)}) "
        f"VALUES ({', '.join(placeholders)}) RETURNING *"
    )
    return Statement(sql, dict(columns))


def build_read(
    table: str,
    fields: str | Sequence[str] = ALL_FIELDS,
    id: int | None = None,
    page: Page | None = None,
    known: Collection[str] | None = None,
) -> Statement:
    """SELECT one row by id, or every row ordered by id.

    Args:
        table: Table to read from.
        fields: ``"*"`` or an explicit list of columns.
        id: Row id for a singular read. Pagination is ignored when set.
        page: Page to return for a plural read. When given, every row also
            carries ``total_count``, the size of the unpaginated result.
        known: Columns the table is allowed to be read by.
    """
    projection = _projection(fields, known)
    source = quote_identifier(table)

    if id is not None:
        return Statement(
            f'SELECT {projection} FROM {source} WHERE "id" = :id',
            {"id": id},
        )

    if page is None:
        return Statement(f'SELECT {projection} FROM {source} ORDER BY "id"')

    return Statement(
        f"SELECT {projection}, count(*) OVER () AS {TOTAL_COUNT} FROM {source} "
        f'ORDER BY "id" LIMIT :limit OFFSET :offset',
        {"limit": page.size, "offset": page.offset},
    )


def build_count(table: str) -> Statement:
    return Statement(f"SELECT count(*) AS {TOTAL_COUNT} FROM {quote_identifier(table)}")


def build_update(
    table: str,
    columns: Mapping[str, Any],
    id: int,
    touch: Sequence[str] = (),
    known: Collection[str] | None = None,
) -> Statement:
    """UPDATE one row by id and return it.

    Args:
        touch: Timestamp columns set to ``CURRENT_TIMESTAMP`` by this update.
    """
    assignments = [f"{quote_identifier(column, known)} = :{column}" for column in columns]
    assignments += [f"{quote_identifier(column, known)} = CURRENT_TIMESTAMP" for column in touch]
    sql = (
        f"UPDATE {quote_identifier(table)} SET {', '.join(assignments)} "
        f'WHERE "id" = :id RETURNING *'
    )
    return Statement(sql, {**columns, "id": id})


def build_delete(table: str, id: int) -> Statement:
    """DELETE one row by id, returning its id so a missing row is detectable."""
    return Statement(
        f'DELETE FROM {quote_identifier(table)} WHERE "id" = :id RETURNING "id"',
        {"id": id},
    )
