"""Page-number pagination models for JSON:API list responses."""

from __future__ import annotations

from pydantic import BaseModel

from apipls.sql import Page


class PaginationMeta(BaseModel):
    """Pagination metadata for JSON:API list responses."""

    page_number: int
    page_size: int
    total_count: int


class PaginationLinks(BaseModel):
    """Pagination links for JSON:API list responses."""

    first: str
    last: str
    next: str | None = None
    prev: str | None = None


def _page_url(base_url: str, number: int, size: int) -> str:
    return f"{base_url}?page[number]={number}&page[size]={size}"


def build_pagination_links(base_url: str, page: Page, total_count: int) -> PaginationLinks:
    """Build first/last/prev/next links for ``page`` of a ``total_count`` result.

    Args:
        base_url: Collection URL without a query string.
        page: The page being returned.
        total_count: Number of rows in the unpaginated result.

    Returns:
        Links with ``prev``/``next`` left unset where no such page exists.
    """
    last_number = max(1, -(-total_count // page.size))
    links = PaginationLinks(
        first=_page_url(base_url, 1, page.size),
        last=_page_url(base_url, last_number, page.size),
    )
    if page.number > 1:
        links.prev = _page_url(base_url, min(page.number - 1, last_number), page.size)
    if page.number < last_number:
        links.next = _page_url(base_url, page.number + 1, page.size)
    return links
