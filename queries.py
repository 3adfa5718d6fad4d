"""
Query construction for the entry listing.

Everything here works on a PostgREST select builder as returned by
``client.table(...).select(...)``: filters only narrow the row set (AND),
ordering and the page window are applied to the page query, and the count
query reuses the exact same predicate.
"""
import math
from typing import Tuple

from schemas import EntryFilters, PageParams

ENTRY_COLUMNS = "id, user_id, title, content, mood, tags, image_url, created_at, updated_at"
SEARCH_COLUMN = "search_vector"
SEARCH_OPTIONS = {"type": "web_search", "config": "english"}


def apply_filters(query, owner_id: str, filters: EntryFilters):
    """
    Narrow ``query`` to the caller's rows matching every filter that is set.
    """
    query = query.eq("user_id", owner_id)

    if filters.mood is not None:
        query = query.eq("mood", filters.mood.value)

    if filters.tag:
        query = query.contains("tags", [filters.tag])

    if filters.start_date is not None:
        query = query.gte("created_at", filters.start_date.isoformat())
    if filters.end_date is not None:
        query = query.lte("created_at", filters.end_date.isoformat())

    # text_search hands back a builder without order/range, so it goes last
    if filters.search:
        query = query.text_search(SEARCH_COLUMN, filters.search, options=SEARCH_OPTIONS)

    return query


def page_window(params: PageParams) -> Tuple[int, int]:
    """Inclusive (start, end) row indexes of the requested page."""
    start = params.skip
    return start, start + params.limit - 1


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if total else 0


def build_page_query(table, owner_id: str, filters: EntryFilters, params: PageParams):
    start, end = page_window(params)
    query = table.select(ENTRY_COLUMNS).order("created_at", desc=True).range(start, end)
    return apply_filters(query, owner_id, filters)


def build_count_query(table, owner_id: str, filters: EntryFilters):
    query = table.select("id", count="exact", head=True)
    return apply_filters(query, owner_id, filters)
