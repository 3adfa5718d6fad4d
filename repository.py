import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from uuid import UUID

from supabase import Client

from queries import ENTRY_COLUMNS, build_count_query, build_page_query
from schemas import EntryFilters, PageParams

logger = logging.getLogger(__name__)


def _is_uuid(value: str) -> bool:
    try:
        UUID(str(value))
    except ValueError:
        return False
    return True


class EntryRepository:
    """
    Journal entries in the Supabase ``entries`` table.

    Every call is keyed on the owner; single-entry calls are keyed on
    (id, owner) together so another user's row is indistinguishable from a
    missing one. Methods return None for "not found" and let store errors
    propagate to the caller.
    """

    def __init__(self, client: Client, table: str = "entries"):
        self.client = client
        self.table = table

    def _table(self):
        return self.client.table(self.table)

    def list_entries(self, owner_id: str, filters: EntryFilters, params: PageParams) -> Tuple[List[dict], int]:
        page = build_page_query(self._table(), owner_id, filters, params).execute()
        counted = build_count_query(self._table(), owner_id, filters).execute()
        return page.data, counted.count or 0

    def get_entry(self, owner_id: str, entry_id: str) -> Optional[dict]:
        if not _is_uuid(entry_id):
            return None
        response = (
            self._table()
            .select(ENTRY_COLUMNS)
            .eq("id", entry_id)
            .eq("user_id", owner_id)
            .maybe_single()
            .execute()
        )
        # maybe_single() yields no response at all when nothing matched
        if response is None:
            return None
        return response.data or None

    def create_entry(self, owner_id: str, fields: dict) -> dict:
        row = {**fields, "user_id": owner_id}
        response = self._table().insert(row).execute()
        entry = response.data[0]
        logger.info(f"Created entry {entry['id']} for user {owner_id}")
        return entry

    def update_entry(self, owner_id: str, entry_id: str, changes: dict) -> Optional[dict]:
        if not _is_uuid(entry_id):
            return None
        changes = {**changes, "updated_at": datetime.now(timezone.utc).isoformat()}
        response = (
            self._table()
            .update(changes)
            .eq("id", entry_id)
            .eq("user_id", owner_id)
            .execute()
        )
        return response.data[0] if response.data else None

    def delete_entry(self, owner_id: str, entry_id: str) -> Optional[dict]:
        if not _is_uuid(entry_id):
            return None
        response = (
            self._table()
            .delete()
            .eq("id", entry_id)
            .eq("user_id", owner_id)
            .execute()
        )
        if not response.data:
            return None
        logger.info(f"Deleted entry {entry_id} for user {owner_id}")
        return response.data[0]
