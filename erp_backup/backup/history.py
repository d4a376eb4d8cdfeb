"""Append-only audit ledger of export and import actions."""

from typing import List

from pydantic import ValidationError

from ..base import BaseDocumentStore
from ..registry import HISTORY_COLLECTION
from .._utils import logger
from .models import HistoryEntry


class HistoryLedger:
    """Best-effort audit trail kept in the store's ``backups`` collection.

    A failed append is logged and swallowed; history never decides whether
    an export or restore succeeded.
    """

    def __init__(self, store: BaseDocumentStore, collection: str = HISTORY_COLLECTION):
        self.store = store
        self.collection = collection

    async def append(self, entry: HistoryEntry) -> None:
        try:
            entry_id = self.store.generate_id(self.collection)
            fields = entry.model_dump(by_alias=True, mode="json", exclude={"id"}, exclude_none=True)
            await self.store.write_chunk(self.collection, {entry_id: fields}, merge=False)
            logger.debug(f"History entry {entry_id} recorded: {entry.action.value} {entry.file_name}")
        except Exception as e:
            logger.warning(
                f"Failed to append backup history entry: {e}",
                extra={
                    "event": "history_append_failed",
                    "action": entry.action.value,
                    "file_name": entry.file_name,
                    "error_type": type(e).__name__,
                },
            )

    async def recent(self, limit: int = 20) -> List[HistoryEntry]:
        """Return up to ``limit`` entries, newest first."""
        if limit <= 0:
            return []

        try:
            raw = await self.store.read_all(self.collection)
        except Exception as e:
            logger.warning(f"Failed to read backup history: {e}")
            return []

        entries = []
        for entry_id, fields in raw.items():
            try:
                entries.append(HistoryEntry.model_validate({**fields, "id": entry_id}))
            except ValidationError as e:
                logger.warning(f"Skipping unreadable history entry {entry_id}: {e}")

        entries.sort(key=lambda e: e.created_at, reverse=True)
        return entries[:limit]
