"""Whole-collection reads and chunked clears against a document store."""

from typing import Any, Dict, List, Optional

from ..base import BaseDocumentStore
from .._utils import logger
from .journal import ChunkLog

DOC_ID_FIELD = "_docId"


class CollectionAccessor:
    """Read and clear whole collections.

    ``read_all`` stamps every document with its store key under ``_docId`` so
    it survives a round trip through an artifact.
    """

    def __init__(self, store: BaseDocumentStore, journal: Optional[ChunkLog] = None):
        self.store = store
        self.journal = journal if journal is not None else ChunkLog()

    @property
    def chunk_size(self) -> int:
        return self.store.max_batch_size

    async def read_all(self, name: str) -> List[Dict[str, Any]]:
        documents = await self.store.read_all(name)
        return [{DOC_ID_FIELD: doc_id, **fields} for doc_id, fields in documents.items()]

    async def clear(self, name: str) -> int:
        """Delete every document of ``name``, one commit per chunk.

        Returns the number of commits. A failure part way leaves the earlier
        chunks deleted; clearing again simply picks up what is left.
        """
        deleted = 0

        def on_commit(index: int, count: int) -> None:
            nonlocal deleted
            deleted += count
            self.journal.record(name, "delete", index, count)

        commits = await self.store.delete_all(name, self.chunk_size, on_commit=on_commit)
        if deleted:
            logger.info(f"Cleared {name}: {deleted} documents in {commits} commits")
        return commits
