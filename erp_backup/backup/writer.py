"""Chunked persistence of documents under a restore mode."""

from typing import Any, Dict, List, Optional

from ..base import BaseDocumentStore
from ..exceptions import BackupError, WriteFailure
from .._utils import chunked, logger
from .accessor import DOC_ID_FIELD, CollectionAccessor
from .journal import ChunkLog
from .models import RestoreMode


class BatchWriter:
    """Write documents into a collection, one atomic commit per chunk.

    Chunks are committed strictly in order and chunk ``i + 1`` is only
    attempted after chunk ``i`` committed. On failure the earlier chunks stay
    written and nothing from the failing chunk onward is applied.
    """

    def __init__(
        self,
        store: BaseDocumentStore,
        accessor: Optional[CollectionAccessor] = None,
        journal: Optional[ChunkLog] = None,
    ):
        self.store = store
        self.journal = journal if journal is not None else ChunkLog()
        self.accessor = accessor or CollectionAccessor(store, self.journal)

    def _resolve(self, name: str, document: Dict[str, Any]) -> tuple:
        fields = {k: v for k, v in document.items() if k != DOC_ID_FIELD}
        doc_id = document.get(DOC_ID_FIELD)
        if not isinstance(doc_id, str) or not doc_id:
            doc_id = self.store.generate_id(name)
        return doc_id, fields

    async def write(self, name: str, documents: List[Dict[str, Any]], mode: RestoreMode) -> int:
        """Persist ``documents`` into ``name`` and return the number of commits.

        Raises:
            WriteFailure: a chunk commit was rejected
            StoreUnavailable: the store could not be reached
        """
        mode = RestoreMode(mode)
        if mode.is_destructive:
            await self.accessor.clear(name)

        merge = mode == RestoreMode.MERGE
        commits = 0
        for index, chunk in enumerate(chunked(documents, self.store.max_batch_size)):
            batch = {}
            for document in chunk:
                doc_id, fields = self._resolve(name, document)
                batch[doc_id] = fields

            try:
                await self.store.write_chunk(name, batch, merge=merge)
            except BackupError:
                raise
            except Exception as e:
                raise WriteFailure(name, index, str(e)) from e

            self.journal.record(name, "write", index, len(batch))
            commits += 1
            logger.debug(f"Wrote chunk {index} of {name} ({len(batch)} documents)")

        logger.info(f"Wrote {len(documents)} documents to {name} ({mode.value}, {commits} commits)")
        return commits
