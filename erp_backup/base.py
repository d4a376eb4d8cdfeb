"""Abstract document store contract consumed by the backup engine."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from ._utils import chunked, generate_doc_id, logger

Document = Dict[str, Any]

DEFAULT_MAX_BATCH_SIZE = 500


@dataclass
class BaseDocumentStore(ABC):
    """A schemaless store of named collections of keyed documents.

    Concrete backends provide four primitives: ``read_all``, ``write_chunk``,
    ``delete_chunk`` and ``generate_id``. A single ``write_chunk`` or
    ``delete_chunk`` call is one atomic commit and may carry at most
    ``max_batch_size`` documents.
    """

    namespace: str
    global_config: Dict[str, Any] = field(default_factory=dict)

    @property
    def max_batch_size(self) -> int:
        return int(self.global_config.get("max_batch_size", DEFAULT_MAX_BATCH_SIZE))

    @property
    def identity(self) -> str:
        """Identifies the physical store; two handles on the same data share it."""
        return f"{type(self).__name__}:{self.namespace}"

    @abstractmethod
    async def read_all(self, collection: str) -> Dict[str, Document]:
        """Return every document of ``collection`` keyed by document id."""

    @abstractmethod
    async def write_chunk(self, collection: str, documents: Dict[str, Document], merge: bool) -> None:
        """Atomically upsert ``documents``.

        With ``merge`` the given fields are merged over an existing document,
        otherwise the stored document is replaced.
        """

    @abstractmethod
    async def delete_chunk(self, collection: str, doc_ids: List[str]) -> None:
        """Atomically delete the given documents."""

    def generate_id(self, collection: str) -> str:
        return generate_doc_id()

    async def delete_all(
        self,
        collection: str,
        chunk_size: int,
        on_commit: Optional[Callable[[int, int], None]] = None,
    ) -> int:
        """Delete every document of ``collection`` in ``chunk_size`` commits.

        Returns the number of commits issued. Chunks are independent, so a
        failure leaves the collection partially cleared. ``on_commit`` is
        called with the chunk index and size after each commit.
        """
        doc_ids = list((await self.read_all(collection)).keys())
        commits = 0
        for index, chunk in enumerate(chunked(doc_ids, chunk_size)):
            await self.delete_chunk(collection, chunk)
            if on_commit is not None:
                on_commit(index, len(chunk))
            commits += 1
        logger.debug(f"Cleared {collection}: {len(doc_ids)} documents in {commits} commits")
        return commits

    async def check_health(self) -> bool:
        return True

    def _check_chunk_size(self, count: int) -> None:
        if count > self.max_batch_size:
            raise ValueError(
                f"Chunk of {count} documents exceeds store limit of {self.max_batch_size}"
            )
