"""Test utilities for erp-backup tests."""
import itertools
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from erp_backup.base import BaseDocumentStore, Document
from erp_backup.exceptions import StoreUnavailable
from erp_backup.registry import BACKUP_VERSION


@dataclass
class MemoryDocumentStore(BaseDocumentStore):
    """In-memory store that records every commit and can inject failures.

    ``fail_writes[collection] = n`` rejects the n-th (0-based) write commit
    to that collection; ``unavailable`` makes every call fail as if the store
    were unreachable.
    """

    namespace: str = "test"
    data: Dict[str, Dict[str, Document]] = field(init=False, default_factory=dict)
    commits: List[Tuple[str, str, int]] = field(init=False, default_factory=list)
    fail_writes: Dict[str, int] = field(init=False, default_factory=dict)
    unavailable: bool = field(init=False, default=False)

    def __post_init__(self):
        self._ids = itertools.count(1)
        self._write_counts: Dict[str, int] = {}

    def seed(self, collection: str, documents: Dict[str, Document]) -> None:
        self.data.setdefault(collection, {}).update(
            {doc_id: dict(fields) for doc_id, fields in documents.items()}
        )

    def docs(self, collection: str) -> Dict[str, Document]:
        return self.data.get(collection, {})

    def commit_count(self, operation: str, collection: str) -> int:
        return sum(1 for op, name, _ in self.commits if op == operation and name == collection)

    def _check_available(self) -> None:
        if self.unavailable:
            raise StoreUnavailable("memory", "connection refused")

    async def read_all(self, collection: str) -> Dict[str, Document]:
        self._check_available()
        return {doc_id: dict(fields) for doc_id, fields in self.docs(collection).items()}

    async def write_chunk(self, collection: str, documents: Dict[str, Document], merge: bool) -> None:
        self._check_available()
        self._check_chunk_size(len(documents))

        index = self._write_counts.get(collection, 0)
        self._write_counts[collection] = index + 1
        if self.fail_writes.get(collection) == index:
            raise RuntimeError("commit rejected")

        target = self.data.setdefault(collection, {})
        for doc_id, fields in documents.items():
            if merge and doc_id in target:
                target[doc_id] = {**target[doc_id], **fields}
            else:
                target[doc_id] = dict(fields)
        self.commits.append(("write", collection, len(documents)))

    async def delete_chunk(self, collection: str, doc_ids: List[str]) -> None:
        self._check_available()
        self._check_chunk_size(len(doc_ids))

        target = self.data.get(collection, {})
        for doc_id in doc_ids:
            target.pop(doc_id, None)
        self.commits.append(("delete", collection, len(doc_ids)))

    def generate_id(self, collection: str) -> str:
        return f"gen{next(self._ids)}"


def make_docs(count: int, prefix: str = "d", **fields: Any) -> Dict[str, Document]:
    """``count`` documents keyed ``<prefix>0..``, each carrying ``fields`` and its index."""
    return {f"{prefix}{i}": {"n": i, **fields} for i in range(count)}


def make_artifact(collections: Dict[str, List[Dict[str, Any]]], version: str = BACKUP_VERSION,
                  backup_type: str = "full") -> Dict[str, Any]:
    """Raw artifact dict as it would be read from a file."""
    counts = {name: len(docs) for name, docs in collections.items()}
    return {
        "metadata": {
            "version": version,
            "createdAt": "2026-02-21T08:00:00.000Z",
            "type": backup_type,
            "collectionsIncluded": list(collections.keys()),
            "documentCounts": counts,
            "totalDocuments": sum(counts.values()),
            "createdBy": "tester",
        },
        "collections": collections,
    }
