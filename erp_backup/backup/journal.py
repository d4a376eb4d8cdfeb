"""Resumption log of committed chunks."""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class ChunkRecord:
    collection: str
    operation: str  # "write" or "delete"
    chunk_index: int
    document_count: int


@dataclass
class ChunkLog:
    """Append-only record of every chunk committed during one operation.

    Multi-chunk writes are not atomic; the log tells a retry which chunk of a
    collection was the last to land.
    """

    records: List[ChunkRecord] = field(default_factory=list)

    def record(self, collection: str, operation: str, chunk_index: int, document_count: int) -> None:
        self.records.append(ChunkRecord(collection, operation, chunk_index, document_count))

    def last_committed(self, collection: str, operation: str = "write") -> Optional[int]:
        for record in reversed(self.records):
            if record.collection == collection and record.operation == operation:
                return record.chunk_index
        return None

    def committed_count(self, collection: str, operation: str = "write") -> int:
        return sum(
            r.document_count for r in self.records
            if r.collection == collection and r.operation == operation
        )

    def reset(self) -> None:
        self.records.clear()

    def __len__(self) -> int:
        return len(self.records)
