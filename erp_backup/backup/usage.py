"""Read-only document count and payload size estimate."""

from ..registry import COLLECTIONS
from .._utils import iso_now, logger
from .accessor import CollectionAccessor
from .models import UsageEstimate
from .utils import estimate_json_bytes


class UsageEstimator:
    def __init__(self, accessor: CollectionAccessor):
        self.accessor = accessor

    async def estimate(self) -> UsageEstimate:
        """Scan every registry collection and sum counts and serialized sizes."""
        document_counts = {}
        total_documents = 0
        estimated_bytes = 0

        for name in COLLECTIONS:
            documents = await self.accessor.read_all(name)
            document_counts[name] = len(documents)
            total_documents += len(documents)
            estimated_bytes += estimate_json_bytes(documents)

        logger.info(f"Usage estimate: {total_documents} documents, ~{estimated_bytes:,} bytes")

        return UsageEstimate(
            generated_at=iso_now(),
            collections_scanned=len(COLLECTIONS),
            total_documents=total_documents,
            estimated_bytes=estimated_bytes,
            document_counts=document_counts,
        )
