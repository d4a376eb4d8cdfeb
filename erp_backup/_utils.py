import logging
import random
import string
import time
import uuid
from datetime import datetime, timezone
from typing import Iterator, List, Sequence, TypeVar

logger = logging.getLogger("erp-backup")

T = TypeVar("T")


def chunked(items: Sequence[T], size: int) -> Iterator[List[T]]:
    """Yield consecutive slices of ``items`` holding at most ``size`` elements."""
    if size <= 0:
        raise ValueError(f"chunk size must be positive, got {size}")
    for start in range(0, len(items), size):
        yield list(items[start:start + size])


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_now() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return utc_now().isoformat(timespec="milliseconds").replace("+00:00", "Z")


def file_timestamp() -> str:
    """Sortable timestamp safe for file names, e.g. ``2026-02-21T08-15-03``."""
    return utc_now().strftime("%Y-%m-%dT%H-%M-%S")


def generate_doc_id() -> str:
    return uuid.uuid4().hex[:20]


def generate_foreign_doc_id() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=8))
    return f"supabase_{int(time.time() * 1000)}_{suffix}"
