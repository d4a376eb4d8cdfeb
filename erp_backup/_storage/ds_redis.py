"""Redis document store: one hash per collection, one MULTI/EXEC per chunk."""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import redis.asyncio as aioredis
from redis.backoff import ExponentialBackoff
from redis.retry import Retry
from redis.exceptions import (
    RedisError,
    WatchError,
    ConnectionError as RedisConnectionError,
    TimeoutError as RedisTimeoutError,
)

from ..base import BaseDocumentStore, Document
from ..exceptions import StoreUnavailable
from .._utils import logger

# Errors meaning the server could not be reached in time, as opposed to a rejected command
UNREACHABLE_ERRORS = (RedisConnectionError, RedisTimeoutError)


@dataclass
class RedisDocumentStore(BaseDocumentStore):
    """Redis-backed document store.

    Each collection lives in the hash ``erp:<namespace>:<collection>``; the
    hash field is the document id and the value its JSON-encoded fields.
    """

    _redis_client: Optional[Any] = field(init=False, default=None)
    _connection_pool: Optional[Any] = field(init=False, default=None)
    _initialized: bool = field(init=False, default=False)

    def __post_init__(self):
        self._prefix = f"erp:{self.namespace}:"

        self.redis_url = self.global_config.get("redis_url", "redis://localhost:6379")
        self.redis_password = self.global_config.get("redis_password", None)
        self.max_connections = self.global_config.get("redis_max_connections", 20)
        self.socket_timeout = self.global_config.get("redis_socket_timeout", 5.0)
        self.connection_timeout = self.global_config.get("redis_connection_timeout", 5.0)
        self.health_check_interval = self.global_config.get("redis_health_check_interval", 30)

    @property
    def identity(self) -> str:
        return f"redis:{self.redis_url}/{self._prefix}"

    async def _ensure_initialized(self):
        """Ensure Redis connection is initialized."""
        if self._initialized:
            return

        retry = Retry(
            ExponentialBackoff(cap=10, base=1),
            retries=3,
            supported_errors=(RedisConnectionError, TimeoutError, ConnectionError)
        )

        self._connection_pool = aioredis.ConnectionPool.from_url(
            self.redis_url,
            password=self.redis_password,
            max_connections=self.max_connections,
            socket_timeout=self.socket_timeout,
            socket_connect_timeout=self.connection_timeout,
            decode_responses=False,
            retry=retry,
            health_check_interval=self.health_check_interval
        )

        self._redis_client = aioredis.Redis(
            connection_pool=self._connection_pool,
            auto_close_connection_pool=False
        )

        try:
            await self._redis_client.ping()
            logger.info(f"Connected to Redis for namespace: {self.namespace}")
        except RedisError as e:
            logger.error(f"Redis connection failed: {e}")
            raise StoreUnavailable("redis", str(e)) from e

        self._initialized = True

    def _get_key(self, collection: str) -> str:
        return f"{self._prefix}{collection}"

    def _serialize(self, data: Any) -> bytes:
        return json.dumps(data, default=str, ensure_ascii=False).encode("utf-8")

    def _deserialize(self, data: bytes) -> Any:
        if data is None:
            return None
        return json.loads(data.decode("utf-8"))

    async def read_all(self, collection: str) -> Dict[str, Document]:
        await self._ensure_initialized()

        try:
            raw = await self._redis_client.hgetall(self._get_key(collection))
        except UNREACHABLE_ERRORS as e:
            raise StoreUnavailable("redis", str(e)) from e

        documents = {}
        for doc_id, value in raw.items():
            key = doc_id.decode("utf-8") if isinstance(doc_id, bytes) else doc_id
            documents[key] = self._deserialize(value)
        return documents

    async def write_chunk(self, collection: str, documents: Dict[str, Document], merge: bool) -> None:
        self._check_chunk_size(len(documents))
        if not documents:
            return

        await self._ensure_initialized()
        key = self._get_key(collection)

        try:
            if merge:
                await self._merge_chunk(key, documents)
            else:
                async with self._redis_client.pipeline(transaction=True) as pipe:
                    pipe.hset(key, mapping=self._encode(documents))
                    await pipe.execute()
        except UNREACHABLE_ERRORS as e:
            raise StoreUnavailable("redis", str(e)) from e

        logger.debug(f"Committed {len(documents)} documents to Redis collection: {collection}")

    def _encode(self, documents: Dict[str, Document]) -> Dict[str, bytes]:
        return {doc_id: self._serialize(fields) for doc_id, fields in documents.items()}

    async def _merge_chunk(self, key: str, documents: Dict[str, Document]) -> None:
        """Read-merge-write under WATCH so a concurrent change to the hash retries the chunk."""
        doc_ids = list(documents.keys())
        async with self._redis_client.pipeline(transaction=True) as pipe:
            while True:
                try:
                    await pipe.watch(key)
                    existing = await pipe.hmget(key, doc_ids)
                    payload = dict(documents)
                    for doc_id, current in zip(doc_ids, existing):
                        if current is not None:
                            payload[doc_id] = {**self._deserialize(current), **documents[doc_id]}

                    pipe.multi()
                    pipe.hset(key, mapping=self._encode(payload))
                    await pipe.execute()
                    return
                except WatchError:
                    logger.debug(f"Hash {key} changed during merge, retrying chunk")
                    continue

    async def delete_chunk(self, collection: str, doc_ids: List[str]) -> None:
        self._check_chunk_size(len(doc_ids))
        if not doc_ids:
            return

        await self._ensure_initialized()

        try:
            async with self._redis_client.pipeline(transaction=True) as pipe:
                pipe.hdel(self._get_key(collection), *doc_ids)
                await pipe.execute()
        except UNREACHABLE_ERRORS as e:
            raise StoreUnavailable("redis", str(e)) from e

    async def check_health(self) -> bool:
        try:
            await self._ensure_initialized()
            return bool(await self._redis_client.ping())
        except (StoreUnavailable, RedisError):
            return False

    async def close(self) -> None:
        if self._redis_client:
            await self._redis_client.close()
        if self._connection_pool:
            await self._connection_pool.disconnect()
        self._initialized = False
