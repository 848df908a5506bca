# This module wraps the async Redis client used as the agent's durable store.
# Author: Shibo Li
# Date: 2025-07-02
# Version: 0.2.0

from typing import Dict, List, Mapping, Optional, Union
from redis.asyncio import Redis, from_url
from redis.exceptions import WatchError

from shopagent.utils.logger import console

Scalar = Union[str, int, float]


class RedisStore:
    """
    Key-value store adapter over ``redis.asyncio``.

    Every key is namespaced with ``key_prefix``; callers pass bare keys such as
    ``memory:<conversation_id>:messages``. Values are strings, the client is
    expected to be created with ``decode_responses=True``.
    """

    def __init__(self, client: Redis, key_prefix: str = "ai-agent"):
        self._client = client
        self._prefix = key_prefix

    @classmethod
    def from_url(cls, url: str, key_prefix: str = "ai-agent") -> "RedisStore":
        client = from_url(url, decode_responses=True)
        console.info("Async Redis client initialized.", url=url, prefix=key_prefix)
        return cls(client, key_prefix)

    @property
    def client(self) -> Redis:
        return self._client

    def key(self, key: str) -> str:
        return f"{self._prefix}:{key}" if self._prefix else key

    async def close(self):
        await self._client.aclose()

    # --- strings ---
    async def get(self, key: str) -> Optional[str]:
        return await self._client.get(self.key(key))

    async def set(self, key: str, value: str, ttl: Optional[int] = None):
        await self._client.set(self.key(key), value, ex=ttl)

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return await self._client.delete(*(self.key(k) for k in keys))

    # --- lists ---
    async def rpush(self, key: str, *values: str) -> int:
        if not values:
            return await self._client.llen(self.key(key))
        return await self._client.rpush(self.key(key), *values)

    async def lrange(self, key: str, start: int = 0, end: int = -1) -> List[str]:
        return await self._client.lrange(self.key(key), start, end)

    async def ltrim(self, key: str, start: int, end: int):
        await self._client.ltrim(self.key(key), start, end)

    # --- hashes ---
    async def hget(self, key: str, field: str) -> Optional[str]:
        return await self._client.hget(self.key(key), field)

    async def hgetall(self, key: str) -> Dict[str, str]:
        return await self._client.hgetall(self.key(key))

    async def hset_all(self, key: str, mapping: Mapping[str, Scalar]):
        if mapping:
            await self._client.hset(self.key(key), mapping=dict(mapping))

    async def hdel(self, key: str, *fields: str) -> int:
        return await self._client.hdel(self.key(key), *fields)

    async def hincrby(self, key: str, field: str, amount: int = 1) -> int:
        return await self._client.hincrby(self.key(key), field, amount)

    # --- sorted sets ---
    async def zadd(self, key: str, mapping: Mapping[str, float]) -> int:
        return await self._client.zadd(self.key(key), dict(mapping))

    async def zincrby(self, key: str, member: str, amount: float = 1.0) -> float:
        return await self._client.zincrby(self.key(key), amount, member)

    async def zrange(self, key: str, start: int = 0, end: int = -1,
                     desc: bool = False, withscores: bool = False):
        return await self._client.zrange(self.key(key), start, end, desc=desc, withscores=withscores)

    # --- atomic helpers ---
    async def compare_and_delete(self, key: str, expected: str) -> bool:
        """Deletes ``key`` only if it still holds ``expected``. Returns True when deleted."""
        full_key = self.key(key)
        async with self._client.pipeline(transaction=True) as pipe:
            try:
                await pipe.watch(full_key)
                current = await pipe.get(full_key)
                if current != expected:
                    await pipe.unwatch()
                    return False
                pipe.multi()
                pipe.delete(full_key)
                await pipe.execute()
                return True
            except WatchError:
                return False

    async def delete_pattern(self, pattern: str) -> int:
        """Deletes every key matching the (prefixed) glob pattern."""
        removed = 0
        batch: List[str] = []
        async for full_key in self._client.scan_iter(match=self.key(pattern), count=500):
            batch.append(full_key)
            if len(batch) >= 500:
                removed += await self._client.delete(*batch)
                batch = []
        if batch:
            removed += await self._client.delete(*batch)
        return removed
