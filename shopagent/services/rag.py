# Knowledge base storage and semantic search.
# Author: Shibo Li
# Date: 2025-07-04
# Version: 0.1.0

import json
import math
import time
from typing import Any, Dict, List, Optional, Sequence

from shopagent.core.config import Settings
from shopagent.models.common import RagChunk, ScoredChunk
from shopagent.services.kv_store import RedisStore
from shopagent.utils.ids import create_id, hash_text
from shopagent.utils.logger import console

KB_ALL_CHUNKS_KEY = "kb:chunks"
KB_SOURCE_PREFIX = "kb:source"
KB_EMBEDDING_CACHE_PREFIX = "kb:emb-cache"

EPSILON = 1e-8


def chunk_text(content: str, chunk_size: int = 800, overlap: int = 120) -> List[str]:
    """
    Splits ``content`` into windows of ``chunk_size`` characters, each starting
    ``chunk_size - overlap`` characters after the previous one, so neighbouring
    chunks share ``overlap`` characters. Splitting stops at the first window
    that reaches the end of the text.
    """
    if chunk_size <= 0 or overlap < 0 or overlap >= chunk_size:
        raise ValueError(f"Invalid chunking parameters: size={chunk_size}, overlap={overlap}")
    step = chunk_size - overlap
    chunks = []
    for start in range(0, len(content), step):
        chunks.append(content[start:start + chunk_size])
        if start + chunk_size >= len(content):
            break
    return chunks


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """dot(a, b) / (|a| * |b| + eps). Vectors of different length are compared on their common prefix."""
    dot = norm_a = norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y
    return dot / (math.sqrt(norm_a) * math.sqrt(norm_b) + EPSILON)


class RetrievalEngine:
    """
    Chunked document store with embedding cache and cosine-similarity search.

    Chunks live in one Redis list (``kb:chunks``) plus a per-source id list
    (``kb:source:<source_id>``). Embeddings are cached in Redis by content hash;
    the full chunk list is additionally cached in process for
    ``RAG_CACHE_TTL_SECONDS`` and dropped on every write.
    """

    def __init__(self, store: RedisStore, llm, settings: Settings, clock=time.monotonic):
        self._store = store
        self._llm = llm
        self._settings = settings
        self._clock = clock
        self._chunks_cache: Optional[List[RagChunk]] = None
        self._chunks_cache_at = 0.0

    def clear_cache(self):
        self._chunks_cache = None
        self._chunks_cache_at = 0.0

    async def embed_text(self, text: str) -> List[float]:
        cache_key = f"{KB_EMBEDDING_CACHE_PREFIX}:{hash_text(text)}"
        cached = await self._store.get(cache_key)
        if cached:
            return json.loads(cached)

        embedding = await self._llm.embed(text)
        await self._store.set(cache_key, json.dumps(embedding), ttl=self._settings.RAG_EMBEDDING_CACHE_TTL_SECONDS)
        return embedding

    async def upsert_document(self, source_id: str, content: str, title: Optional[str] = None,
                              metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        chunks = chunk_text(content or "", self._settings.RAG_CHUNK_SIZE, self._settings.RAG_CHUNK_OVERLAP)
        source_key = f"{KB_SOURCE_PREFIX}:{source_id}"
        chunk_ids: List[str] = []

        for piece in chunks:
            embedding = await self.embed_text(piece)
            chunk = RagChunk(
                id=create_id("kb"),
                source_id=source_id,
                title=title,
                content=piece,
                metadata=metadata or {},
                embedding=embedding,
                checksum=hash_text(piece),
            )
            chunk_ids.append(chunk.id)
            await self._store.rpush(KB_ALL_CHUNKS_KEY, chunk.model_dump_json())
            await self._store.rpush(source_key, chunk.id)

        self.clear_cache()
        console.info("Knowledge base document upserted", source_id=source_id, chunks=len(chunk_ids))
        return {"chunk_count": len(chunk_ids), "chunk_ids": chunk_ids}

    async def list_chunks(self) -> List[RagChunk]:
        now = self._clock()
        if self._chunks_cache is not None and now - self._chunks_cache_at < self._settings.RAG_CACHE_TTL_SECONDS:
            return self._chunks_cache

        raw = await self._store.lrange(KB_ALL_CHUNKS_KEY, 0, -1)
        self._chunks_cache = [RagChunk.model_validate_json(item) for item in raw]
        self._chunks_cache_at = now
        return self._chunks_cache

    async def search(self, query: str, top_k: Optional[int] = None,
                     score_threshold: Optional[float] = None) -> List[ScoredChunk]:
        if not query:
            return []
        top_k = top_k or self._settings.RAG_TOP_K
        if score_threshold is None:
            score_threshold = self._settings.RAG_SCORE_THRESHOLD

        query_embedding = await self.embed_text(query)
        chunks = await self.list_chunks()

        scored: List[ScoredChunk] = []
        for chunk in chunks:
            score = cosine_similarity(query_embedding, chunk.embedding)
            if score < score_threshold:
                continue
            scored.append(ScoredChunk(
                id=chunk.id,
                source_id=chunk.source_id,
                title=chunk.title,
                content=chunk.content,
                metadata=chunk.metadata,
                score=score,
            ))
        scored.sort(key=lambda hit: hit.score, reverse=True)
        results = scored[:top_k]

        console.info(
            "RAG search finished",
            query=query[:50],
            total_chunks=len(chunks),
            matched=len(results),
            top_score=results[0].score if results else None,
        )
        return results

    async def remove_by_source(self, source_id: str) -> Dict[str, int]:
        source_key = f"{KB_SOURCE_PREFIX}:{source_id}"
        chunk_ids = set(await self._store.lrange(source_key, 0, -1))
        if not chunk_ids:
            return {"removed": 0}

        self.clear_cache()
        remained = [chunk for chunk in await self.list_chunks() if chunk.id not in chunk_ids]
        await self._store.delete(KB_ALL_CHUNKS_KEY)
        if remained:
            await self._store.rpush(KB_ALL_CHUNKS_KEY, *(chunk.model_dump_json() for chunk in remained))
        await self._store.delete(source_key)
        self.clear_cache()

        console.info("Knowledge base document removed", source_id=source_id, removed=len(chunk_ids))
        return {"removed": len(chunk_ids)}
