"""Tests for the HTTP surface, served in-process through httpx."""

import json

import httpx
import pytest
import pytest_asyncio

from shopagent.main import app
from conftest import text


@pytest_asyncio.fixture
async def client(services):
    app.state.services = services
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.state.services = None


def _event_types(body: str):
    types = []
    for frame in body.split("\n\n"):
        if frame.startswith("data: {"):
            types.append(json.loads(frame[len("data: "):])["type"])
    return types


class TestStatus:

    @pytest.mark.asyncio
    async def test_health_check(self, client):
        response = await client.get("/")

        assert response.status_code == 200
        assert response.json() == {"message": "Shop Agent is alive and running!"}

    @pytest.mark.asyncio
    async def test_services_missing(self):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
            response = await c.get("/v1/agent")

        assert response.status_code == 503


class TestAgentEndpoint:

    @pytest.mark.asyncio
    async def test_lists_tools(self, client):
        response = await client.get("/v1/agent")

        body = response.json()
        assert body["success"] is True
        assert {"ping", "calculate", "delete_file", "search_docs"} <= set(body["data"])

    @pytest.mark.asyncio
    async def test_run_streams_events(self, client, llm):
        llm.rounds = [text("Hello!")]

        response = await client.post("/v1/agent", json={"conversation_id": "c1", "message": "hi"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["cache-control"] == "no-cache"
        assert _event_types(response.text) == ["RUN_STARTED", "TEXT_MESSAGE_CONTENT", "RUN_FINISHED"]
        assert response.text.endswith("data: [DONE]\n\n")

    @pytest.mark.asyncio
    async def test_wrapped_input(self, client, llm, services):
        llm.rounds = [text("Hello!")]

        response = await client.post("/v1/agent", json={"input": {"conversation_id": "c9", "message": "hi"}})

        assert response.status_code == 200
        assert [m.content for m in await services.memory.get_messages("c9")] == ["hi", "Hello!"]

    @pytest.mark.asyncio
    async def test_invalid_top_k(self, client):
        response = await client.post("/v1/agent", json={"message": "hi", "top_k": 0})

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_model_failure_still_terminates_the_stream(self, client, llm):
        from shopagent.core.exceptions import LLMConnectorError

        llm.fail_stream = LLMConnectorError("timeout")

        response = await client.post("/v1/agent", json={"message": "hi"})

        assert _event_types(response.text) == ["RUN_STARTED", "RUN_ERROR"]
        assert response.text.endswith("data: [DONE]\n\n")


class TestKnowledgeBaseEndpoints:

    @pytest.mark.asyncio
    async def test_upsert_requires_source_and_content(self, client):
        response = await client.post("/v1/kb/upsert", json={"content": "text only"})

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "sourceId and content are required"}

    @pytest.mark.asyncio
    async def test_delete_requires_source(self, client):
        response = await client.post("/v1/kb/delete", json={})

        assert response.status_code == 400
        assert response.json()["message"] == "sourceId is required"

    @pytest.mark.asyncio
    async def test_upsert_search_delete(self, client):
        upsert = await client.post("/v1/kb/upsert", json={
            "sourceId": "faq",
            "title": "Shipping",
            "content": "orders ship within two business days",
            "metadata": {"lang": "en"},
        })
        assert upsert.status_code == 200
        assert upsert.json()["data"]["chunk_count"] == 1

        search = await client.post("/v1/kb/search", json={"query": "when do orders ship", "topK": 3})
        hits = search.json()["data"]
        assert hits[0]["source_id"] == "faq"
        assert hits[0]["metadata"] == {"lang": "en"}
        assert "embedding" not in hits[0]

        chunks = await client.get("/v1/kb/chunks")
        assert len(chunks.json()["data"]) == 1

        deleted = await client.post("/v1/kb/delete", json={"sourceId": "faq"})
        assert deleted.json()["data"] == {"removed": 1}
        assert (await client.get("/v1/kb/chunks")).json()["data"] == []
