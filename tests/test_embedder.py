import json

import httpx
import pytest

from portfolio_assistant.config import settings
from portfolio_assistant.embeddings.embedder import (
    Embedder,
    EmbeddingDimensionError,
    EmbeddingError,
)


def _embedding_transport(dim, calls=None, status_code=200):
    def handler(request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        if calls is not None:
            calls.append(payload)
        if status_code != 200:
            return httpx.Response(status_code, json={"error": {"message": "nope"}})
        data = [
            {"embedding": [float(i)] * dim, "index": i}
            for i, _ in enumerate(payload["input"])
        ]
        return httpx.Response(200, json={"data": data})

    return httpx.MockTransport(handler)


def _embedder(transport, dimensions=4):
    return Embedder(
        api_key="sk-test",
        model="text-embedding-3-small",
        dimensions=dimensions,
        base_url="https://example.test/v1/embeddings",
        transport=transport,
    )


async def test_embed_one_returns_vector():
    calls = []
    embedder = _embedder(_embedding_transport(4, calls))

    vector = await embedder.embed_one("hello")

    assert vector == [0.0, 0.0, 0.0, 0.0]
    assert calls == [{"model": "text-embedding-3-small", "input": ["hello"]}]


async def test_embed_batches_inputs():
    calls = []
    embedder = _embedder(_embedding_transport(4, calls))

    vectors = await embedder.embed(["a", "b", "c"], batch_size=2)

    assert len(vectors) == 3
    assert [len(c["input"]) for c in calls] == [2, 1]


async def test_empty_input_makes_no_request():
    calls = []
    embedder = _embedder(_embedding_transport(4, calls))

    assert await embedder.embed([]) == []
    assert calls == []


async def test_dimension_mismatch_raises():
    embedder = _embedder(_embedding_transport(3), dimensions=1536)

    with pytest.raises(EmbeddingDimensionError, match="got 3, expected 1536"):
        await embedder.embed_one("hello")


async def test_http_error_wrapped():
    embedder = _embedder(_embedding_transport(4, status_code=429))

    with pytest.raises(EmbeddingError, match="HTTPStatusError"):
        await embedder.embed_one("hello")


def test_malformed_response_rejected():
    with pytest.raises(EmbeddingError, match="missing 'data'"):
        Embedder._extract_embeddings({"object": "list"})

    with pytest.raises(EmbeddingError, match="Malformed embedding record"):
        Embedder._extract_embeddings({"data": [{"vector": [1.0]}]})

    with pytest.raises(EmbeddingError, match="must be float list"):
        Embedder._extract_embeddings({"data": [{"embedding": ["x"]}]})


def test_defaults_from_settings():
    embedder = Embedder()

    assert embedder.api_key == settings.openai_api_key.get_secret_value()
    assert embedder.dimensions == settings.embedding_dim
    assert embedder.base_url == f"{settings.openai_base_url.rstrip('/')}/embeddings"


async def test_non_json_body_wrapped():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>gateway</html>"))
    embedder = _embedder(transport)

    with pytest.raises(EmbeddingError, match="not valid JSON"):
        await embedder.embed_one("hello")
