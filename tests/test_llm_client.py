import json

import httpx
import pytest

from portfolio_assistant.llm.client import LLMClient, LLMError


async def test_chat_sends_system_prompt_and_returns_message():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["payload"] = json.loads(request.content)
        seen["auth"] = request.headers["Authorization"]
        return httpx.Response(
            200,
            json={"choices": [{"message": {"role": "assistant", "content": "Hi there"}}]},
        )

    client = LLMClient(api_key="sk-test", model="gpt-4.1-mini", transport=httpx.MockTransport(handler))

    msg = await client.chat("SYSTEM", [{"role": "user", "content": "hello"}])

    assert msg == {"role": "assistant", "content": "Hi there"}
    assert seen["auth"] == "Bearer sk-test"
    assert seen["payload"]["model"] == "gpt-4.1-mini"
    assert seen["payload"]["temperature"] == 0.3
    assert seen["payload"]["messages"] == [
        {"role": "system", "content": "SYSTEM"},
        {"role": "user", "content": "hello"},
    ]


async def test_http_failure_raises_llm_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(500, json={}))
    client = LLMClient(api_key="sk-test", transport=transport)

    with pytest.raises(LLMError, match="HTTPStatusError"):
        await client.chat("SYSTEM", [])


async def test_unexpected_payload_raises_llm_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"choices": []}))
    client = LLMClient(api_key="sk-test", transport=transport)

    with pytest.raises(LLMError, match="choices"):
        await client.chat("SYSTEM", [])


async def test_non_json_body_raises_llm_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text="upstream timeout"))
    client = LLMClient(api_key="sk-test", transport=transport)

    with pytest.raises(LLMError, match="not valid JSON"):
        await client.chat("SYSTEM", [])
