from typing import List, Dict, Any, Optional
import logging
import httpx
from ..config import settings

logger = logging.getLogger("portfolio.llm")


class LLMError(RuntimeError):
    """Raised when the chat completion call fails."""


class LLMClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key or settings.openai_api_key.get_secret_value()
        self.model = model or settings.chat_model
        self.base_url = base_url or f"{settings.openai_base_url.rstrip('/')}/chat/completions"
        self.timeout = timeout
        self._transport = transport

    async def chat(
        self,
        system_prompt: str,
        messages: List[Dict[str, Any]],
        temperature: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        Returns the raw message dict from OpenAI, e.g.:
        {
            "role": "assistant",
            "content": "..."
        }
        """
        payload = {
            "model": self.model,
            "messages": [{"role": "system", "content": system_prompt}] + messages,
            "temperature": settings.chat_temperature if temperature is None else temperature,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(
                    self.base_url,
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as exc:
            logger.error("Chat completion failed (%s): %s", type(exc).__name__, exc)
            raise LLMError(f"Chat completion failed: {type(exc).__name__}") from exc
        except ValueError as exc:
            raise LLMError("Chat completion response is not valid JSON.") from exc

        try:
            return data["choices"][0]["message"]
        except (KeyError, IndexError, TypeError) as exc:
            raise LLMError("Chat completion response missing 'choices[0].message'.") from exc
