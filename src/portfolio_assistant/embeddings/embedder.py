"""
Embedding Client

This module implements the embedding client used by both ingestion and
retrieval. It calls the OpenAI embeddings API (or any compatible provider)
and is responsible for:

- Batching of text inputs
- Network and transport error isolation
- Strict response validation
- Enforcing the vector dimensionality expected by the knowledge store

A dimensionality mismatch means the embedding model and the store schema
are wired inconsistently, so it is raised immediately and never padded or
truncated.
"""

from __future__ import annotations

from typing import List, Sequence, Optional
import logging
import httpx

from ..config import settings

logger = logging.getLogger("portfolio.embedder")


class EmbeddingError(RuntimeError):
    """Raised when embedding generation fails."""


class EmbeddingDimensionError(EmbeddingError):
    """Raised when the provider returns vectors of an unexpected length."""


class Embedder:
    """
    Asynchronous embedding generator.

    This class performs no caching and holds no connection state; a new
    HTTP client is opened per call.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        dimensions: Optional[int] = None,
        base_url: Optional[str] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize an Embedder.

        Parameters
        ----------
        api_key : Optional[str]
            Optional override for OpenAI API key. Defaults to settings.openai_api_key.

        model : Optional[str]
            Optional override for embedding model. Defaults to settings.embedding_model.

        dimensions : Optional[int]
            Expected vector length. Defaults to settings.embedding_dim.

        base_url : Optional[str]
            Embeddings endpoint. Defaults to ``{settings.openai_base_url}/embeddings``.

        timeout : float
            HTTP timeout for each request.

        transport : Optional[httpx.AsyncBaseTransport]
            Custom transport, mainly for tests.
        """
        self.api_key = api_key or settings.openai_api_key.get_secret_value()
        self.model = model or settings.embedding_model
        self.dimensions = dimensions or settings.embedding_dim
        self.base_url = base_url or f"{settings.openai_base_url.rstrip('/')}/embeddings"
        self.timeout = timeout
        self._transport = transport

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def embed(
        self,
        texts: Sequence[str],
        batch_size: int = 20,
    ) -> List[List[float]]:
        """
        Generate embeddings for a sequence of input texts.

        Parameters
        ----------
        texts : Sequence[str]
            List or sequence of input text strings.

        batch_size : int
            Maximum batch size per request.

        Returns
        -------
        List[List[float]]
            One embedding per input text, in input order.

        Raises
        ------
        EmbeddingError
            If any batch fails or the response is malformed.

        EmbeddingDimensionError
            If any vector length differs from ``self.dimensions``.
        """
        if not texts:
            return []

        all_embeddings: List[List[float]] = []
        headers = {"Authorization": f"Bearer {self.api_key}"}

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            for start in range(0, len(texts), batch_size):
                batch = list(texts[start : start + batch_size])
                payload = {
                    "model": self.model,
                    "input": batch,
                }

                try:
                    response = await client.post(
                        self.base_url,
                        json=payload,
                        headers=headers,
                    )
                    response.raise_for_status()
                    data = response.json()
                except httpx.HTTPError as exc:
                    logger.error(
                        "Embedding request failed (%s): batch size=%d, error=%s",
                        type(exc).__name__,
                        len(batch),
                        str(exc),
                    )
                    raise EmbeddingError(
                        f"Embedding generation failed: {type(exc).__name__}"
                    ) from exc
                except ValueError as exc:
                    raise EmbeddingError("Embedding response is not valid JSON.") from exc

                embeddings = self._extract_embeddings(data)
                if len(embeddings) != len(batch):
                    raise EmbeddingError(
                        f"Embedding count mismatch: sent {len(batch)}, got {len(embeddings)}."
                    )
                for vector in embeddings:
                    self._check_dimensions(vector)
                all_embeddings.extend(embeddings)

        return all_embeddings

    async def embed_one(self, text: str) -> List[float]:
        """
        Embed a single text and return its vector.
        """
        embeddings = await self.embed([text])
        return embeddings[0]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _check_dimensions(self, vector: List[float]) -> None:
        if len(vector) != self.dimensions:
            raise EmbeddingDimensionError(
                f"Embedding dimension mismatch: got {len(vector)}, expected {self.dimensions}. "
                "Update the store's vector dimension or change the embedding model."
            )

    @staticmethod
    def _extract_embeddings(data: dict) -> List[List[float]]:
        """
        Parse and validate embedding output format.

        OpenAI returns:
            { "data": [ {"embedding": [...]}, ... ] }

        Raises
        ------
        EmbeddingError
            If the API returns unexpected structure.
        """
        if "data" not in data:
            raise EmbeddingError("Embedding response missing 'data' field.")

        records = data["data"]
        if not isinstance(records, list):
            raise EmbeddingError("'data' field must be a list.")

        embeddings: List[List[float]] = []

        for index, record in enumerate(records):
            if not isinstance(record, dict) or "embedding" not in record:
                raise EmbeddingError(
                    f"Malformed embedding record at index {index}: {record!r}"
                )

            emb = record["embedding"]
            if not isinstance(emb, list) or not all(
                isinstance(x, (float, int)) for x in emb
            ):
                raise EmbeddingError(
                    f"Invalid embedding vector at index {index}: must be float list."
                )

            embeddings.append([float(x) for x in emb])

        return embeddings
