from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..chat.composer import AnswerComposer
from ..db import KnowledgeStore, get_async_session
from ..embeddings.embedder import Embedder
from ..llm.client import LLMClient
from ..retrieval.retriever import Retriever


@lru_cache
def get_llm_client() -> LLMClient:
    return LLMClient()


@lru_cache
def get_embedder() -> Embedder:
    return Embedder()


async def get_knowledge_store(
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> KnowledgeStore:
    return KnowledgeStore(session)


def get_answer_composer(
    store: Annotated[KnowledgeStore, Depends(get_knowledge_store)],
    embedder: Annotated[Embedder, Depends(get_embedder)],
    llm: Annotated[LLMClient, Depends(get_llm_client)],
) -> AnswerComposer:
    return AnswerComposer(retriever=Retriever(embedder, store), llm=llm)
