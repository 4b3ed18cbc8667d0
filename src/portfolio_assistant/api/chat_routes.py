"""
Chat Routes: Portfolio Q&A Endpoint

This module implements the endpoint behind the site's chat window. One
request triggers one sequential chain:

    classify intent -> embed -> vector search -> dedupe/cap
        -> compose prompt -> chat completion -> reply

Error Contract
--------------
- Missing or blank ``message``: 400 ``{"error": "Missing `message`"}``
- Any downstream failure (embedding, store, language model):
  500 ``{"error": "<message>"}``, with the traceback logged server-side
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from .models import ChatRequest, ChatResponse, ErrorResponse
from .dependencies import get_answer_composer
from ..chat.composer import AnswerComposer

logger = logging.getLogger("portfolio.chat")

router = APIRouter(prefix="/api", tags=["chat"])

MISSING_MESSAGE_ERROR = "Missing `message`"


@router.post(
    "/chat",
    response_model=ChatResponse,
    summary="Ask the portfolio assistant a question",
    status_code=status.HTTP_200_OK,
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def chat(
    req: ChatRequest,
    composer: Annotated[AnswerComposer, Depends(get_answer_composer)],
):
    """
    Answer a visitor question from the knowledge base.

    Parameters
    ----------
    req : ChatRequest
        Contains:
        - message: The visitor's question
        - history: Optional prior turns (only the most recent are used)

    Returns
    -------
    ChatResponse
        Reply, cited sources and the routed intent.
    """
    message = (req.message or "").strip()
    if not message:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": MISSING_MESSAGE_ERROR},
        )

    try:
        return await composer.answer(message, req.history or [])
    except Exception as exc:
        logger.exception("Chat route error")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(exc) or "Unknown error"},
        )
