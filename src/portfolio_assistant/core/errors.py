"""
Global Error Handling

This module defines the application-wide exception handler for the
portfolio assistant API.

Design Goals
------------
- Never leak internal exception details from unexpected failures
- Always return the same ``{"error": ...}`` body the chat client expects
- Log full stack traces internally for debugging
"""

from __future__ import annotations

import logging
from typing import Dict, Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger("portfolio.errors")


# ---------------------------------------------------------------------
# Public Exception Handlers
# ---------------------------------------------------------------------

async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Catch-all handler for uncaught exceptions.

    Registered with FastAPI as the final safety net for any exception not
    handled by a route (the chat route handles its own failures).

    Parameters
    ----------
    request : Request
        The incoming HTTP request that triggered the exception.

    exc : Exception
        The uncaught exception instance.

    Returns
    -------
    JSONResponse
        A JSON 500 response with a minimal error payload.
    """

    # Log full traceback internally (never returned to client)
    logger.exception(
        "Unhandled exception during request: %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )

    payload: Dict[str, Any] = {
        "error": "Internal server error",
    }

    return JSONResponse(
        status_code=500,
        content=payload,
    )


async def request_validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """
    Report unparseable request bodies with the ``{"error": ...}`` body.

    Field-level problems in the chat payload are absorbed by ChatRequest;
    this only fires for bodies that are not a JSON object at all.
    """
    logger.info(
        "Rejected request body: %s %s (%d errors)",
        request.method,
        request.url.path,
        len(exc.errors()),
    )

    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request body"},
    )
