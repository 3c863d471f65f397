"""
API handlers: call services, map results/errors to HTTP.

Responsibility: Bridge HTTP types and services. Every failure becomes a 500 JSON
body with a human-readable 'answer' so the chat widget always has something to
render. Lives in the API layer so services stay free of FastAPI/HTTP types.
"""

import logging

from fastapi.responses import JSONResponse

from app.core.config import Settings
from app.core.errors import BackendError
from app.schemas.chat import ChatResponse, ErrorResponse
from app.schemas.retrieval import DebugRetrieveResponse
from app.services.answer_service import answer_query
from app.services.retrieval_service import retrieve_top_docs

logger = logging.getLogger(__name__)


def error_response(exc: Exception, answer: str = "Backend error") -> JSONResponse:
    """500 response carrying the upstream code/details when the error has them."""
    if isinstance(exc, BackendError):
        body = ErrorResponse(answer=answer, code=exc.code, details=exc.details, message=exc.message)
    else:
        body = ErrorResponse(answer=answer, message=str(exc) or type(exc).__name__)
    return JSONResponse(status_code=500, content=body.model_dump())


async def handle_chat(query: str | None, settings: Settings) -> ChatResponse | JSONResponse:
    try:
        return await answer_query(query, settings)
    except BackendError as e:
        logger.exception("[api:handle_chat] %s code=%s details=%s", type(e).__name__, e.code, e.details)
        return error_response(e)
    except Exception as e:
        logger.exception("Chat failed")
        return error_response(e)


async def handle_debug_retrieve(query: str, settings: Settings) -> DebugRetrieveResponse | JSONResponse:
    try:
        outcome = await retrieve_top_docs(query, settings)
    except BackendError as e:
        logger.exception("[api:handle_debug_retrieve] %s code=%s details=%s", type(e).__name__, e.code, e.details)
        return JSONResponse(status_code=500, content={"code": e.code, "details": e.details, "message": e.message})
    return DebugRetrieveResponse(
        serving_config_used=outcome.resource_path_used,
        count=len(outcome.items),
        summary_text=outcome.summary_text,
        results=outcome.items,
    )
