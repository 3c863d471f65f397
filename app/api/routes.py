"""
API route aggregator: register endpoints; no logic — only delegate to handlers.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from app.api.handlers import error_response, handle_chat, handle_debug_retrieve
from app.core.config import Settings, get_settings
from app.core.errors import ConfigurationError
from app.schemas.chat import ChatRequest, ChatResponse, ErrorResponse
from app.schemas.retrieval import ConfigsResponse, DebugRetrieveResponse

logger = logging.getLogger(__name__)
router = APIRouter()


def _require_debug(settings: Settings) -> None:
    if not settings.debug_endpoints_enabled:
        raise HTTPException(status_code=404, detail="Not Found")


# --- System ---

@router.get("/", tags=["system"], response_class=PlainTextResponse)
def root() -> str:
    return "Backend is running!"


@router.get("/health", tags=["system"])
def health():
    return {"ok": True}


# --- Chat ---

@router.post(
    "/chat",
    response_model=ChatResponse,
    response_model_exclude_none=True,
    responses={500: {"model": ErrorResponse}},
    tags=["chat"],
    summary="Answer a question from the document index",
    description="Search the configured serving config, then answer from the summary, the LLM, or the best snippet. Blank queries get 'Ask me something.'; greetings get a canned reply. 500 with {answer, code, details, message} on failure.",
)
async def post_chat(body: ChatRequest, settings: Settings = Depends(get_settings)):
    logger.info("[api:post_chat] IN  query=%r", body.query)
    return await handle_chat(body.query, settings)


# --- Debug (development only) ---

@router.get(
    "/debug-retrieve",
    response_model=DebugRetrieveResponse,
    tags=["debug"],
    summary="Run retrieval only",
    description="Returns the serving config that answered and the normalized results, e.g. /debug-retrieve?q=Contact%20Change%20Log",
)
async def debug_retrieve(q: str = "contact", settings: Settings = Depends(get_settings)):
    _require_debug(settings)
    query = q.strip() or "contact"
    return await handle_debug_retrieve(query, settings)


@router.get(
    "/configs",
    response_model=ConfigsResponse,
    tags=["debug"],
    summary="Show resolved serving-config candidates",
)
def get_configs(settings: Settings = Depends(get_settings)):
    _require_debug(settings)
    try:
        candidates = settings.serving.candidates()
    except ConfigurationError as e:
        return error_response(e)
    return ConfigsResponse(
        addressing_mode=settings.serving.addressing_mode,
        location=settings.serving.location,
        api_version=settings.api_version,
        candidates=candidates,
        generation_provider=settings.generation_provider,
        generation_model=settings.generation_model,
    )
