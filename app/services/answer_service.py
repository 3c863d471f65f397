"""
Answer service: greeting filter → retrieval → answer synthesis.

Responsibility: Turn one user query into a ChatResponse. The answer cascade is
summary text, then the generative model (when configured), then a deterministic
answer built from extractive answers, snippets or titles. Called by the API; no
HTTP here.
"""

import logging
from typing import Awaitable, Callable

from app.agent.llm import generate_text
from app.agent.prompts import build_rag_prompt
from app.core.config import Settings
from app.schemas.chat import ChatResponse, SourceLink
from app.schemas.retrieval import RetrievalOutcome, SearchResultItem
from app.services.greetings import greeting_reply
from app.services.retrieval_service import retrieve_top_docs

logger = logging.getLogger(__name__)

EMPTY_QUERY_ANSWER = "Ask me something."
NO_RESPONSE_ANSWER = "No response."
NO_DOCUMENTS_ANSWER = "I couldn't find any documents matching your question."

Generator = Callable[[str, Settings], Awaitable[str]]


def build_links(items: list[SearchResultItem]) -> list[SourceLink]:
    """Linkable sources in retrieval order; items without a URL are left out."""
    return [SourceLink(title=item.title or "Document", url=item.url) for item in items if item.url]


def fallback_answer(items: list[SearchResultItem]) -> str:
    """Deterministic answer when there is no summary and no model."""
    for item in items:
        if item.extractive_answer:
            return item.extractive_answer
    for item in items:
        if item.snippet:
            return f'Here is what I found in "{item.title or "Document"}":\n\n{item.snippet}'
    titles = [item.title for item in items if item.title]
    if titles:
        return "I found these documents that may help:\n" + "\n".join(f"- {t}" for t in titles)
    return NO_DOCUMENTS_ANSWER


async def synthesize_answer(
    query: str,
    outcome: RetrievalOutcome,
    settings: Settings,
    generator: Generator | None = None,
) -> tuple[str, str]:
    """
    Pick the answer text for a retrieval outcome.

    Returns (answer, answer_source) where answer_source is "summary", "model"
    or "fallback".
    """
    if outcome.summary_text:
        return outcome.summary_text, "summary"
    if settings.generation_enabled:
        prompt = build_rag_prompt(query, outcome.items)
        text = await (generator or generate_text)(prompt, settings)
        return (text or NO_RESPONSE_ANSWER), "model"
    return fallback_answer(outcome.items), "fallback"


async def answer_query(query: str | None, settings: Settings) -> ChatResponse:
    """Full chat pipeline for one request. Errors propagate as BackendError subclasses."""
    query = (query or "").strip()
    logger.info("[answer:answer_query] IN  query=%r", query)
    if not query:
        return ChatResponse(answer=EMPTY_QUERY_ANSWER)

    if settings.greeting_filter_enabled:
        canned = greeting_reply(query)
        if canned:
            logger.info("[answer:answer_query] OUT greeting short-circuit")
            return ChatResponse(answer=canned)

    outcome = await retrieve_top_docs(query, settings)
    answer, answer_source = await synthesize_answer(query, outcome, settings)
    links = build_links(outcome.items)
    logger.info(
        "[answer:answer_query] OUT answer_source=%s answer_len=%d links=%d",
        answer_source, len(answer), len(links),
    )
    return ChatResponse(
        answer=answer,
        sources=links,
        links=links,
        debug={
            "serving_config_used": outcome.resource_path_used,
            "retrieved_count": len(outcome.items),
            "answer_source": answer_source,
        },
    )
