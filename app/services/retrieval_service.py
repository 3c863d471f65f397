"""
Retrieval: Discovery Engine (Vertex AI Search) over REST, plus result normalization.

Responsibility: Try each configured serving config in order, return the first
successful search as a RetrievalOutcome (titles, public links, clean snippets,
optional summary). Propagates the last error once every candidate has failed.
"""

import logging
from typing import Any, Awaitable, Callable

import httpx
from google.auth import exceptions as google_auth_exceptions

from app.core.config import Settings
from app.core.credentials import get_access_token
from app.core.errors import RetrievalError
from app.schemas.retrieval import RetrievalOutcome, SearchResultItem
from app.services.struct_values import unwrap_struct
from app.services.text_processing import is_placeholder_snippet, normalize_link, strip_markup

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Awaitable[str]]


def build_search_request(query: str, page_size: int, settings: Settings) -> dict[str, Any]:
    """Body for servingConfigs.search. Summary and extractive specs only when enabled."""
    content_search_spec: dict[str, Any] = {"snippetSpec": {"returnSnippet": True}}
    if settings.summary_result_count > 0:
        content_search_spec["summarySpec"] = {
            "summaryResultCount": settings.summary_result_count,
            "includeCitations": False,
        }
    if settings.max_extractive_answers > 0:
        content_search_spec["extractiveContentSpec"] = {
            "maxExtractiveAnswerCount": settings.max_extractive_answers,
        }
    return {
        "query": query,
        "pageSize": page_size,
        "contentSearchSpec": content_search_spec,
    }


def _error_from_response(response: httpx.Response) -> RetrievalError:
    # Google APIs return {"error": {"code": 400, "message": "...", "status": "INVALID_ARGUMENT"}}
    try:
        error = (response.json() or {}).get("error") or {}
    except ValueError:
        error = {}
    if not isinstance(error, dict):
        error = {}
    message = error.get("message") or f"Search failed with HTTP {response.status_code}"
    details = error.get("status") or response.text[:200] or None
    return RetrievalError(message, code=response.status_code, details=details)


class DiscoverySearchClient:
    """Async client for the :search REST method of a serving config."""

    def __init__(
        self,
        settings: Settings,
        token_provider: TokenProvider | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self._token_provider = token_provider or (lambda: get_access_token(settings.google_json_key))
        self._transport = transport

    async def _token(self) -> str:
        try:
            return await self._token_provider()
        except (google_auth_exceptions.RefreshError, google_auth_exceptions.TransportError) as e:
            raise RetrievalError(f"Could not obtain an access token: {e}", code="UNAUTHENTICATED", details=str(e)) from e

    async def search(self, serving_config: str, body: dict[str, Any]) -> dict[str, Any]:
        token = await self._token()
        url = self.settings.search_endpoint(serving_config)
        headers = {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}
        try:
            async with httpx.AsyncClient(timeout=self.settings.retrieval_timeout, transport=self._transport) as client:
                response = await client.post(url, json=body, headers=headers)
        except httpx.HTTPError as e:
            raise RetrievalError(str(e) or "Search request failed", details=type(e).__name__) from e
        if response.status_code != 200:
            raise _error_from_response(response)
        try:
            return response.json()
        except ValueError as e:
            raise RetrievalError(
                "Search returned a non-JSON body", code=response.status_code, details=response.text[:200] or None
            ) from e


def _first_snippet(derived: dict[str, Any], placeholder: str) -> str | None:
    snippets = derived.get("snippets")
    if not isinstance(snippets, list):
        return None
    for entry in snippets:
        raw = entry.get("snippet") if isinstance(entry, dict) else entry
        if not isinstance(raw, str) or is_placeholder_snippet(raw, placeholder):
            continue
        text = strip_markup(raw)
        if text:
            return text
    return None


def _first_extractive_answer(derived: dict[str, Any]) -> str | None:
    answers = derived.get("extractive_answers") or derived.get("extractiveAnswers")
    if not isinstance(answers, list):
        return None
    for entry in answers:
        raw = entry.get("content") if isinstance(entry, dict) else None
        text = strip_markup(raw) if isinstance(raw, str) else ""
        if text:
            return text
    return None


def to_search_result_item(result: dict[str, Any], settings: Settings) -> SearchResultItem:
    """Normalize one raw search hit."""
    document = result.get("document") or {}
    derived = unwrap_struct(document.get("derivedStructData"))
    if not isinstance(derived, dict):
        derived = {}
    document_id = document.get("id") or result.get("id")
    title = derived.get("title") or document_id
    link = derived.get("link") or derived.get("uri")
    return SearchResultItem(
        title=str(title) if title else None,
        url=normalize_link(link if isinstance(link, str) else None, settings.public_storage_base_url),
        snippet=_first_snippet(derived, settings.snippet_placeholder),
        extractive_answer=_first_extractive_answer(derived),
        document_id=document_id,
    )


def parse_search_response(payload: dict[str, Any], resource_path: str, settings: Settings) -> RetrievalOutcome:
    """Turn a :search response into a RetrievalOutcome, keeping the service's ranking."""
    items = [to_search_result_item(r, settings) for r in payload.get("results") or []]
    summary = (payload.get("summary") or {}).get("summaryText")
    summary_text = summary if isinstance(summary, str) and summary.strip() else None
    return RetrievalOutcome(resource_path_used=resource_path, items=items, summary_text=summary_text)


async def retrieve_top_docs(
    query: str,
    settings: Settings,
    k: int | None = None,
    client: DiscoverySearchClient | None = None,
) -> RetrievalOutcome:
    """
    Search each candidate serving config in order and return the first success.

    Raises ConfigurationError when identifiers are missing, and the last
    RetrievalError when every candidate fails.
    """
    page_size = k or settings.page_size
    candidates = settings.serving.candidates()
    client = client or DiscoverySearchClient(settings)
    body = build_search_request(query, page_size, settings)
    logger.info("[retrieval:retrieve_top_docs] IN  query=%r k=%d candidates=%d", query, page_size, len(candidates))

    last_error: RetrievalError | None = None
    for serving_config in candidates:
        try:
            payload = await client.search(serving_config, body)
        except RetrievalError as e:
            logger.warning(
                "[retrieval:retrieve_top_docs] candidate failed serving_config=%s code=%s details=%s",
                serving_config, e.code, e.details,
            )
            last_error = e
            continue
        outcome = parse_search_response(payload, serving_config, settings)
        logger.info(
            "[retrieval:retrieve_top_docs] OUT serving_config=%s results=%d summary=%s first_titles=%s",
            serving_config, len(outcome.items), outcome.summary_text is not None,
            [item.title for item in outcome.items[:3]],
        )
        return outcome

    raise last_error or RetrievalError("Retrieval failed")
