"""Schemas for normalized search results."""

from pydantic import BaseModel, Field


class SearchResultItem(BaseModel):
    """One search hit after unwrapping, link normalization and snippet cleanup."""

    title: str | None = Field(None, description="Document title, or the document id when the title is missing.")
    url: str | None = Field(None, description="Public HTTPS link (gs:// rewritten).")
    snippet: str | None = Field(None, description="First usable snippet, markup stripped.")
    extractive_answer: str | None = Field(None, description="First extractive answer span, markup stripped.")
    document_id: str | None = Field(None, description="Discovery Engine document id.")


class RetrievalOutcome(BaseModel):
    """Search results in relevance order plus the serving config that produced them."""

    resource_path_used: str
    items: list[SearchResultItem] = Field(default_factory=list)
    summary_text: str | None = None


class DebugRetrieveResponse(BaseModel):
    """Response for GET /debug-retrieve."""

    serving_config_used: str
    count: int
    summary_text: str | None = None
    results: list[SearchResultItem]


class ConfigsResponse(BaseModel):
    """Response for GET /configs. Never carries credentials."""

    addressing_mode: str
    location: str
    api_version: str
    candidates: list[str]
    generation_provider: str
    generation_model: str
