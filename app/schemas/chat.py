"""Schemas for the chat endpoint."""

from typing import Any

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Request body for POST /chat."""

    query: str = Field("", description="User question. Blank queries get a prompt-for-input answer.")


class SourceLink(BaseModel):
    title: str
    url: str = Field(..., min_length=1)


class ChatResponse(BaseModel):
    """Response for POST /chat."""

    answer: str = Field(..., min_length=1, description="Answer text; never empty.")
    sources: list[SourceLink] = Field(default_factory=list, description="Linkable sources in relevance order.")
    links: list[SourceLink] = Field(default_factory=list, description="Same list as sources, for widgets that read 'links'.")
    debug: dict[str, Any] | None = Field(None, description="Serving config used, result count, answer source.")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "answer": "The Contact Change Log records every edit to a contact [1].",
                    "sources": [
                        {"title": "Contact Change Log.docx", "url": "https://storage.googleapis.com/bucket1/ccl.docx"}
                    ],
                    "links": [
                        {"title": "Contact Change Log.docx", "url": "https://storage.googleapis.com/bucket1/ccl.docx"}
                    ],
                    "debug": {"serving_config_used": "projects/.../servingConfigs/default_search", "retrieved_count": 1},
                }
            ]
        }
    }


class ErrorResponse(BaseModel):
    """500 body. 'answer' is always present so the UI has something to render."""

    answer: str = "Backend error"
    code: Any = None
    details: Any = None
    message: str
