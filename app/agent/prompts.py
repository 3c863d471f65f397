"""Prompt templates for source-grounded answers."""

from app.schemas.retrieval import SearchResultItem

RAG_INSTRUCTIONS = """You are a helpful assistant for internal documentation.
Answer the user's question using ONLY the provided sources.
If the user asks for translation, translate accurately and keep the meaning.
If sources do not contain enough information, say what is missing and ask for a more specific term/file name.

Cite sources inline using [1], [2], etc."""


def format_sources(items: list[SearchResultItem]) -> str:
    """Number sources from 1 in retrieval order: title, then URL and excerpt when present."""
    blocks = []
    for i, item in enumerate(items, start=1):
        lines = [f"[{i}] {item.title or 'Document'}"]
        if item.url:
            lines.append(f"URL: {item.url}")
        excerpt = item.snippet or item.extractive_answer
        if excerpt:
            lines.append(f"Excerpt: {excerpt}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def build_rag_prompt(query: str, items: list[SearchResultItem]) -> str:
    sources = format_sources(items) or "(no sources found)"
    return f"{RAG_INSTRUCTIONS}\n\nUser question:\n{query}\n\nSources:\n{sources}".strip()
