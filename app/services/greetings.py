"""
Greeting pre-filter: answer small talk without calling search or the LLM.
"""

from app.services.text_processing import normalize_query

GREETING_PHRASES: frozenset[str] = frozenset({
    "hi",
    "hii",
    "hello",
    "hey",
    "hey there",
    "hi there",
    "hello there",
    "hiya",
    "howdy",
    "greetings",
    "yo",
    "good morning",
    "good afternoon",
    "good evening",
})

GREETING_REPLY = "Hello! Ask me about a document, process or file name and I'll look it up."


def is_greeting(query: str | None) -> bool:
    """Case- and punctuation-insensitive match against GREETING_PHRASES."""
    return normalize_query(query) in GREETING_PHRASES


def greeting_reply(query: str | None) -> str | None:
    """Canned reply for a greeting, else None."""
    return GREETING_REPLY if is_greeting(query) else None
