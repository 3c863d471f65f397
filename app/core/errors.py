"""
Application errors for clean API error handling.

Services raise these; the API layer turns any BackendError into a 500 JSON body
carrying a renderable answer plus whatever code/details the upstream supplied.
"""

from typing import Any


class BackendError(Exception):
    """Base for errors surfaced to the chat client."""

    def __init__(self, message: str, code: Any = None, details: Any = None) -> None:
        self.message = message
        self.code = code
        self.details = details
        super().__init__(message)


class ConfigurationError(BackendError):
    """Raised when required configuration (credentials, resource identifiers) is missing or malformed."""


class RetrievalError(BackendError):
    """Raised when every candidate serving config failed to answer a search."""


class GenerationError(BackendError):
    """Raised when the generative model call fails or times out."""
