"""
Answer LLM: Gemini on Vertex AI (primary) or OpenAI.

The provider comes from Settings.generation_provider. Both calls are bounded by
Settings.generation_timeout and raise GenerationError on failure; an empty
completion is returned as "" and handled by the caller.
"""

import asyncio
import logging
from functools import lru_cache

from google import genai
from google.genai import types
from openai import AsyncOpenAI

from app.core.config import Settings
from app.core.credentials import get_credentials
from app.core.errors import ConfigurationError, GenerationError

logger = logging.getLogger(__name__)


@lru_cache(maxsize=4)
def _gemini_client(settings: Settings) -> genai.Client:
    if not settings.vertex_project_id:
        raise ConfigurationError("VERTEX_PROJECT_ID must be set for GENERATION_PROVIDER=vertex")
    return genai.Client(
        vertexai=True,
        project=settings.vertex_project_id,
        location=settings.vertex_location,
        credentials=get_credentials(settings.google_json_key),
    )


def response_text(response) -> str:
    """Join every text part of the first candidate."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return ""
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    return "".join(getattr(p, "text", None) or "" for p in parts)


async def _call_gemini(prompt: str, settings: Settings) -> str:
    """Call Gemini generate_content on Vertex AI. Returns generated text."""
    client = _gemini_client(settings)
    response = await client.aio.models.generate_content(
        model=settings.gemini_model,
        contents=[types.Content(role="user", parts=[types.Part(text=prompt)])],
        config=types.GenerateContentConfig(
            temperature=settings.gemini_temperature,
            max_output_tokens=settings.gemini_max_output_tokens,
        ),
    )
    out = response_text(response).strip()
    logger.info("[llm:gemini] OUT response_len=%d", len(out))
    return out


async def _call_openai(prompt: str, settings: Settings) -> str:
    """Call OpenAI chat completions. Returns generated text."""
    if not settings.openai_api_key:
        raise ConfigurationError("OPENAI_API_KEY must be set for GENERATION_PROVIDER=openai")
    async with AsyncOpenAI(api_key=settings.openai_api_key) as client:
        response = await client.chat.completions.create(
            model=settings.openai_llm_model,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=settings.gemini_max_output_tokens,
            temperature=settings.gemini_temperature,
        )
    msg = response.choices[0].message if response.choices else None
    out = ((msg.content if msg else None) or "").strip()
    logger.info("[llm:openai] OUT response_len=%d", len(out))
    return out


async def generate_text(prompt: str, settings: Settings) -> str:
    """
    Generate a completion with the configured provider.

    Raises ConfigurationError for a missing provider setting and GenerationError
    for upstream failures or when the call exceeds generation_timeout.
    """
    provider = settings.generation_provider
    logger.info("[llm] IN  provider=%s model=%s prompt_len=%d", provider, settings.generation_model, len(prompt))
    if provider == "vertex":
        call = _call_gemini
    elif provider == "openai":
        call = _call_openai
    else:
        raise ConfigurationError("No generation provider configured")
    try:
        return await asyncio.wait_for(call(prompt, settings), timeout=settings.generation_timeout)
    except ConfigurationError:
        raise
    except asyncio.TimeoutError as e:
        raise GenerationError(
            f"Generation timed out after {settings.generation_timeout:g}s", code="DEADLINE_EXCEEDED"
        ) from e
    except Exception as e:
        logger.warning("[llm] %s call failed: %s", provider, e)
        raise GenerationError(
            str(e) or "Generation failed",
            code=getattr(e, "code", None) or getattr(e, "status_code", None),
            details=getattr(e, "status", None) or type(e).__name__,
        ) from e
