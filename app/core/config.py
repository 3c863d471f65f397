"""
Application configuration (env, settings, constants).

Responsibility: Centralize config loading, environment variables, and app-wide
constants. Settings are read once into an immutable value and passed to the
retrieval and generation services.
"""

import json
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

from dotenv import load_dotenv

from app.core.errors import ConfigurationError

load_dotenv()

# Discovery Engine (Vertex AI Search)
DISCOVERY_ENGINE_HOST: str = "discoveryengine.googleapis.com"
DEFAULT_SERVING_CONFIG_IDS: tuple[str, ...] = ("default_search", "default_serving_config")
ADDRESSING_MODES: frozenset[str] = frozenset({"data_store", "engine"})

# gs:// links are rewritten onto this base
GCS_SCHEME: str = "gs://"
PUBLIC_STORAGE_BASE_URL: str = "https://storage.googleapis.com/"

# Snippets containing this text are placeholders, not content
SNIPPET_PLACEHOLDER: str = "No snippet is available"

# Generation
GENERATION_PROVIDERS: frozenset[str] = frozenset({"vertex", "openai", "none"})
GOOGLE_CLOUD_SCOPE: str = "https://www.googleapis.com/auth/cloud-platform"

# API timeouts (seconds)
RETRIEVAL_TIMEOUT: float = 15.0
GENERATION_TIMEOUT: float = 60.0


def _env(name: str, default: str = "") -> str:
    return (os.getenv(name, default) or "").strip()


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e


def _env_float(name: str, default: float) -> float:
    raw = _env(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e


def _env_bool(name: str, default: bool) -> bool:
    raw = _env(name).lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = _env(name)
    if not raw:
        return default
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def load_service_account_info(raw: str) -> dict[str, Any]:
    """
    Parse a service-account JSON blob stored in a single env var.

    Keys pasted into dashboards usually carry the private key with literal
    backslash-n sequences; those are turned back into real newlines.
    """
    if not raw or not raw.strip():
        raise ConfigurationError("Missing GOOGLE_JSON_KEY")
    try:
        info = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"GOOGLE_JSON_KEY is not valid JSON: {e.msg}") from e
    if not isinstance(info, dict):
        raise ConfigurationError("GOOGLE_JSON_KEY must be a JSON object")
    private_key = info.get("private_key")
    if isinstance(private_key, str):
        info["private_key"] = private_key.replace("\\n", "\n")
    return info


@dataclass(frozen=True)
class ServingConfigSettings:
    """Where to search: addressing mode, identifiers and serving-config candidates."""

    project: str = ""
    location: str = "global"
    collection_id: str = "default_collection"
    addressing_mode: str = "data_store"
    data_store_id: str = ""
    engine_id: str = ""
    serving_config_ids: tuple[str, ...] = DEFAULT_SERVING_CONFIG_IDS
    # Fully resolved path; when set it is the only candidate
    serving_config: str = ""
    # Fully resolved engine path tried after the composed candidates
    engine_serving_config: str = ""

    def parent_path(self) -> str:
        """Return the data-store or engine resource the serving configs live under."""
        if not self.project:
            raise ConfigurationError("DE_PROJECT_NUMBER or DE_PROJECT_ID must be set")
        if self.addressing_mode not in ADDRESSING_MODES:
            raise ConfigurationError(
                f"DE_ADDRESSING_MODE must be one of {sorted(ADDRESSING_MODES)}, got {self.addressing_mode!r}"
            )
        base = f"projects/{self.project}/locations/{self.location}/collections/{self.collection_id}"
        if self.addressing_mode == "engine":
            if not self.engine_id:
                raise ConfigurationError("DE_ENGINE_ID must be set when DE_ADDRESSING_MODE=engine")
            return f"{base}/engines/{self.engine_id}"
        if not self.data_store_id:
            raise ConfigurationError("DE_DATA_STORE_ID must be set when DE_ADDRESSING_MODE=data_store")
        return f"{base}/dataStores/{self.data_store_id}"

    def serving_config_path(self, serving_config_id: str) -> str:
        return f"{self.parent_path()}/servingConfigs/{serving_config_id}"

    def candidates(self) -> list[str]:
        """Ordered resource paths to try; the first one that answers wins."""
        if self.serving_config:
            return [self.serving_config]
        paths = [self.serving_config_path(sid) for sid in self.serving_config_ids]
        if self.engine_serving_config and self.engine_serving_config not in paths:
            paths.append(self.engine_serving_config)
        if not paths:
            raise ConfigurationError("No serving config candidates configured")
        return paths


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, built once at startup."""

    google_json_key: str = field(default="", repr=False)
    serving: ServingConfigSettings = field(default_factory=ServingConfigSettings)
    api_version: str = "v1beta"
    page_size: int = 5
    summary_result_count: int = 0
    max_extractive_answers: int = 0
    snippet_placeholder: str = SNIPPET_PLACEHOLDER
    public_storage_base_url: str = PUBLIC_STORAGE_BASE_URL
    retrieval_timeout: float = RETRIEVAL_TIMEOUT

    generation_provider: str = "none"
    vertex_project_id: str = ""
    vertex_location: str = "us-central1"
    gemini_model: str = "gemini-2.0-flash"
    gemini_temperature: float = 0.2
    gemini_max_output_tokens: int = 700
    openai_api_key: str = field(default="", repr=False)
    openai_llm_model: str = "gpt-4o-mini"
    generation_timeout: float = GENERATION_TIMEOUT

    allowed_origin: str = "*"
    greeting_filter_enabled: bool = True
    debug_endpoints_enabled: bool = True
    log_level: str = "INFO"

    @property
    def generation_enabled(self) -> bool:
        return self.generation_provider != "none"

    @property
    def generation_model(self) -> str:
        if self.generation_provider == "vertex":
            return self.gemini_model
        if self.generation_provider == "openai":
            return self.openai_llm_model
        return ""

    def search_endpoint(self, serving_config: str) -> str:
        """REST URL of the :search method for a serving config."""
        location = self.serving.location
        host = DISCOVERY_ENGINE_HOST if location == "global" else f"{location}-{DISCOVERY_ENGINE_HOST}"
        return f"https://{host}/{self.api_version}/{serving_config}:search"

    @classmethod
    def from_env(cls) -> "Settings":
        serving = ServingConfigSettings(
            project=_env("DE_PROJECT_NUMBER") or _env("DE_PROJECT_ID"),
            location=_env("DE_LOCATION", "global") or "global",
            collection_id=_env("DE_COLLECTION_ID", "default_collection") or "default_collection",
            addressing_mode=(_env("DE_ADDRESSING_MODE", "data_store") or "data_store").lower(),
            data_store_id=_env("DE_DATA_STORE_ID"),
            engine_id=_env("DE_ENGINE_ID"),
            serving_config_ids=_env_list("DE_SERVING_CONFIG_IDS", DEFAULT_SERVING_CONFIG_IDS),
            serving_config=_env("DE_SERVING_CONFIG"),
            engine_serving_config=_env("DE_ENGINE_SERVING_CONFIG"),
        )

        vertex_project_id = _env("VERTEX_PROJECT_ID")
        openai_api_key = _env("OPENAI_API_KEY")
        provider = _env("GENERATION_PROVIDER").lower()
        if not provider or provider == "auto":
            if vertex_project_id:
                provider = "vertex"
            elif openai_api_key:
                provider = "openai"
            else:
                provider = "none"
        if provider not in GENERATION_PROVIDERS:
            raise ConfigurationError(
                f"GENERATION_PROVIDER must be one of {sorted(GENERATION_PROVIDERS)}, got {provider!r}"
            )

        return cls(
            google_json_key=os.getenv("GOOGLE_JSON_KEY", "") or "",
            serving=serving,
            api_version=_env("DE_API_VERSION", "v1beta") or "v1beta",
            page_size=_env_int("DE_PAGE_SIZE", 5),
            summary_result_count=_env_int("DE_SUMMARY_RESULT_COUNT", 0),
            max_extractive_answers=_env_int("DE_MAX_EXTRACTIVE_ANSWERS", 0),
            snippet_placeholder=_env("SNIPPET_PLACEHOLDER", SNIPPET_PLACEHOLDER),
            public_storage_base_url=_env("PUBLIC_STORAGE_BASE_URL", PUBLIC_STORAGE_BASE_URL)
            or PUBLIC_STORAGE_BASE_URL,
            retrieval_timeout=_env_float("RETRIEVAL_TIMEOUT_SECONDS", RETRIEVAL_TIMEOUT),
            generation_provider=provider,
            vertex_project_id=vertex_project_id,
            vertex_location=_env("VERTEX_LOCATION", "us-central1") or "us-central1",
            gemini_model=_env("GEMINI_MODEL", "gemini-2.0-flash") or "gemini-2.0-flash",
            gemini_temperature=_env_float("GEMINI_TEMPERATURE", 0.2),
            gemini_max_output_tokens=_env_int("GEMINI_MAX_OUTPUT_TOKENS", 700),
            openai_api_key=openai_api_key,
            openai_llm_model=_env("OPENAI_LLM_MODEL", "gpt-4o-mini") or "gpt-4o-mini",
            generation_timeout=_env_float("GENERATION_TIMEOUT_SECONDS", GENERATION_TIMEOUT),
            allowed_origin=_env("ALLOWED_ORIGIN", "*") or "*",
            greeting_filter_enabled=_env_bool("GREETING_FILTER_ENABLED", True),
            debug_endpoints_enabled=_env_bool("DEBUG_ENDPOINTS_ENABLED", True),
            log_level=(_env("LOG_LEVEL", "INFO") or "INFO").upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Settings for this process; read from the environment on first use."""
    return Settings.from_env()
