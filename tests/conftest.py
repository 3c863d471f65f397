"""
Shared fixtures: settings built in code (no env, no credentials) and raw
Discovery Engine payloads shaped like the REST and tagged-struct encodings.
"""

from dataclasses import replace

import pytest

from app.core.config import ServingConfigSettings, Settings


@pytest.fixture
def settings() -> Settings:
    return Settings(
        google_json_key="{}",
        serving=ServingConfigSettings(project="28062079972", data_store_id="docs_store"),
        generation_provider="none",
    )


@pytest.fixture
def model_settings(settings: Settings) -> Settings:
    return replace(settings, generation_provider="vertex", vertex_project_id="my-project")


@pytest.fixture
def contact_change_log_payload() -> dict:
    """One hit, no snippet, no summary."""
    return {
        "results": [
            {
                "id": "doc-1",
                "document": {
                    "id": "doc-1",
                    "derivedStructData": {
                        "title": "Contact Change Log.docx",
                        "link": "gs://bucket1/ccl.docx",
                    },
                },
            }
        ]
    }


@pytest.fixture
def tagged_payload() -> dict:
    """Hits whose derivedStructData uses the tagged Struct encoding."""
    return {
        "results": [
            {
                "document": {
                    "id": "doc-a",
                    "derivedStructData": {
                        "fields": {
                            "title": {"stringValue": "Onboarding Guide.pdf"},
                            "link": {"stringValue": "gs://bucket1/guides/onboarding guide.pdf"},
                            "snippets": {
                                "listValue": {
                                    "values": [
                                        {
                                            "structValue": {
                                                "fields": {
                                                    "snippet": {"stringValue": "No snippet is available for this page."},
                                                    "snippet_status": {"stringValue": "NO_SNIPPET_AVAILABLE"},
                                                }
                                            }
                                        },
                                        {
                                            "structValue": {
                                                "fields": {
                                                    "snippet": {"stringValue": "New staff get a <b>laptop</b> on day one."},
                                                    "snippet_status": {"stringValue": "SUCCESS"},
                                                }
                                            }
                                        },
                                    ]
                                }
                            },
                        }
                    },
                }
            },
            {
                "document": {
                    "id": "doc-b",
                    "derivedStructData": {"fields": {"title": {"stringValue": "Untracked notes"}}},
                }
            },
        ]
    }
