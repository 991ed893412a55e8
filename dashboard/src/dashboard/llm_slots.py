"""LLM slot names and client bootstrap."""

from __future__ import annotations

import httpx
from moonmarket.config import Settings
from moonmarket.services.llm_client import LLMClient, LLMSlotConfig

INSIGHT_SLOT = "insight"
HOROSCOPE_SLOT = "horoscope"
PREDICTION_SLOT = "prediction"
PATTERNS_SLOT = "patterns"
CHAT_SLOT = "chat"

DEFAULT_LLM_SLOTS = (INSIGHT_SLOT, HOROSCOPE_SLOT, PREDICTION_SLOT, PATTERNS_SLOT, CHAT_SLOT)


def build_llm_client(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> LLMClient:
    """LLM client with every dashboard slot configured from settings."""
    client = LLMClient(timeout=settings.http_timeout_seconds, transport=transport)
    for slot in DEFAULT_LLM_SLOTS:
        client.configure_slot(LLMSlotConfig.from_settings(slot, settings))
    return client
