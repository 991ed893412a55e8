"""OpenAI-compatible chat completions client with slot-based configuration."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx

from moonmarket.config import Settings

logger = logging.getLogger(__name__)


@dataclass
class LLMSlotConfig:
    """Configuration for a single LLM slot."""

    slot: str
    api_endpoint: str
    model_id: str
    api_key: str
    max_tokens: int | None = None
    temperature: float = 0.7

    @classmethod
    def from_settings(cls, slot: str, settings: Settings) -> LLMSlotConfig:
        """Build a slot from the environment-level LLM settings."""
        return cls(
            slot=slot,
            api_endpoint=settings.llm_api_endpoint,
            model_id=settings.llm_model,
            api_key=settings.llm_api_key,
            max_tokens=settings.llm_max_tokens,
            temperature=settings.llm_temperature,
        )


class LLMClient:
    """Vendor-agnostic LLM client for OpenAI-compatible chat APIs."""

    def __init__(
        self,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)
        self._slots: dict[str, LLMSlotConfig] = {}

    def configure_slot(self, config: LLMSlotConfig) -> None:
        """Register a slot configuration."""
        self._slots[config.slot] = config

    def get_slot(self, slot: str) -> LLMSlotConfig:
        """Get configuration for a slot."""
        if slot not in self._slots:
            raise ValueError(f"LLM slot '{slot}' not configured")
        return self._slots[slot]

    @staticmethod
    def _raise_for_status_with_context(response: httpx.Response) -> None:
        try:
            response.raise_for_status()
            return
        except httpx.HTTPStatusError as exc:
            detail = response.text.strip()
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict):
                if isinstance(body.get("error"), dict):
                    detail = body["error"].get("message") or body["error"].get("code") or detail
                elif body.get("error"):
                    detail = str(body["error"])
                elif body.get("message"):
                    detail = str(body["message"])
            if len(detail) > 400:
                detail = detail[:400]
            raise RuntimeError(
                f"LLM API request failed ({response.status_code}) at {response.request.url}: {detail}"
            ) from exc

    @staticmethod
    def _extract_content(data: Any, url: str) -> str | None:
        """Pull the first choice's message text; None when there are no choices.

        Raises:
            RuntimeError: If the payload does not have the chat completions shape.
        """
        if not isinstance(data, dict):
            raise RuntimeError(f"LLM API returned unexpected payload at {url}")
        choices = data.get("choices") or []
        if not isinstance(choices, list):
            raise RuntimeError(f"LLM API returned malformed choices at {url}")
        if not choices:
            return None
        choice = choices[0]
        if not isinstance(choice, dict):
            raise RuntimeError(f"LLM API returned malformed choice at {url}")
        message = choice.get("message")
        if not isinstance(message, dict):
            raise RuntimeError(f"LLM API returned choice without a message at {url}")
        content = message.get("content")
        if content is None:
            return ""
        if not isinstance(content, str):
            raise RuntimeError(f"LLM API returned non-text content at {url}")
        return content

    async def generate(
        self,
        slot: str,
        messages: list[dict[str, str]],
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
        response_format: dict | None = None,
    ) -> str:
        """Generate a completion using the specified slot.

        Returns the assistant message content, or an empty string when the
        provider returns no choices.
        """
        config = self.get_slot(slot)

        headers = {
            "Authorization": f"Bearer {config.api_key}",
            "Content-Type": "application/json",
        }

        payload: dict[str, Any] = {
            "model": config.model_id,
            "messages": messages,
            "temperature": temperature if temperature is not None else config.temperature,
        }

        tokens = max_tokens or config.max_tokens
        if tokens:
            payload["max_tokens"] = tokens

        if response_format:
            payload["response_format"] = response_format

        endpoint = config.api_endpoint.rstrip("/")
        url = f"{endpoint}/chat/completions"

        logger.info("LLM request to %s slot=%s model=%s", url, slot, config.model_id)

        response = await self._client.post(url, json=payload, headers=headers)
        self._raise_for_status_with_context(response)

        data = response.json()
        content = self._extract_content(data, url)
        if content is None:
            logger.warning("LLM response slot=%s had no choices", slot)
            return ""

        logger.info("LLM response slot=%s tokens=%s", slot, data.get("usage", {}))
        return content

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()


def strip_json_fencing(text: str) -> str:
    """Strip markdown JSON fencing if present."""
    text = text.strip()
    if text.startswith("```"):
        first_newline = text.find("\n")
        text = text[first_newline + 1 :] if first_newline != -1 else text[3:]
    if text.endswith("```"):
        text = text[:-3].rstrip()
    return text


async def generate_with_validation(
    client: LLMClient,
    slot: str,
    messages: list[dict[str, str]],
    validate_fn: Callable[[Any], Any],
    *,
    temperature: float | None = None,
    max_tokens: int | None = None,
    repair_retry: bool = True,
) -> Any:
    """Generate LLM output, parse JSON, validate, with one repair retry.

    Args:
        client: LLM client instance
        slot: LLM slot to use
        messages: Chat messages
        validate_fn: Callable that takes the parsed JSON, raises ValueError
            when it is invalid and returns the validated value
        temperature: Optional temperature override
        max_tokens: Optional max_tokens override

    Returns:
        Whatever ``validate_fn`` returns for the parsed JSON

    Raises:
        ValueError: If JSON parsing or validation fails after the retry
            (``json.JSONDecodeError`` and pydantic's ``ValidationError``
            are both ValueErrors)
    """
    response_text = await client.generate(
        slot, messages, temperature=temperature, max_tokens=max_tokens
    )

    text = strip_json_fencing(response_text)

    try:
        return validate_fn(json.loads(text))
    except ValueError as e:
        if not repair_retry:
            raise
        logger.warning("LLM output validation failed, attempting repair: %s", e)

        repair_messages = messages + [
            {"role": "assistant", "content": response_text},
            {
                "role": "user",
                "content": (
                    f"The following output was invalid:\n{text}\n\n"
                    f"Validation errors:\n{e!s}\n\n"
                    "Return ONLY the corrected JSON, with no other text."
                ),
            },
        ]

        response_text_2 = await client.generate(
            slot, repair_messages, temperature=temperature, max_tokens=max_tokens
        )
        return validate_fn(json.loads(strip_json_fencing(response_text_2)))
