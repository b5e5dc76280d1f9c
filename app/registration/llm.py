"""OpenAI chat-completions adapter — the text-in, text-out LLM boundary.

Single attempt per call (the SDK's own retries are disabled): a failed
extraction is a no-progress turn, and retrying risks paying twice.
"""

from __future__ import annotations

import logging
from typing import Any

from openai import AsyncOpenAI, OpenAIError

from app.config import Settings, settings
from app.registration.errors import LLMError
from app.registration.prompts import ChatMessage

logger = logging.getLogger(__name__)


class OpenAILLM:
    def __init__(self, config: Settings | None = None, client: AsyncOpenAI | None = None):
        self._config = config or settings
        self._client = client
        self.model_name = self._config.openai_model
        self.usage: dict[str, int] = {"prompt_tokens": 0, "completion_tokens": 0, "total_tokens": 0}

    def _get_client(self) -> AsyncOpenAI:
        """Build the SDK client on first use; a missing API key surfaces as LLMError."""
        if self._client is None:
            client_kwargs: dict[str, Any] = {
                "max_retries": 0,
                "timeout": self._config.llm_timeout_seconds,
            }
            if self._config.openai_api_key:
                client_kwargs["api_key"] = self._config.openai_api_key
            if self._config.openai_base_url:
                client_kwargs["base_url"] = self._config.openai_base_url
            try:
                self._client = AsyncOpenAI(**client_kwargs)
            except OpenAIError as exc:
                raise LLMError(f"OpenAI client unavailable: {exc}") from exc
        return self._client

    def _merge_usage(self, resp: Any) -> None:
        usage = getattr(resp, "usage", None)
        if usage is None:
            return
        for key in self.usage:
            self.usage[key] += getattr(usage, key, 0) or 0

    async def complete(
        self,
        messages: list[ChatMessage],
        *,
        json_mode: bool = False,
        temperature: float | None = None,
    ) -> str:
        """One chat completion. Raises LLMError on provider failure or empty output."""
        kwargs: dict[str, Any] = {
            "model": self.model_name,
            "messages": messages,
            "temperature": self._config.llm_temperature if temperature is None else temperature,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        client = self._get_client()
        try:
            resp = await client.chat.completions.create(**kwargs)
        except OpenAIError as exc:
            raise LLMError(f"{self.model_name} completion failed: {exc}") from exc

        self._merge_usage(resp)
        choices = getattr(resp, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content:
            raise LLMError(f"{self.model_name} returned an empty completion")
        logger.debug("LLM usage so far: %s", self.usage)
        return content.strip()

    async def extract_json(self, messages: list[ChatMessage]) -> str:
        """Extraction calls: JSON mode, low temperature."""
        return await self.complete(messages, json_mode=True)

    async def chat(self, messages: list[ChatMessage]) -> str:
        """Free coach chat once registration is complete."""
        return await self.complete(messages, temperature=self._config.llm_chat_temperature)
