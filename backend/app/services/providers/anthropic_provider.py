"""
NotesWise Backend: Anthropic Provider
=======================================

What:  Adapter for the Anthropic messages API.
How:   POST {base_url}/messages with `x-api-key` and `anthropic-version` headers.
       Unlike OpenAI, the system instruction is a top-level `system` field
       rather than a message. The generated text is at `content[0].text`.
"""

from typing import Any, Dict, Mapping, Optional

from app.schemas.ai import GenerationRequest, GenerationResult
from app.services.llm_base import (
    FLASHCARD_DEFAULTS,
    SUMMARY_DEFAULTS,
    SUMMARY_SYSTEM_PROMPT,
    TEXT_DEFAULTS,
    LLMProvider,
    flashcard_prompt,
    summary_prompt,
)

ANTHROPIC_VERSION = "2023-06-01"


class AnthropicProvider(LLMProvider):
    """Anthropic messages adapter."""

    name = "anthropic"
    display_name = "Anthropic"

    async def _message(
        self,
        request: GenerationRequest,
        prompt: str,
        defaults: Mapping[str, Any],
        operation: str,
        system: Optional[str] = None,
    ) -> GenerationResult:
        model = self._resolve_model(request)
        payload: Dict[str, Any] = {
            "model": model,
            "max_tokens": self._param(request, "max_tokens", defaults),
            "temperature": self._param(request, "temperature", defaults),
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            payload["system"] = system

        return await self._complete(
            f"{self.config.base_url.rstrip('/')}/messages",
            payload,
            model=model,
            operation=operation,
            headers={
                "x-api-key": self.config.api_key,
                "anthropic-version": ANTHROPIC_VERSION,
            },
        )

    async def generate_summary(self, request: GenerationRequest) -> GenerationResult:
        return await self._message(
            request,
            summary_prompt(request.content),
            SUMMARY_DEFAULTS,
            "summary",
            system=SUMMARY_SYSTEM_PROMPT,
        )

    async def generate_text(self, request: GenerationRequest) -> GenerationResult:
        return await self._message(request, request.content, TEXT_DEFAULTS, "text")

    async def generate_flashcards(self, request: GenerationRequest) -> GenerationResult:
        result = await self._message(
            request, flashcard_prompt(request.content), FLASHCARD_DEFAULTS, "flashcards"
        )
        return self._finish_flashcards(result)

    def _extract_text(self, data: Any) -> str:
        return data["content"][0]["text"]
