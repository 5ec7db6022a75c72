"""
NotesWise Backend: OpenAI Provider
====================================

What:  Adapter for the OpenAI chat-completions API.
How:   POST {base_url}/chat/completions with a bearer token. The generated text
       is at `choices[0].message.content`.

Message layout:
    summary     → system instruction + user message
    text        → single user message (the prompt verbatim)
    flashcards  → single user message carrying the JSON-array instructions
"""

from typing import Any, Dict, List, Mapping

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


class OpenAIProvider(LLMProvider):
    """OpenAI chat-completions adapter."""

    name = "openai"
    display_name = "OpenAI"

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.config.api_key}"}

    def _payload(
        self,
        request: GenerationRequest,
        messages: List[Dict[str, str]],
        defaults: Mapping[str, Any],
    ) -> Dict[str, Any]:
        return {
            "model": self._resolve_model(request),
            "messages": messages,
            "max_tokens": self._param(request, "max_tokens", defaults),
            "temperature": self._param(request, "temperature", defaults),
        }

    async def _chat(
        self,
        request: GenerationRequest,
        messages: List[Dict[str, str]],
        defaults: Mapping[str, Any],
        operation: str,
    ) -> GenerationResult:
        payload = self._payload(request, messages, defaults)
        return await self._complete(
            f"{self.config.base_url.rstrip('/')}/chat/completions",
            payload,
            model=payload["model"],
            operation=operation,
            headers=self._headers(),
        )

    async def generate_summary(self, request: GenerationRequest) -> GenerationResult:
        messages = [
            {"role": "system", "content": SUMMARY_SYSTEM_PROMPT},
            {"role": "user", "content": summary_prompt(request.content)},
        ]
        return await self._chat(request, messages, SUMMARY_DEFAULTS, "summary")

    async def generate_text(self, request: GenerationRequest) -> GenerationResult:
        messages = [{"role": "user", "content": request.content}]
        return await self._chat(request, messages, TEXT_DEFAULTS, "text")

    async def generate_flashcards(self, request: GenerationRequest) -> GenerationResult:
        messages = [{"role": "user", "content": flashcard_prompt(request.content)}]
        result = await self._chat(request, messages, FLASHCARD_DEFAULTS, "flashcards")
        return self._finish_flashcards(result)

    def _extract_text(self, data: Any) -> str:
        return data["choices"][0]["message"]["content"]
