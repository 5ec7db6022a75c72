"""
NotesWise Backend: Google Gemini Provider
===========================================

What:  Adapter for the Gemini generateContent REST endpoint.
How:   POST {base_url}/v1/models/{model}:generateContent?key=<api_key>.
       The key travels in the query string, so request URLs are never logged.
       The generated text is at `candidates[0].content.parts[0].text`.

Response handling:
    Gemini omits `candidates` entirely when a prompt is blocked, and omits
    `parts` on some finish reasons. Those are not malformed responses, just
    empty ones, so extraction walks the path safely and any missing hop
    reports "Empty response from Gemini".
"""

from typing import Any, Dict, Mapping

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

# Sampling settings Gemini gets on every call
GEMINI_TOP_P = 0.8
GEMINI_TOP_K = 10


def _first(value: Any) -> Any:
    if isinstance(value, list) and value:
        return value[0]
    return None


class GeminiProvider(LLMProvider):
    """Google Gemini generateContent adapter."""

    name = "gemini"
    display_name = "Gemini"

    async def _generate(
        self,
        request: GenerationRequest,
        prompt: str,
        defaults: Mapping[str, Any],
        operation: str,
    ) -> GenerationResult:
        model = self._resolve_model(request)
        payload: Dict[str, Any] = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self._param(request, "temperature", defaults),
                "maxOutputTokens": self._param(request, "max_tokens", defaults),
                "topP": GEMINI_TOP_P,
                "topK": GEMINI_TOP_K,
            },
        }
        return await self._complete(
            f"{self.config.base_url.rstrip('/')}/v1/models/{model}:generateContent",
            payload,
            model=model,
            operation=operation,
            params={"key": self.config.api_key},
        )

    async def generate_summary(self, request: GenerationRequest) -> GenerationResult:
        # No system role on this endpoint; the instruction leads the prompt
        prompt = f"{SUMMARY_SYSTEM_PROMPT}\n\n{summary_prompt(request.content)}"
        return await self._generate(request, prompt, SUMMARY_DEFAULTS, "summary")

    async def generate_text(self, request: GenerationRequest) -> GenerationResult:
        return await self._generate(request, request.content, TEXT_DEFAULTS, "text")

    async def generate_flashcards(self, request: GenerationRequest) -> GenerationResult:
        result = await self._generate(
            request, flashcard_prompt(request.content), FLASHCARD_DEFAULTS, "flashcards"
        )
        return self._finish_flashcards(result)

    def _extract_text(self, data: Any) -> str:
        if not isinstance(data, dict):
            return ""
        candidate = _first(data.get("candidates"))
        content = candidate.get("content") if isinstance(candidate, dict) else None
        part = _first(content.get("parts")) if isinstance(content, dict) else None
        text = part.get("text") if isinstance(part, dict) else None
        return text if isinstance(text, str) else ""
