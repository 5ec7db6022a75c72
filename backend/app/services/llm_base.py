"""
NotesWise Backend: Text Provider Contract
===========================================

What:  Abstract base class every text-generation provider adapter implements,
       plus the pieces all adapters share (prompts, defaults, flashcard parsing).
Why:   OpenAI, Anthropic and Gemini disagree on URLs, auth, request bodies and
       where the generated text lives in the response. Callers should see one
       contract: `GenerationRequest` in, `GenerationResult` out.
How:   Concrete adapters build their native payload and implement
       `_extract_text()`. `_complete()` owns the round trip and converts every
       failure into a failed `GenerationResult`.
Who:   Instantiated by ProviderFactory; called by AIService.

Isolation wall:
    Nothing raised inside an adapter escapes it. Transport errors, timeouts,
    non-2xx statuses, undecodable bodies, missing response fields and bad
    flashcard JSON all come back as `GenerationResult(success=False, error=...)`.
"""

import json
import logging
import re
import time
import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional

import httpx

from app.config import ProviderConfig
from app.schemas.ai import FlashcardItem, GenerationRequest, GenerationResult
from app.services.transport import TransportOptions, post_with_retry

logger = logging.getLogger(__name__)


# ── Per-operation defaults ────────────────────────────────────────────────
# Summaries are short, free text is long and creative, flashcards are
# structured output and want a low temperature.
SUMMARY_DEFAULTS: Mapping[str, Any] = {"max_tokens": 150, "temperature": 0.7}
TEXT_DEFAULTS: Mapping[str, Any] = {"max_tokens": 1000, "temperature": 0.9}
FLASHCARD_DEFAULTS: Mapping[str, Any] = {"max_tokens": 1500, "temperature": 0.3}

SUMMARY_SYSTEM_PROMPT = (
    "You are an assistant that writes study summaries. Produce a clear, concise "
    "and well-structured summary of the content provided, highlighting the main "
    "points and important concepts."
)

FLASHCARD_PARSE_ERROR = "Failed to parse generated flashcards"

_CODE_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)


def summary_prompt(content: str) -> str:
    return f"Summarize the following study content concisely:\n\n{content}"


def flashcard_prompt(content: str) -> str:
    return (
        "Create study flashcards (questions and answers) based on the following "
        f"content:\n\n{content}\n\n"
        "Return only a valid JSON array in the format: "
        '[{"question": "question", "answer": "answer"}]. '
        "Create between 5 and 10 relevant flashcards."
    )


def strip_code_fences(text: str) -> str:
    """Remove Markdown code fences (```json ... ```) models like to wrap JSON in."""
    return _CODE_FENCE.sub("", text).strip()


def parse_flashcards(raw: str) -> List[FlashcardItem]:
    """
    Parse model output into validated flashcards.

    Accepts fenced or bare JSON. The payload must be a JSON array of objects
    with non-blank string `question` and `answer` fields.

    Raises:
        ValueError: Invalid JSON, a non-array payload, or a malformed item.
            (json.JSONDecodeError and pydantic's ValidationError both subclass it.)
    """
    data = json.loads(strip_code_fences(raw))
    if not isinstance(data, list):
        raise ValueError(f"expected a JSON array, got {type(data).__name__}")
    return [FlashcardItem.model_validate(item) for item in data]


class LLMProvider(ABC):
    """
    Abstract interface for text-generation backends.

    Contract:
        - generate_summary / generate_text / generate_flashcards always return
          a GenerationResult and never raise
        - is_healthy() returns a bool and never raises
        - Each instance is bound to one ProviderConfig and holds no mutable
          state, so concurrent calls need no coordination

    Implementations:
        - OpenAIProvider:    chat-completions message array, bearer auth
        - AnthropicProvider: messages API, x-api-key + anthropic-version headers
        - GeminiProvider:    generateContent, key in the query string
    """

    name: str = "base"
    display_name: str = "Base"

    def __init__(self, config: ProviderConfig, options: Optional[TransportOptions] = None):
        self.config = config
        self.options = options or TransportOptions()

    # ── Capability contract ───────────────────────────────────────────────

    @abstractmethod
    async def generate_summary(self, request: GenerationRequest) -> GenerationResult:
        """
        Summarize `request.content`.

        Wraps the content in a "summarize concisely" instruction. Defaults:
        max_tokens=150, temperature=0.7.
        """
        ...

    @abstractmethod
    async def generate_text(self, request: GenerationRequest) -> GenerationResult:
        """
        Send `request.content` verbatim. Defaults: max_tokens=1000, temperature=0.9.
        """
        ...

    @abstractmethod
    async def generate_flashcards(self, request: GenerationRequest) -> GenerationResult:
        """
        Ask for 5-10 question/answer pairs as a JSON array.

        On success `content` is the normalized JSON array text. Output that is
        not a valid flashcard array yields error "Failed to parse generated
        flashcards". Defaults: max_tokens=1500, temperature=0.3.
        """
        ...

    @abstractmethod
    def _extract_text(self, data: Any) -> str:
        """Pull the generated text out of the backend's decoded JSON response."""
        ...

    async def is_healthy(self) -> bool:
        """
        Probe the backend with a trivial summary request.

        Returns:
            True if the probe produced content, False on any failure.
        """
        try:
            result = await self.generate_summary(GenerationRequest(content="test"))
            return result.success
        except Exception as e:
            logger.warning("%s health check failed: %s", self.display_name, str(e))
            return False

    # ── Shared helpers ────────────────────────────────────────────────────

    def _resolve_model(self, request: GenerationRequest) -> str:
        return request.model or self.config.default_model

    def _param(self, request: GenerationRequest, key: str, defaults: Mapping[str, Any]) -> Any:
        """
        Resolve one generation parameter.

        Precedence: per-call request parameters, then the provider's configured
        default_parameters, then the operation's built-in default.
        """
        if request.parameters and key in request.parameters:
            return request.parameters[key]
        if key in self.config.default_parameters:
            return self.config.default_parameters[key]
        return defaults[key]

    def _fail(self, error: str, model: Optional[str] = None) -> GenerationResult:
        return GenerationResult.fail(error=error, provider=self.name, model=model)

    async def _complete(
        self,
        url: str,
        payload: Dict[str, Any],
        model: str,
        operation: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> GenerationResult:
        """
        Perform one request/response round trip and normalize the outcome.

        Failure mapping:
            timeout                    → "Request to <Provider> timed out"
            other transport error      → "Network error calling <Provider> API"
            non-2xx status             → "API Error: <status>"
            body is not JSON           → "Failed to parse <Provider> response"
            expected field missing     → "Unexpected response format from <Provider>"
            empty/blank text           → "Empty response from <Provider>"
            anything else              → "Unexpected error occurred"
        """
        # Short per-call ID to correlate the log lines of one round trip
        call_id = str(uuid.uuid4())[:8]
        start_time = time.perf_counter()

        try:
            try:
                async with self.options.client() as client:
                    response = await post_with_retry(
                        client, url, self.options, json=payload, headers=headers, params=params
                    )
            except httpx.TimeoutException as e:
                logger.warning("[%s] %s %s timed out: %s", call_id, self.display_name, operation, str(e))
                return self._fail(f"Request to {self.display_name} timed out", model)
            except httpx.HTTPError as e:
                logger.warning(
                    "[%s] %s %s network error: %s", call_id, self.display_name, operation, str(e)
                )
                return self._fail(f"Network error calling {self.display_name} API", model)

            duration_ms = (time.perf_counter() - start_time) * 1000

            if not response.is_success:
                # Response text may help debugging; the URL is not logged (Gemini puts the key in it)
                logger.error(
                    "[%s] %s API error: %d - %s",
                    call_id,
                    self.display_name,
                    response.status_code,
                    response.text[:500],
                )
                return self._fail(f"API Error: {response.status_code}", model)

            try:
                data = response.json()
            except ValueError:
                logger.error("[%s] %s returned a non-JSON body", call_id, self.display_name)
                return self._fail(f"Failed to parse {self.display_name} response", model)

            try:
                text = self._extract_text(data)
            except (KeyError, IndexError, TypeError, AttributeError) as e:
                logger.error(
                    "[%s] Unexpected %s response shape (%s): %s",
                    call_id,
                    self.display_name,
                    type(e).__name__,
                    str(data)[:500],
                )
                return self._fail(f"Unexpected response format from {self.display_name}", model)

            if not isinstance(text, str) or not text.strip():
                logger.warning("[%s] Empty content received from %s", call_id, self.display_name)
                return self._fail(f"Empty response from {self.display_name}", model)

            logger.info(
                "[%s] %s %s completed in %.0fms (model=%s, %d chars)",
                call_id,
                self.display_name,
                operation,
                duration_ms,
                model,
                len(text),
            )
            return GenerationResult.ok(content=text, provider=self.name, model=model)

        except Exception as e:
            logger.error(
                "[%s] Unexpected error calling %s: %s", call_id, self.display_name, str(e),
                exc_info=True,
            )
            return self._fail("Unexpected error occurred", model)

    def _finish_flashcards(self, result: GenerationResult) -> GenerationResult:
        """Validate raw flashcard output and re-serialize it as a clean JSON array."""
        if not result.success:
            return result
        try:
            cards = parse_flashcards(result.content)
        except ValueError as e:
            logger.error(
                "Error parsing flashcards JSON from %s (%s): %s",
                self.display_name,
                str(e)[:200],
                result.content[:500],
            )
            return self._fail(FLASHCARD_PARSE_ERROR, result.model)

        normalized = json.dumps([card.model_dump() for card in cards], ensure_ascii=False)
        return GenerationResult.ok(content=normalized, provider=self.name, model=result.model)
