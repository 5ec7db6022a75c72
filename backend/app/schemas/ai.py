"""
NotesWise Backend: AI Contract Schemas
========================================

What:  Pydantic models for the uniform AI contract and the AI endpoints.
Why:   Three text backends speak three wire formats; everything above the
       adapters only ever sees `GenerationRequest` → `GenerationResult`.
Who:   Produced by provider adapters, consumed by AIService and the routes.

Result invariant:
    success=True  ⇒ content is non-empty
    success=False ⇒ error is non-empty
    Enforced by `GenerationResult`'s model validator, so an adapter cannot
    construct an ambiguous result even by mistake.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


# ══════════════════════════════════════════════════════════════════════════
# Adapter Contract
# ══════════════════════════════════════════════════════════════════════════


class GenerationRequest(BaseModel):
    """
    One call to a text provider.

    `model` and `parameters` override the provider's configured defaults for
    this call only (e.g. {"max_tokens": 300, "temperature": 0.2}).
    """
    content: str
    model: Optional[str] = None
    parameters: Optional[Dict[str, Any]] = None


class GenerationResult(BaseModel):
    """Uniform adapter output. Build with `ok()` / `fail()`."""
    content: str = ""
    success: bool
    error: Optional[str] = None
    provider: Optional[str] = None
    model: Optional[str] = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_success_invariant(self) -> "GenerationResult":
        if self.success and not self.content:
            raise ValueError("a successful result must carry content")
        if not self.success and not self.error:
            raise ValueError("a failed result must carry an error description")
        if self.success and self.error:
            raise ValueError("a successful result cannot carry an error")
        return self

    @classmethod
    def ok(cls, content: str, provider: str, model: Optional[str]) -> "GenerationResult":
        return cls(content=content, success=True, provider=provider, model=model)

    @classmethod
    def fail(cls, error: str, provider: str, model: Optional[str] = None) -> "GenerationResult":
        return cls(success=False, error=error, provider=provider, model=model)


class FlashcardItem(BaseModel):
    """A single question/answer study card produced by flashcard generation."""
    question: str = Field(min_length=1)
    answer: str = Field(min_length=1)

    @field_validator("question", "answer")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class AudioMode(str, Enum):
    """Which side(s) of a flashcard to read aloud."""
    QUESTION = "question"
    ANSWER = "answer"
    BOTH = "both"


class FlashcardAudioResult(BaseModel):
    """
    Base64 audio for one flashcard.

    A half that was not requested, or whose synthesis failed, is None.
    """
    question_audio: Optional[str] = None
    answer_audio: Optional[str] = None


class BulkAudioResult(BaseModel):
    """Outcome of generating audio for a set of flashcards, one item per card."""
    items: List[FlashcardAudioResult] = Field(default_factory=list)
    generated_count: int = 0
    error_count: int = 0


# ══════════════════════════════════════════════════════════════════════════
# Endpoint Request/Response Models
# ══════════════════════════════════════════════════════════════════════════


class GenerateSummaryRequest(BaseModel):
    content: str = Field(description="Note text to summarize")
    provider: Optional[str] = Field(default=None, description="Provider name; default if omitted")


class GenerateSummaryResponse(BaseModel):
    summary: str = Field(description="Generated summary; empty when generation was unavailable")


class GenerateTextRequest(BaseModel):
    prompt: str = Field(description="Free-form prompt sent verbatim to the provider")
    provider: Optional[str] = None


class GenerateTextResponse(BaseModel):
    text: str


class GenerateFlashcardsRequest(BaseModel):
    content: str = Field(description="Note text to turn into flashcards")
    provider: Optional[str] = None


class GenerateFlashcardsResponse(BaseModel):
    flashcards: List[FlashcardItem]


class GenerateAudioRequest(BaseModel):
    text: str = Field(description="Text to synthesize")
    voice: str = Field(default="burt", description="Symbolic voice name")


class GenerateAudioResponse(BaseModel):
    audio_content: str = Field(description="Base64-encoded audio; empty when synthesis failed")


class GenerateFlashcardAudioRequest(BaseModel):
    question: str
    answer: str
    voice: str = "burt"
    mode: AudioMode = AudioMode.BOTH


class ProvidersResponse(BaseModel):
    providers: List[str]


class ProvidersHealthResponse(BaseModel):
    """
    Aggregate provider health.

    status is "healthy" when at least one enabled provider answered its probe.
    """
    status: str
    providers: Dict[str, bool]


class SummaryProbeRequest(BaseModel):
    content: str
    provider: Optional[str] = Field(default=None, description="Provider to exercise; default if omitted")


class SummaryProbeResponse(BaseModel):
    """Diagnostic result of a one-off summary through a chosen provider."""
    summary: str
    provider: str
    is_success: bool
