"""
NotesWise Backend: Note & Flashcard Schemas
=============================================

What:  Pydantic models for notes and flashcards as seen by the service layer,
       plus the shared error and health response models.
Why:   The data store is an external collaborator; these models fix the shape
       the note workflow reads and writes without prescribing how it is stored.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class Note(BaseModel):
    """
    A user's note.

    `summary` is filled in best-effort after the note is saved; an empty
    summary means generation was unavailable, not that the save failed.
    """
    id: Optional[str] = None
    user_id: str
    title: str = ""
    content: str = ""
    summary: Optional[str] = None
    category_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Flashcard(BaseModel):
    """A stored flashcard derived from a note, with optional cached audio."""
    id: Optional[str] = None
    note_id: str
    user_id: str
    question: str
    answer: str
    question_audio: Optional[str] = None
    answer_audio: Optional[str] = None
    created_at: Optional[datetime] = None


class CreateNoteRequest(BaseModel):
    title: str = Field(default="", description="Note title")
    content: str = Field(default="", description="Note body")
    category_id: Optional[str] = None
    generate_summary: bool = Field(default=False, description="Ask the AI layer for a summary")
    ai_provider: Optional[str] = Field(default=None, description="Provider override for the summary")


class UpdateNoteRequest(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    category_id: Optional[str] = None
    generate_summary: bool = False
    ai_provider: Optional[str] = None


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "provider_not_found",
            "message": "Provider 'mistral' not found or not enabled",
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Liveness probe. Provider reachability is reported by /api/ai/health instead."""
    status: str = Field(description="Overall service status")
    version: str = Field(description="Application version")
    default_provider: str = Field(description="Configured default text provider")
    providers: List[str] = Field(description="Enabled text providers, in configuration order")
    uptime_seconds: float = Field(description="Seconds since service started")
