"""
NotesWise Backend: Note Service (Business Logic Orchestrator)
===============================================================

What:  Note workflows that use the AI layer: save with summary, flashcards from
       a note, and audio for a note's flashcards.
Why:   Keeps the "persist first, enrich best-effort" rule in one place,
       independent of HTTP concerns.
How:   Composes a DataStore (passed per call) with the AIService (held).

Orchestration Flow (create with summary):
    ┌──────────┐    ┌──────────────┐    ┌──────────────┐    ┌──────────┐
    │ Validate │───▶│  Store note  │───▶│  AIService   │───▶│  Update  │
    │          │    │  (DataStore) │    │  summarize() │    │  summary │
    └──────────┘    └──────────────┘    └──────────────┘    └──────────┘

    The note is saved before any AI call. An empty summary (provider
    unavailable, failed, or disabled) leaves the saved note as it is.

Design Decision:
    NoteService holds no per-request state. The data store is passed in on
    each call, the same way a DB session would be, so tests can hand it a fake.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from app.exceptions import NotFoundError, ValidationError
from app.schemas.ai import AudioMode, BulkAudioResult, FlashcardAudioResult, FlashcardItem
from app.schemas.note import CreateNoteRequest, Flashcard, Note, UpdateNoteRequest
from app.services.ai_service import AIService
from app.services.data_store import DataStore
from app.services.elevenlabs_service import DEFAULT_VOICE

logger = logging.getLogger(__name__)


class NoteService:
    """
    Business logic layer for AI-assisted note operations.

    Responsibilities:
        - create_note() / update_note(): save, then optionally attach a summary
        - generate_note_flashcards(): derive and store flashcards for a note
        - generate_note_flashcards_audio(): bulk audio for a note's flashcards

    Error Handling Strategy:
        Caller mistakes raise ValidationError, missing notes raise NotFoundError.
        AI failures never surface: the AIService already degrades them to
        empty values, and storage errors after the initial save are logged
        and swallowed only where the save itself has already succeeded.
    """

    def __init__(self, ai_service: AIService):
        self.ai_service = ai_service

    async def create_note(
        self, store: DataStore, user_id: str, payload: CreateNoteRequest
    ) -> Note:
        """
        Save a new note, then attach a summary if one was requested.

        Raises:
            ValidationError: Blank title
        """
        if not payload.title.strip():
            raise ValidationError("Title is required", field="title")

        now = datetime.now(timezone.utc)
        note = Note(
            user_id=user_id,
            title=payload.title.strip(),
            content=payload.content.strip(),
            category_id=payload.category_id,
            created_at=now,
            updated_at=now,
        )
        created = await store.create_note(note)
        logger.info("Note %s created for user %s", created.id, user_id)

        if payload.generate_summary:
            created = await self._attach_summary(store, created, payload.ai_provider)
        return created

    async def update_note(
        self, store: DataStore, user_id: str, note_id: str, payload: UpdateNoteRequest
    ) -> Note:
        """
        Apply the provided fields to an existing note, then optionally re-summarize.

        Raises:
            NotFoundError: Note missing or owned by another user
            ValidationError: A provided title or content is blank
        """
        existing = await self._get_note(store, user_id, note_id)

        changes = {}
        if payload.title is not None:
            if not payload.title.strip():
                raise ValidationError("Title is required", field="title")
            changes["title"] = payload.title.strip()
        if payload.content is not None:
            if not payload.content.strip():
                raise ValidationError("Content is required", field="content")
            changes["content"] = payload.content.strip()
        if payload.category_id is not None:
            changes["category_id"] = payload.category_id
        changes["updated_at"] = datetime.now(timezone.utc)

        updated = await store.update_note(existing.model_copy(update=changes))
        if updated is None:
            raise NotFoundError("Note", note_id)

        if payload.generate_summary:
            updated = await self._attach_summary(store, updated, payload.ai_provider)
        return updated

    async def generate_note_flashcards(
        self,
        store: DataStore,
        user_id: str,
        note_id: str,
        provider_name: Optional[str] = None,
    ) -> List[Flashcard]:
        """
        Generate flashcards from a note's content and store them.

        Returns:
            The stored flashcards; [] when generation produced nothing
            (nothing is written in that case).

        Raises:
            NotFoundError: Note missing or owned by another user
            ValidationError: Note content is blank
        """
        note = await self._get_note(store, user_id, note_id)
        if not note.content.strip():
            raise ValidationError("Note has no content to generate flashcards from", field="content")

        items = await self.ai_service.generate_flashcards(note.content, provider_name)
        if not items:
            logger.warning("No flashcards generated for note %s", note_id)
            return []

        cards = [
            Flashcard(
                note_id=note_id,
                user_id=user_id,
                question=item.question,
                answer=item.answer,
                created_at=datetime.now(timezone.utc),
            )
            for item in items
        ]
        stored = await store.create_flashcards(cards)
        logger.info("Stored %d flashcards for note %s", len(stored), note_id)
        return stored

    async def generate_note_flashcards_audio(
        self,
        store: DataStore,
        user_id: str,
        note_id: str,
        voice: str = DEFAULT_VOICE,
        mode: Union[AudioMode, str] = AudioMode.BOTH,
    ) -> BulkAudioResult:
        """
        Synthesize and store audio for every flashcard of a note, one by one.

        Any per-card failure (blank stored text, no audio, a rejected store
        update) is counted in `error_count` and the loop moves on.

        Raises:
            NotFoundError: Note missing or owned by another user
            ValidationError: Unknown audio mode
        """
        await self._get_note(store, user_id, note_id)
        flashcards = await store.get_flashcards_by_note(note_id, user_id)
        result = BulkAudioResult()

        for card in flashcards:
            try:
                item = FlashcardItem(question=card.question, answer=card.answer)
            except PydanticValidationError as e:
                logger.warning("Skipping flashcard %s with blank text: %s", card.id, e.errors()[0]["msg"])
                result.items.append(FlashcardAudioResult())
                result.error_count += 1
                continue

            audio = await self.ai_service.synthesize_flashcard_audio(item, voice, mode)
            result.items.append(audio)

            if audio.question_audio is None and audio.answer_audio is None:
                result.error_count += 1
                continue

            changes = {}
            if audio.question_audio is not None:
                changes["question_audio"] = audio.question_audio
            if audio.answer_audio is not None:
                changes["answer_audio"] = audio.answer_audio

            try:
                saved = await store.update_flashcard(card.model_copy(update=changes))
            except Exception:
                logger.exception("Failed to store audio for flashcard %s", card.id)
                result.error_count += 1
                continue

            if saved is None:
                logger.warning("Flashcard %s disappeared before audio could be stored", card.id)
                result.error_count += 1
            else:
                result.generated_count += 1

        logger.info(
            "Audio for note %s: %d flashcards updated, %d errors",
            note_id,
            result.generated_count,
            result.error_count,
        )
        return result

    # ── Internals ─────────────────────────────────────────────────────────

    @staticmethod
    async def _get_note(store: DataStore, user_id: str, note_id: str) -> Note:
        note = await store.get_note(note_id, user_id)
        if note is None:
            raise NotFoundError("Note", note_id)
        return note

    async def _attach_summary(
        self, store: DataStore, note: Note, provider_name: Optional[str]
    ) -> Note:
        """Best-effort: returns the note unchanged when no summary is available."""
        if not note.content.strip():
            return note

        summary = await self.ai_service.summarize(note.content, provider_name)
        if not summary:
            logger.info("No summary attached to note %s", note.id)
            return note

        try:
            saved = await store.update_note(note.model_copy(update={"summary": summary}))
        except Exception:
            logger.exception("Failed to store summary for note %s", note.id)
            return note
        return saved or note

