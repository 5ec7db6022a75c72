"""
NotesWise Backend: Data Store Interface
=========================================

What:  The persistence operations the note workflow needs, as an abstract class.
Why:   Storage is owned elsewhere (schema, driver, migrations). The workflow
       only depends on these calls, so any backend, or a test fake, can be
       plugged in.

Ownership rule:
    Every read takes the caller's user_id. A store returns None both when an
    entity does not exist and when it belongs to someone else; callers must
    not be able to tell the two apart.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from app.schemas.note import Flashcard, Note


class DataStore(ABC):
    """Abstract persistence for notes and flashcards."""

    @abstractmethod
    async def get_note(self, note_id: str, user_id: str) -> Optional[Note]:
        ...

    @abstractmethod
    async def create_note(self, note: Note) -> Note:
        """Persist a new note and return it with its id assigned."""
        ...

    @abstractmethod
    async def update_note(self, note: Note) -> Optional[Note]:
        ...

    @abstractmethod
    async def get_flashcards_by_note(self, note_id: str, user_id: str) -> List[Flashcard]:
        ...

    @abstractmethod
    async def create_flashcards(self, flashcards: List[Flashcard]) -> List[Flashcard]:
        ...

    @abstractmethod
    async def update_flashcard(self, flashcard: Flashcard) -> Optional[Flashcard]:
        ...
