# Schemas package init
"""
NotesWise Backend: Pydantic Schemas
=====================================

    - ai.py:    adapter contract (GenerationRequest/Result) and /api/ai models
    - note.py:  notes, flashcards, error and liveness responses
"""
