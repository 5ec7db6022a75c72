# Routes package init
"""
NotesWise Backend: API Routes Package
=======================================

What:  HTTP route handlers over the AI orchestration service.
How:   Each route module handles a specific resource or action.

Route Inventory:
    - ai.py:      GET  /api/ai/providers           (enabled provider names)
                  GET  /api/ai/health              (probe each enabled provider)
                  POST /api/ai/test-summary        (summary round trip with provider info)
                  POST /api/ai/generate-summary
                  POST /api/ai/generate-text
                  POST /api/ai/generate-flashcards
                  POST /api/ai/generate-audio
                  POST /api/ai/flashcard-audio
    - health.py:  GET  /health                     (liveness, no provider calls)

Design Principle:
    Routes are THIN. They validate input, resolve the caller, call AIService
    and shape the response. Business rules live in services.
"""
