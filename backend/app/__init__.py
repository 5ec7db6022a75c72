"""
NotesWise Backend: Application Package
========================================

Architecture Note:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   AIService / NoteService           │  ← Orchestration, degradation
    ├─────────────────────────────────────┤
    │   ProviderFactory → LLMProvider     │  ← OpenAI / Anthropic / Gemini
    │   ElevenLabsService                 │  ← Text-to-speech
    ├─────────────────────────────────────┤
    │   Config + Schemas                  │  ← pydantic-settings, pydantic
    └─────────────────────────────────────┘

    Adapters speak the providers' wire formats and return uniform results;
    services turn those results into plain values for routes and workflows.
"""

__version__ = "1.0.0"
