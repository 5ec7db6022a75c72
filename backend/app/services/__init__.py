# Services package init
"""
NotesWise Backend: Services Layer
===================================

Service Inventory:
    - transport:          HTTP client options and tenacity retry for provider calls
    - llm_base:           LLMProvider contract, prompts, flashcard parsing
    - providers/:         OpenAI, Anthropic and Gemini adapters
    - provider_factory:   Name → adapter resolution over static configuration
    - elevenlabs_service: Text-to-speech (raises AudioSynthesisError)
    - ai_service:         Orchestration with best-effort degradation
    - data_store:         Persistence interface the note workflow consumes
    - note_service:       Note save / flashcard / bulk audio workflows
"""
