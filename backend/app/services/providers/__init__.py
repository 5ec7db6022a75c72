"""
NotesWise Backend: Text Provider Adapters
===========================================

One module per backend. Each adapter subclasses `LLMProvider` and only knows
its own wire format; shared round-trip handling lives in `llm_base`.
"""

from app.services.providers.anthropic_provider import AnthropicProvider
from app.services.providers.gemini_provider import GeminiProvider
from app.services.providers.openai_provider import OpenAIProvider

__all__ = ["AnthropicProvider", "GeminiProvider", "OpenAIProvider"]
