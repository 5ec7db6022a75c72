"""
NotesWise Backend: Custom Exception Hierarchy
===============================================

What:  Defines application-specific exceptions for the AI layer and its callers.
Why:   Custom exceptions enable targeted error handling with appropriate HTTP
       status codes and user-friendly messages.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) turn them into
       structured JSON error responses.
Who:   Raised by the factory, the audio adapter, configuration and services.

Exception Hierarchy:
    NotesWiseError (base)
    ├── ValidationError           → 400 Bad Request
    ├── UnauthorizedError         → 401 Unauthorized
    ├── NotFoundError             → 404 Not Found
    ├── ProviderNotFoundError     → 404 Not Found (unknown or disabled provider)
    ├── ProviderUnsupportedError  → 400 Bad Request (configured, no adapter)
    ├── AudioSynthesisError       → 502 Bad Gateway (text-to-speech backend failed)
    └── ConfigurationError        → fatal at startup

Where exceptions are NOT used:
    Text provider adapters never raise. Network, HTTP status and response-shape
    failures come back as `GenerationResult(success=False, error=...)`, and the
    orchestration service unwraps those into empty results. Exceptions are kept
    for caller mistakes, factory lookups, the audio adapter and startup.
"""

from typing import Any, Dict, Optional


class NotesWiseError(Exception):
    """
    Base exception for all NotesWise application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info. Returned to the client as `details`
                  by the 4xx/502 handlers, withheld by the 500 handlers
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(NotesWiseError):
    """
    Raised when client input fails validation.

    When:    Blank content, unknown audio mode, missing required fields.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class UnauthorizedError(NotesWiseError):
    """Raised when the authenticated request context yields no user id."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message=message)


class NotFoundError(NotesWiseError):
    """
    Raised when a requested resource does not exist.

    The data store returns None both for missing entities and for entities that
    belong to another user; the service layer converts either into this error.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ProviderNotFoundError(NotesWiseError):
    """
    Raised by the provider factory when a name is absent from configuration
    or configured with `enabled=False`.
    """

    def __init__(self, provider: str):
        super().__init__(
            message=f"Provider '{provider}' not found or not enabled",
            context={"provider": provider},
        )
        self.provider = provider


class ProviderUnsupportedError(NotesWiseError):
    """
    Raised when a provider name is configured but no adapter class exists for it.

    Configuration is free-form, so a deployment can register e.g. "mistral"
    before anyone has written a MistralProvider.
    """

    def __init__(self, provider: str):
        super().__init__(
            message=f"Unknown provider: {provider}",
            context={"provider": provider},
        )
        self.provider = provider


class AudioSynthesisError(NotesWiseError):
    """
    Raised by the ElevenLabs adapter when speech synthesis fails.

    When:    Non-2xx response, or transport failure after retries.
    Who:     Caught by AIService, which logs it and returns an empty payload.
    """

    def __init__(
        self,
        message: str = "Text-to-speech synthesis failed",
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if status_code is not None:
            ctx["status_code"] = status_code
        super().__init__(message=message, context=ctx)
        self.status_code = status_code


class ConfigurationError(NotesWiseError):
    """
    Raised when mandatory configuration is missing.

    Only the ElevenLabs credential is treated this way: without it the
    application refuses to start. Text providers degrade to "unavailable".
    """

    def __init__(
        self,
        message: str = "Application is misconfigured",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
