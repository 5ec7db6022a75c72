"""
NotesWise Backend: Application Configuration
===============================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
       The provider table is read once and never changes while the process runs;
       switching the default provider or a key requires a restart.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
       `provider_table()` turns the flat settings into named `ProviderConfig`s.
Who:   Imported by main.py (startup wiring) and by the AI service builder.
When:  Loaded once at module import time; validated before the app serves traffic.

Failure policy:
    - ELEVENLABS_API_KEY missing → fatal (startup aborts with ConfigurationError)
    - A text provider without a key → that provider is simply disabled
"""

from types import MappingProxyType
from typing import Any, Dict, List, Mapping

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from app.exceptions import ConfigurationError


class ProviderConfig(BaseModel):
    """
    Static configuration of one named text-generation provider.

    Frozen: a config is built once at startup and shared read-only by every
    adapter instance the factory creates.
    """

    name: str = ""
    api_key: str = ""
    base_url: str = ""
    default_model: str = ""
    default_parameters: Dict[str, Any] = Field(default_factory=dict)
    enabled: bool = True

    model_config = {"frozen": True}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for development. Production deployments
    MUST provide ELEVENLABS_API_KEY and at least one text provider key.
    """

    # ── AI Providers ──────────────────────────────────────────────────────
    # What: Name of the provider used when a caller does not pick one
    ai_default_provider: str = Field(default="openai")

    # What: Optional explicit provider table (JSON in the AI_PROVIDERS env var)
    # Format: {"openai": {"api_key": "...", "base_url": "...", "enabled": true}, ...}
    # When empty, the built-in table below is assembled from the per-provider keys.
    ai_providers: Dict[str, ProviderConfig] = Field(default_factory=dict)

    openai_api_key: str = Field(default="")
    openai_base_url: str = Field(default="https://api.openai.com/v1")
    openai_model: str = Field(default="gpt-4o-mini")

    anthropic_api_key: str = Field(default="")
    anthropic_base_url: str = Field(default="https://api.anthropic.com/v1")
    anthropic_model: str = Field(default="claude-3-5-haiku-latest")

    gemini_api_key: str = Field(default="")
    gemini_base_url: str = Field(default="https://generativelanguage.googleapis.com")
    gemini_model: str = Field(default="gemini-1.5-flash")

    # ── ElevenLabs (text-to-speech) ───────────────────────────────────────
    # Required: YES. The application refuses to start without it
    elevenlabs_api_key: str = Field(default="")
    elevenlabs_base_url: str = Field(default="https://api.elevenlabs.io")

    # ── Transport ─────────────────────────────────────────────────────────
    # What: Per-provider HTTP timeout; expiry is reported as a network failure
    provider_timeout_seconds: float = Field(default=30.0, gt=0, le=300)
    user_agent: str = Field(default="NotesWise-API/1.0")

    # ── Retry Configuration ───────────────────────────────────────────────
    # What: Tenacity retry settings for transport-level failures only
    # (connection errors). Timeouts and HTTP error statuses are never retried.
    retry_max_attempts: int = Field(default=2, ge=1, le=10)
    retry_min_wait: float = Field(default=1.0, ge=0, le=30)
    retry_max_wait: float = Field(default=5.0, ge=0, le=120)

    # ── CORS ──────────────────────────────────────────────────────────────
    cors_origins: str = Field(default="http://localhost:3000,http://localhost:5173")

    # What: Header carrying the user id set by an authenticating gateway.
    # Empty disables it; some other middleware must then set request.state.user_id.
    trusted_user_header: str = Field(default="")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)

    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("ai_default_provider")
    @classmethod
    def normalize_default_provider(cls, v: str) -> str:
        return v.strip().lower()

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    def provider_table(self) -> Mapping[str, ProviderConfig]:
        """
        Build the read-only provider registry, keyed by lower-cased name.

        What:  Returns the explicit AI_PROVIDERS table when one is configured,
               otherwise the built-in openai → anthropic → gemini table.
        Why:   Insertion order is configuration order, which is the order
               `list_available()` reports.
        How:   Each entry's `name` is filled from its key; a built-in provider
               without an API key is registered but disabled.
        """
        if self.ai_providers:
            table = {
                key.strip().lower(): config.model_copy(
                    update={"name": config.name or key.strip().lower()}
                )
                for key, config in self.ai_providers.items()
            }
            return MappingProxyType(table)

        builtin = [
            ("openai", self.openai_api_key, self.openai_base_url, self.openai_model),
            ("anthropic", self.anthropic_api_key, self.anthropic_base_url, self.anthropic_model),
            ("gemini", self.gemini_api_key, self.gemini_base_url, self.gemini_model),
        ]
        return MappingProxyType({
            name: ProviderConfig(
                name=name,
                api_key=api_key,
                base_url=base_url,
                default_model=model,
                enabled=bool(api_key),
            )
            for name, api_key, base_url, model in builtin
        })

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that critical settings are configured.
        When:  Called during app startup (lifespan).
        Why:   The audio credential is the one value whose absence is fatal.
               Missing text provider keys only produce warnings.
        """
        errors = []
        if not self.elevenlabs_api_key:
            errors.append("ELEVENLABS_API_KEY is not set.")
        if errors:
            raise ConfigurationError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance, imported by startup wiring
settings = Settings()
