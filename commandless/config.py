# commandless/config.py
"""Application configuration using pydantic-settings.

Provides a centralized Settings class for all environment variables.
Supports both GOOGLE_API_KEY and GEMINI_API_KEY for backward compatibility.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings are loaded from .env file and environment variables.
    Environment variables take precedence over .env file values.
    """

    # Google Gemini API (supports both GOOGLE_API_KEY and GEMINI_API_KEY)
    google_api_key: str = ""
    gemini_api_key: str = ""

    # Generative matcher (litellm model string)
    intent_model: str = "gemini/gemini-2.0-flash"
    model_timeout_seconds: float = 8.0
    store_timeout_seconds: float = 3.0

    # Decision thresholds
    accept_threshold: float = 0.6
    clarify_threshold: float = 0.4
    heuristic_threshold: float = 0.25
    heuristic_polite_threshold: float = 0.15

    # Conversation memory
    context_capacity: int = 10
    context_ttl_seconds: int = 7200
    confirmation_ttl_seconds: int = 300

    # Parameter handling
    amount_max: int = 100
    user_id_pattern: str = r"\b(\d{17,19})\b"

    # Template store
    templates_db_path: str = "data/templates.db"

    # Observability
    logfire_token: str = ""

    # API Security
    api_auth_key: str = ""  # Comma-separated X-API-Key values, one per bot deployment
    api_rate_limit: int = 60  # Requests per minute per caller (management endpoints)
    resolve_rate_limit: int = 600  # Requests per minute per caller on /resolve

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @property
    def api_key(self) -> str:
        """Get API key with fallback support.

        Returns GOOGLE_API_KEY if set, otherwise falls back to GEMINI_API_KEY.

        Returns:
            The API key string, or empty string if neither is set.
        """
        return self.google_api_key or self.gemini_api_key


# Singleton instance - import this in your code
settings = Settings()
