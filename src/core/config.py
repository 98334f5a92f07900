"""
Client configuration via pydantic-settings.

Loads values from .env file with sensible defaults for local development.
Use ``get_settings()`` to obtain the cached singleton instance.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """QuickNote client settings loaded from environment / .env file.

    All settings can be overridden via environment variables or a `.env` file.
    Field names map directly to env var names (case-insensitive).

    Attributes:
        api_base_url: Origin of the transcription backend (``/api`` is appended per call).
        request_timeout: Default per-request timeout in seconds.
        transcribe_timeout: Timeout for the upload + transcription request.
        allowed_audio_extensions: File extensions accepted when the media type is not audio/*.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Silently ignore unrecognized env vars
    )

    # --- Backend ---
    api_base_url: str = "http://localhost:8000"
    request_timeout: float = 30.0
    # Transcription runs synchronously on the server, so uploads wait much longer
    transcribe_timeout: float = 600.0

    # --- Workflow ---
    allowed_audio_extensions: list[str] = ["mp3", "wav", "m4a", "ogg", "flac", "aac"]

    # --- Auth ---
    logout_retry_attempts: int = 2  # Transport-level retries for the best-effort logout call

    # --- Application ---
    log_level: str = "INFO"  # Python logging level


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings singleton.

    Uses ``functools.lru_cache`` so the .env file is read only once.
    Subsequent calls return the same ``Settings`` instance.

    Returns:
        Settings: The application-wide configuration object.
    """
    return Settings()
