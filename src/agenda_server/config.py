"""Configuration module for agenda-server using pydantic-settings."""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AgendaServerSettings(BaseSettings):
    """Main configuration settings for agenda-server.

    All settings can be overridden via environment variables with the AGENDA_ prefix.
    For example, AGENDA_OLLAMA_HOST will override the ollama_host setting.
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    mode: Literal["server", "console", "telegram"] = "server"

    # Ollama
    ollama_host: str = "http://localhost:11434"
    model: str = "qwen3:8b"
    request_timeout_seconds: float = 120.0

    # Orchestration
    max_tool_iterations: int = Field(default=5, ge=1)
    # Messages sent to the model besides the system prompt (0 = whole history)
    max_history_messages: int = Field(default=40, ge=0)
    system_prompt: str | None = None
    system_prompt_file: str | None = None

    # Scheduling
    default_timezone: str = "Europe/Madrid"
    default_event_duration_minutes: int = Field(default=60, ge=1)
    upcoming_events_limit: int = Field(default=10, ge=1)

    # Calendar backend
    calendar_backend: Literal["google", "memory"] = "google"
    calendar_id: str = "primary"
    calendar_timeout_seconds: float = 30.0
    data_dir: str = "."
    google_client_id: str | None = None
    google_client_secret: str | None = None
    google_client_secrets_file: str | None = None
    google_token_file: str = "token.json"
    google_interactive_auth: bool = True
    auth_timeout_seconds: float = 300.0

    # Telegram
    telegram_bot_token: str | None = None

    # CORS
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="AGENDA_")

    # --- Resolved paths (computed from data_dir + relative paths) ---

    @property
    def resolved_google_token_file(self) -> Path:
        """Get the full path to the cached Google token."""
        return Path(self.data_dir) / self.google_token_file

    @property
    def resolved_google_client_secrets_file(self) -> Path | None:
        """Get the full path to the Google client secrets file, if configured."""
        if not self.google_client_secrets_file:
            return None
        return Path(self.data_dir) / self.google_client_secrets_file

    @property
    def resolved_system_prompt_file(self) -> Path | None:
        """Get the full path to the system prompt file, if configured."""
        if not self.system_prompt_file:
            return None
        return Path(self.data_dir) / self.system_prompt_file
