"""Application configuration."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SupabaseSettings(BaseModel):
    """Remote data/auth API configuration."""

    url: str = "http://localhost:54321"
    # Anonymous (public) API key; row level security does the real gating
    anon_key: str = "CHANGE_ME_IN_PRODUCTION"
    comments_table: str = "guestbook"
    admins_table: str = "admins"
    timeout: float = 10.0


class CommentSettings(BaseModel):
    """Comment tree configuration."""

    # Replies deeper than this are flattened to the top level
    max_depth: int = Field(default=5, ge=0)

    # When True, replying to a comment already at max_depth is rejected
    # instead of being flattened
    reject_beyond_max_depth: bool = False

    max_author_length: int = 20
    max_content_length: int = 500

    # Root threads per page
    per_page: int = Field(default=10, ge=1)

    # Maximum number of records fetched per load
    fetch_limit: int = 100

    # Optional JSON file holding the last good flat list.
    # Only read when a remote load fails and nothing is held in memory.
    cache_path: Path | None = None
    cache_ttl_seconds: int = 300


class ObservabilitySettings(BaseModel):
    """Observability configuration for Logfire."""

    # Logfire API token (optional - if not set, logs only go to console)
    # Can be set via OBSERVABILITY__LOGFIRE_TOKEN env var
    logfire_token: str | None = None

    # If None, sends when a token is present, otherwise console-only
    send_to_logfire: bool | None = None


class Settings(BaseSettings):
    """Application settings.

    Set environment variables to override, using ``__`` for nested values:

        SUPABASE__URL=https://xyz.supabase.co
        SUPABASE__ANON_KEY=...
        COMMENTS__MAX_DEPTH=3
        COMMENTS__CACHE_PATH=/var/cache/guestbook.json
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",  # Allows SUPABASE__URL syntax
    )

    environment: Literal["test", "development", "staging", "production"] = "development"
    debug: bool = False

    # Git commit SHA (loaded from version.txt file or defaults to "unknown")
    git_sha: str = "unknown"

    host: str = "localhost"
    port: int = 8000

    # Origins allowed to call the API from a browser
    allowed_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Nested settings
    supabase: SupabaseSettings = SupabaseSettings()
    comments: CommentSettings = CommentSettings()
    observability: ObservabilitySettings = ObservabilitySettings()

    @model_validator(mode="after")
    def load_git_sha(self) -> "Settings":
        """Load git SHA from version file if it exists."""
        if self.git_sha == "unknown":
            self.git_sha = self._load_git_sha()
        return self

    @staticmethod
    def _load_git_sha() -> str:
        """Load git SHA from version file.

        Returns:
            Git SHA if version file exists, otherwise "unknown"
        """
        version_file = Path("/app/version.txt")
        if version_file.exists():
            try:
                return version_file.read_text().strip()
            except OSError:
                return "unknown"
        return "unknown"
