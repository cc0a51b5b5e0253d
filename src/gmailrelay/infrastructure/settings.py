"""Application settings using Pydantic Settings for configuration management."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Gmail Relay"
    app_version: str = "0.1.0"
    log_level: str = "INFO"

    # Google OAuth (Gmail API)
    google_client_id: str | None = None
    google_client_secret: SecretStr | None = None
    google_refresh_token: SecretStr | None = None
    google_token_uri: str = "https://oauth2.googleapis.com/token"

    # Gmail
    gmail_user_id: str = "me"
    gmail_label_ids: list[str] = Field(default_factory=lambda: ["INBOX"])
    max_part_depth: int = 32

    # Pub/Sub
    gcp_project_id: str | None = None
    pubsub_topic_name: str | None = None
    pubsub_subscription_name: str | None = None
    pubsub_service_account_path: str | None = None

    # Watermark persistence
    watermark_backend: Literal["file", "sqlite"] = "file"
    watermark_path: str = "data/lastHistoryId.json"

    # Ingestion
    dedup_reset_hours: float = 24.0
    listen_max_results: int = 1
    recovery_max_results: int = 10
    recovery_window_hours: float = 24.0
    recover_on_startup: bool = False

    @computed_field
    @property
    def subscription_path(self) -> str | None:
        """Fully qualified Pub/Sub subscription path."""
        name = self.pubsub_subscription_name
        if not name or name.startswith("projects/") or not self.gcp_project_id:
            return name
        return f"projects/{self.gcp_project_id}/subscriptions/{name}"

    @computed_field
    @property
    def topic_path(self) -> str | None:
        """Fully qualified Pub/Sub topic path used by users.watch."""
        name = self.pubsub_topic_name
        if not name or name.startswith("projects/") or not self.gcp_project_id:
            return name
        return f"projects/{self.gcp_project_id}/topics/{name}"

    @computed_field
    @property
    def recovery_label_id(self) -> str | None:
        """Label gap recovery filters on. Gmail history accepts a single label."""
        return self.gmail_label_ids[0] if self.gmail_label_ids else None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
