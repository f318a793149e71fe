"""Work Tracker configuration (loaded from environment / .env file)."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="WORKTRACKER_", extra="ignore")

    env: str = "development"
    database_url: str = "sqlite+aiosqlite:///./worktracker.db"
    log_level: str = "INFO"

    # Vault key: 32 characters of text or 64 hex digits. When unset a random
    # key is drawn at startup and stored passwords do not survive a restart.
    encryption_key: str | None = None

    @property
    def has_encryption_key(self) -> bool:
        return bool(self.encryption_key)


settings = Settings()
