"""Application configuration."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from constants import DEFAULT_USD_TO_AED_RATE


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application
    app_env: str = "development"
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./container_ledger.db"
    db_echo: bool = False

    # Currency (origin market USD -> destination market AED)
    usd_to_aed_rate: float = DEFAULT_USD_TO_AED_RATE

    # Document storage
    upload_dir: str = "./uploads"
    max_upload_bytes: int = 20 * 1024 * 1024

    # Ledger rules
    enforce_status_transitions: bool = True
    gate_sales_on_completed: bool = True

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.app_env == "development"

    def validate_required_settings(self) -> list[str]:
        """
        Validate that all required settings are configured.

        Returns:
            List of missing or invalid settings
        """
        errors = []

        if not self.database_url:
            errors.append("DATABASE_URL is required")

        if self.usd_to_aed_rate <= 0:
            errors.append("usd_to_aed_rate must be positive")

        if not self.upload_dir:
            errors.append("UPLOAD_DIR is required")

        if self.max_upload_bytes <= 0:
            errors.append("max_upload_bytes must be positive")

        return errors


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
