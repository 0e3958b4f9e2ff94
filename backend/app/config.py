from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENV_FILE = Path(__file__).resolve().parent.parent / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
    )

    APP_NAME: str = "ProjectManagement"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str

    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Upload service receives regulation change events; empty disables delivery
    UPLOAD_SERVICE_URL: str = ""
    NOTIFY_TIMEOUT_SECONDS: float = 2.0

    SEED_REGULATION_TYPES: bool = True

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]


settings = Settings()
