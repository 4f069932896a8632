from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)

    # Database
    DATABASE_URL: str = "sqlite:///./adega.db"
    SQL_ECHO: bool = False
    DB_CONNECT_RETRIES: int = 2

    # Application
    APP_NAME: str = "Adega Consignment"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    # CORS
    ALLOWED_ORIGINS: List[str] = ["*"]  # Restrict in production

    # Ledger rows created by a delivery start with this threshold
    DEFAULT_MINIMUM_ALERT: int = 5


settings = Settings()
