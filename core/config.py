import os
from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional

# .env is a dev convenience; production gets real environment variables
if os.getenv("APP_ENV") != "production":
    load_dotenv()


class Settings(BaseSettings):
    APP_ENV: str = "development"

    # Tenants: JSON object of name -> callback config
    CALLBACK_CONFIGS: Optional[str] = None
    CALLBACK_CONFIGS_FILE: Optional[str] = None

    # Logging
    DEBUG_LOGGING: bool = False
    LOG_FILE: Optional[str] = None

    # Server
    PORT: int = 4000

    # Seconds; applies to the bypass question-answering API
    EXTERNAL_API_TIMEOUT: float = 10.0

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


settings = Settings()
