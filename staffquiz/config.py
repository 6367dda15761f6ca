from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    PROJECT_NAME: str = "Staff Quiz Portal"
    API_VERSION: str = "0.1.0"
    ENV: str = "development"
    FRONTEND_URL: str = "http://localhost:5173"

    # database
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "staffquiz"
    DATABASE_URL: Optional[str] = None  # overrides the POSTGRES_* settings when set

    # auth
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12

    LOG_LEVEL: str = "INFO"


settings = Settings()
