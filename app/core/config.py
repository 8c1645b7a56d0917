from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # Database (in-memory SQLite unless overridden)
    DATABASE_URL: str = "sqlite://"
    DATABASE_ECHO: bool = False

    # Security
    PASSWORD_SCHEMES: List[str] = ["argon2"]

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    # Project info
    PROJECT_NAME: str = "TaskBoard API"
    VERSION: str = "1.0.0"
    DESCRIPTION: str = "User accounts and task tracking over a relational store"

    # Populate sample users and tasks on startup
    SEED_SAMPLE_DATA: bool = False

    class Config:
        env_file = ".env"


settings = Settings()
