from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./career_assessment.db"

    # Generative AI
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o-mini"
    AI_TEMPERATURE: float = 0.7
    AI_MAX_RETRIES: int = 3
    AI_BACKOFF_BASE_SECONDS: float = 1.0
    AI_BACKOFF_MAX_SECONDS: float = 10.0

    # Assessment / chat
    TOTAL_QUESTIONS: int = 85
    CHAT_CONTEXT_WINDOW: int = 10

    # Background tasks
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/0"

    # Email
    SENDGRID_API_KEY: str = ""
    FROM_EMAIL: str = "no-reply@careerassessment.app"
    FRONTEND_URL: str = "http://localhost:5173"

    CORS_ORIGINS: List[str] = ["http://localhost:5173"]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
