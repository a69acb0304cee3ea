from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import List

class Settings(BaseSettings):
    # OpenRouter (OpenAI-compatible)
    OPENROUTER_API_KEY: str | None = None
    OPENAI_BASE_URL: str = "https://openrouter.ai/api/v1"
    OPENAI_MODEL: str = "openai/gpt-3.5-turbo"
    APP_REFERER: str = "https://github.com/quizapp/quizapp"
    APP_TITLE: str = "Quiz App"
    MOCK_MODE: bool = False
    LLM_TIMEOUT: float = 60.0

    # Generation knobs
    MAX_ATTEMPTS: int = 3
    QUIZ_TEMPERATURE: float = 0.2
    BASE_QUIZ_TOKENS: int = 300
    TOKENS_PER_QUESTION: int = 200
    MAX_QUIZ_TOKENS: int = 16000
    EXPLAIN_TEMPERATURE: float = 0.3
    EXPLAIN_MAX_TOKENS: int = 400

    # Safety/abuse knobs
    RATE_LIMIT: str = "30/minute"

    # CORS
    ALLOW_ORIGINS: List[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"]
    )

    # Optional extra frontend
    FRONTEND_ORIGIN: str | None = None

    # Identity
    AUTH_JWT_SECRET: str | None = None
    AUTH_JWT_ALGORITHM: str = "HS256"

    PORT: int = 5000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

settings = Settings()
if settings.FRONTEND_ORIGIN:
    settings.ALLOW_ORIGINS.append(settings.FRONTEND_ORIGIN)
