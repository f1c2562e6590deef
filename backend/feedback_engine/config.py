"""Application configuration via environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """AI Feedback Engine settings."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./feedback.db"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    # Ollama
    ollama_url: str = "http://localhost:11434"
    ollama_model: str = "llama3:8b-instruct-q4_0"
    ollama_timeout_seconds: float = 60.0
    llm_enabled: bool = True

    # Classification call
    classify_max_tokens: int = 200
    classify_temperature: float = 0.3

    # Suggestion call
    suggest_max_tokens: int = 300
    suggest_temperature: float = 0.5

    # Daily digest
    digest_enabled: bool = True
    digest_hour_utc: int = Field(9, ge=0, le=23)

    # Bug report footer
    dashboard_url: str = "http://localhost:8400/"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8400
    cors_origins: str = "*"
    log_level: str = "INFO"

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
