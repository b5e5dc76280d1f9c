from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "postgresql+asyncpg://localhost:5432/fitcoach"
    api_key: str | None = None

    # LLM provider (OpenAI-compatible). No retries: a failed completion is a no-progress turn.
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    openai_base_url: str | None = None
    llm_temperature: float = 0.2  # Low: extraction wants stable JSON, not creativity
    llm_chat_temperature: float = 0.7  # Coach chat after registration
    llm_timeout_seconds: float = 30.0

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
