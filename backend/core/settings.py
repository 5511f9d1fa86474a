from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings

from domain.exceptions import ConfigurationError


class Settings(BaseSettings):
    openai_api_key: Optional[str] = None
    tmdb_api_key: Optional[str] = None
    pgvector_url: Optional[str] = None
    vector_store_backend: Literal["pgvector", "memory"] = "pgvector"

    embedding_model: str = "text-embedding-ada-002"
    embedding_dimensions: int = 1536
    chat_model: str = "gpt-5-chat-latest"
    temperature: float = 0.7
    presence_penalty: float = 0.0
    frequency_penalty: float = 0.5

    # Product-tuned retrieval knobs
    match_count: int = Field(default=1, ge=1)
    match_threshold: float = Field(default=0.5, ge=-1.0, le=1.0)

    request_timeout_seconds: float = 30.0
    stage_timeout_seconds: float = 60.0

    corpus_path: Optional[str] = None
    chunk_size: int = 150
    chunk_overlap: int = 10

    dev_mode: bool = True

    class Config:
        env_file = ".env"
        extra = "ignore"

    def validate_credentials(self) -> None:
        missing = []
        if not self.openai_api_key:
            missing.append("OPENAI_API_KEY")
        if not self.tmdb_api_key:
            missing.append("TMDB_API_KEY")
        if self.vector_store_backend == "pgvector" and not self.pgvector_url:
            missing.append("PGVECTOR_URL")
        if missing:
            raise ConfigurationError(f"Missing required settings: {', '.join(missing)}")


@lru_cache
def get_settings() -> Settings:
    return Settings()
