"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache): single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: memory database + local vector stores
      work out-of-the-box with only ANTHROPIC_API_KEY set
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

from chainlab.core.domain_types import DatabaseBackend


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_backend: DatabaseBackend = DatabaseBackend.MEMORY
    json_db_path: str = "data/database/store.json"
    database_url: str = "sqlite+aiosqlite:///data/database/chainlab.db"
    database_seed_sample: bool = False

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted Postgres URLs come as postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Anthropic
    anthropic_api_key: str = "sk-ant-placeholder"
    anthropic_max_retries: int = 3
    anthropic_timeout_seconds: int = 60
    anthropic_base_delay_ms: int = 1000
    anthropic_max_delay_ms: int = 60_000

    # Models
    agent_model: str = "claude-sonnet-4-5"
    llm_temperature: float = 0.3
    llm_max_tokens: int = 800
    agent_max_iterations: int = 5
    agent_max_tokens: int = 2048

    # Retrieval
    vector_store_dir: str = "data/vector_stores"
    default_store_name: str = "default_vector_store"
    embedding_dimension: int = 384
    chunk_size: int = 500
    chunk_overlap: int = 50
    similarity_threshold: float = 0.6
    max_query_chars: int = 1000
    memory_max_turns: int = 20

    # Uploads
    max_upload_files: int = 10
    max_upload_bytes: int = 10 * 1024 * 1024

    # Weather (QWeather)
    qweather_key: str = ""
    qweather_geo_url: str = "https://geoapi.qweather.com/v2/city/lookup"
    qweather_api_url: str = "https://devapi.qweather.com/v7"
    qweather_timeout_seconds: float = 10.0

    # Web search (Serper)
    serper_api_key: str = ""
    serper_search_url: str = "https://google.serper.dev/search"
    web_search_cache_ttl_seconds: int = 3600
    web_search_max_results: int = 3

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
