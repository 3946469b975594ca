# tvcatalog/core/settings.py
from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # --- DB / cache ---
    database_url: Optional[str] = Field(default=None, alias="DATABASE_URL")  # e.g. postgresql+asyncpg://...
    database_url_sync: Optional[str] = Field(default=None, alias="DATABASE_URL_SYNC")  # Alembic (psycopg)
    db_pool_size: int = Field(default=15, alias="DB_POOL_SIZE")
    redis_url: str = Field(default="redis://localhost:6379/0", alias="REDIS_URL")

    # --- API ---
    require_api_key: bool = Field(default=True, alias="REQUIRE_API_KEY")
    stats_cache_ttl: int = Field(default=3600, alias="STATS_CACHE_TTL")
    # Comma separated, e.g. "http://localhost:5173,https://tv.example.com"
    cors_origins: str = Field(default="http://localhost:5173", alias="CORS_ORIGINS")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    @property
    def cors_origin_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

settings = Settings()
