# kiranawala/core/config.py - Remote store, local cache and business defaults

from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    # Remote row-store (PostgREST compatible)
    SUPABASE_URL: str = "http://localhost:54321"
    SUPABASE_ANON_KEY: str = ""
    SUPABASE_ACCESS_TOKEN: Optional[str] = None
    REMOTE_TIMEOUT_SECONDS: float = 5.0

    # Embedded local cache
    LOCAL_CACHE_URL: str = "sqlite:///./kiranawala_cache.db"

    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    # Store discovery
    DEFAULT_RADIUS_KM: float = 5.0
    SEARCH_RADIUS_KM: float = 5.0  # search always uses this, whatever radius the caller browses with

    # Business rules
    DEFAULT_STORE_RATING: float = 4.5
    DEFAULT_DELIVERY_FEE: float = 30.0
    DEFAULT_MINIMUM_ORDER_VALUE: float = 100.0
    MAX_REVIEW_COMMENT_LENGTH: int = 500

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"

settings = Settings()
