from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False  # True for production (structured JSON), False for dev (colored)
    
    # Metadata cache
    META_CACHE_DIR: str | None = None  # File-backed metadata cache when set, in-memory otherwise
    
    # Binding defaults
    CAST_MODE: str = "loose"  # loose, strict or permissive
    DATETIME_FORMAT: str | None = None  # strftime format; ISO-8601 when unset
    MAX_DEPTH: int = 10
    
    @property
    def uses_file_cache(self) -> bool:
        return bool(self.META_CACHE_DIR)
    
    class Config:
        env_prefix = "BINDERY_"
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
