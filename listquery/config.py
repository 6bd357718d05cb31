from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_parse_none_str="none",
    )

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./listquery.db"

    # Logging
    LOG_LEVEL: str = "info"


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
