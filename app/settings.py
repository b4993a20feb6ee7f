from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / '.env', env_file_encoding='utf-8'
    )

    KIBANA_BASE_URL: str | None = 'http://localhost:5601'
    KIBANA_VERSION: str | None = '8.11.0'
    KIBANA_DEFAULT_INDEX: str | None = 'app_logs_index'
    KIBANA_DEFAULT_COOKIE: str | None = ''
    KIBANA_TIMEOUT: float | None = 30.0
    SEARCH_DEFAULT_SIZE: int | None = 100
    SEARCH_MAX_SIZE: int | None = 500
    SUMMARY_MAX_ENTRIES: int | None = 50
    SUMMARY_MAX_MESSAGE_LENGTH: int | None = 500
    TIMEZONE: str | None = 'Asia/Shanghai'
    XAI_API_KEY: str | None = 'not-set'
    XAI_API_URL: str | None = 'https://api.x.ai/v1'
    XAI_MODEL: str | None = 'grok-4-1-fast-reasoning'
    XAI_TEMP: float | None = 0.7
    XAI_MAX_TOKENS: int | None = 3000
    XAI_MAX_RETRIES: int | None = 3
    XAI_MAX_TOOL_ROUNDS: int | None = 5
    REDIS_HOST: str | None = "localhost"
    REDIS_PORT: int | None = 6379
    REDIS_CACHE_TTL: int | None = 600
    LOG_LEVEL: str | None = 'INFO'


@lru_cache
def get_settings():
    return Settings()


def mask_secret(value: str) -> str:
    if len(value) > 8:
        return f'{value[:5]}***{value[-3:]}'
    return '***'
