import hashlib
import logging

from redis.asyncio import Redis

from app.schemas import LogSearchRequest, SearchOutcome, SearchResponse
from app.settings import get_settings

settings = get_settings()

logger = logging.getLogger(__name__)

KEY_PREFIX = 'cache:logs-search'


def is_cacheable(search_request: LogSearchRequest) -> bool:
    # a defaulted range moves with the clock
    return bool(search_request.start_time and search_request.end_time)


def build_cache_key(search_request: LogSearchRequest) -> str:
    raw = search_request.model_dump_json()
    digest = hashlib.sha256(raw.encode()).hexdigest()[:16]
    return f'{KEY_PREFIX}:{digest}'


async def get_cached_search(
    redis_client: Redis,
    search_request: LogSearchRequest,
) -> str | None:
    if not is_cacheable(search_request):
        return None
    data = await redis_client.get(build_cache_key(search_request))
    if data:
        return data.decode('utf-8')


async def cache_search(
    redis_client: Redis,
    search_request: LogSearchRequest,
    outcome: SearchOutcome,
) -> None:
    """Store a search digest; failures are never cached."""
    if not outcome.ok or not is_cacheable(search_request):
        return
    cache_key = build_cache_key(search_request)
    json_data = SearchResponse(result=outcome.text).model_dump_json()
    await redis_client.set(cache_key, json_data, ex=settings.REDIS_CACHE_TTL)
    logger.debug(f'Cached search result under {cache_key}')
