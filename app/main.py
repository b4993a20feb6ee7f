import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse, StreamingResponse
from redis.asyncio import Redis

from app.assistant import get_agent_response, stream_answer
from app.kibana import get_kibana_client
from app.redis_cache import cache_search, get_cached_search
from app.schemas import (AgentResponse, ChatRequest, LogSearchRequest,
                         RequestContext, SearchResponse)
from app.search import run_search
from app.settings import get_settings, mask_secret
from app.time_range import current_time
from app.tools import MISSING_COOKIE

settings = get_settings()

logger = logging.getLogger('app')
logger.setLevel(settings.LOG_LEVEL)
ch = logging.StreamHandler()
ch.setLevel(settings.LOG_LEVEL)
formatter = logging.Formatter(
    "%(asctime)s [%(levelname)s] %(name)s: %(message)s")
ch.setFormatter(formatter)
logger.addHandler(ch)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f'LLM base URL: {settings.XAI_API_URL}')
    logger.info(f'LLM API key:  {mask_secret(settings.XAI_API_KEY)}')
    logger.info(f'LLM model:    {settings.XAI_MODEL}')
    logger.info(f'Kibana:       {settings.KIBANA_BASE_URL}')
    app.state.redis_client = Redis(
        host=settings.REDIS_HOST, port=settings.REDIS_PORT)
    app.state.kibana_client = get_kibana_client()
    yield
    await app.state.kibana_client.aclose()
    await app.state.redis_client.aclose()

app = FastAPI(lifespan=lifespan)


@app.exception_handler(Exception)
def exception_handler(request: Request, exc: Exception):
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc)},
    )


@app.post('/api/v1/logs/search', response_model=SearchResponse)
async def search(request: Request, search_request: LogSearchRequest):
    redis_client = request.app.state.redis_client
    cached = await get_cached_search(redis_client, search_request)
    if cached:
        return Response(content=cached, media_type='application/json')
    cookie = search_request.cookie or settings.KIBANA_DEFAULT_COOKIE
    if not cookie:
        return SearchResponse(result=MISSING_COOKIE)
    outcome = await run_search(
        search_request,
        RequestContext(cookie=cookie),
        request.app.state.kibana_client,
        current_time(settings.TIMEZONE),
        settings,
    )
    await cache_search(redis_client, search_request, outcome)
    return SearchResponse(result=outcome.text)


@app.post('/api/v1/chat', response_model=AgentResponse)
async def chat(request: Request, chat_request: ChatRequest):
    context = RequestContext(
        cookie=chat_request.cookie,
        namespace=chat_request.namespace,
        container=chat_request.container,
    )
    return await get_agent_response(
        chat_request.message, context, request.app.state.kibana_client)


@app.get('/api/v1/chat/stream')
async def chat_stream(
    request: Request,
    message: str,
    cookie: str = '',
    namespaceName: str = '',
    containerName: str = '',
):
    context = RequestContext(
        cookie=cookie, namespace=namespaceName, container=containerName)

    async def events():
        try:
            async for part in stream_answer(
                    message, context, request.app.state.kibana_client):
                lines = part.split('\n')
                yield ''.join(f'data: {line}\n' for line in lines) + '\n'
        except Exception as e:
            logger.error(f'Chat stream failed: {e}')
            yield f'event: error\ndata: {e}\n\n'

    return StreamingResponse(events(), media_type='text/event-stream')
