import json
import logging
from datetime import datetime

from app.errors import EmptyResponseError, ParseError, TransportError
from app.kibana import KibanaClient
from app.query_builder import build_search_request
from app.response_parser import parse_search_response
from app.schemas import RequestContext, SearchOutcome, SearchRequest
from app.settings import Settings, get_settings
from app.summarizer import summarize
from app.time_range import resolve_time_range

logger = logging.getLogger(__name__)

EMPTY_RESPONSE = '查询失败：Kibana 返回了空响应。'


async def run_search(
    search_request: SearchRequest,
    context: RequestContext,
    client: KibanaClient,
    now: datetime,
    settings: Settings | None = None,
) -> SearchOutcome:
    """Run one log search end to end.

    The outcome always carries text; ``ok`` is False when Kibana failed
    or its response could not be read.

    Namespace, container and cookie come from ``context``; any scope set
    on ``search_request`` itself takes precedence. Nothing raises past
    this function.
    """
    settings = settings or get_settings()
    index = search_request.index
    if not index or not index.strip():
        index = settings.KIBANA_DEFAULT_INDEX
    namespace = search_request.namespace or context.namespace
    container = search_request.container or context.container
    try:
        time_range = resolve_time_range(
            search_request.start_time,
            search_request.end_time,
            now,
            settings.TIMEZONE,
        )
        payload = build_search_request(
            search_request.keyword,
            time_range.start,
            time_range.end,
            index,
            search_request.size,
            namespace,
            container,
        )
        logger.info(
            f'Kibana search: index={index}, '
            f'keyword={search_request.keyword}, '
            f'timeRange=[{time_range.start} ~ {time_range.end}], '
            f'size={search_request.size}')
        logger.debug(f'Kibana request body: {json.dumps(payload)}')

        raw = await client.bsearch(payload, context.cookie or '')
        logger.debug(f'Kibana raw response: {raw}')

        parsed = parse_search_response(raw)
        text = summarize(
            parsed.hits,
            parsed.total,
            settings.SUMMARY_MAX_ENTRIES,
            settings.SUMMARY_MAX_MESSAGE_LENGTH,
        )
    except EmptyResponseError:
        logger.error('Kibana returned an empty response')
        return SearchOutcome(text=EMPTY_RESPONSE, ok=False)
    except TransportError as e:
        logger.error(f'Kibana search failed: {e.reason}')
        return SearchOutcome(text=f'查询失败: {e.reason}', ok=False)
    except ParseError as e:
        logger.error(f'Failed to parse Kibana response: {e.reason}')
        return SearchOutcome(
            text=f'解析日志结果失败: {e.reason}\n原始响应: {e.snippet}',
            ok=False)
    except Exception as e:
        logger.exception(f'Kibana search failed: {e}')
        return SearchOutcome(text=f'查询失败: {e}', ok=False)
    return SearchOutcome(text=text, ok=True)


async def search_logs(
    search_request: SearchRequest,
    context: RequestContext,
    client: KibanaClient,
    now: datetime,
    settings: Settings | None = None,
) -> str:
    outcome = await run_search(search_request, context, client, now, settings)
    return outcome.text
