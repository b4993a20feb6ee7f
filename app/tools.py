import json
import logging

from pydantic import ValidationError

from app.kibana import KibanaClient
from app.schemas import RequestContext, SearchRequest
from app.search import search_logs
from app.settings import get_settings
from app.time_range import current_time

settings = get_settings()

logger = logging.getLogger(__name__)

MISSING_COOKIE = (
    '错误：未提供 Kibana Cookie，请在页面设置中配置 Cookie，'
    '或在配置中设置 KIBANA_DEFAULT_COOKIE。'
)

SEARCH_LOGS_TOOL = {
    'type': 'function',
    'function': {
        'name': 'searchLogs',
        'description': (
            '查询应用日志。当用户想要查找、搜索、检索日志信息时调用此工具。'
            '可以根据关键词、时间范围和索引名进行搜索。'
            '支持多个关键词用空格分隔，会同时匹配所有关键词。'
        ),
        'parameters': {
            'type': 'object',
            'properties': {
                'keyword': {
                    'type': 'string',
                    'description': (
                        '搜索关键词，如错误信息、交易号、类名等。'
                        '多个关键词用空格分隔。'
                    ),
                },
                'startTime': {
                    'type': 'string',
                    'description': (
                        '查询开始时间，ISO 8601 格式，如 2026-02-13T00:00:00Z。'
                        '不指定则默认最近24小时。'
                    ),
                },
                'endTime': {
                    'type': 'string',
                    'description': (
                        '查询结束时间，ISO 8601 格式，如 2026-02-14T00:00:00Z。'
                        '不指定则默认当前时间。'
                    ),
                },
                'index': {
                    'type': 'string',
                    'description': (
                        'Elasticsearch 索引名称，如 app_logs_index。'
                        '不指定则使用默认索引。'
                    ),
                },
                'size': {
                    'type': 'integer',
                    'description': '返回的日志条数，默认100，最大500。',
                },
            },
            'required': ['keyword'],
        },
    },
}

TOOLS = [SEARCH_LOGS_TOOL]


async def run_search_logs_tool(
    arguments: str | dict,
    context: RequestContext,
    client: KibanaClient,
) -> str:
    cookie = context.cookie
    if not cookie or not cookie.strip():
        cookie = settings.KIBANA_DEFAULT_COOKIE
        if not cookie or not cookie.strip():
            return MISSING_COOKIE
        logger.info('No cookie on request, using KIBANA_DEFAULT_COOKIE')

    try:
        if isinstance(arguments, str):
            arguments = json.loads(arguments or '{}')
        # scope is owned by the request context, never by the model
        arguments = {
            key: value for key, value in arguments.items()
            if key not in ('namespace', 'container')
        }
        search_request = SearchRequest.model_validate(arguments)
    except (ValueError, ValidationError, AttributeError) as e:
        logger.error(f'Invalid searchLogs arguments {arguments!r}: {e}')
        return f'查询失败: 参数无效 {e}'

    logger.info(f'Assistant called searchLogs: {arguments}')
    return await search_logs(
        search_request,
        context.model_copy(update={'cookie': cookie}),
        client,
        current_time(settings.TIMEZONE),
        settings,
    )


async def execute_tool_call(
    name: str,
    arguments: str,
    context: RequestContext,
    client: KibanaClient,
) -> str:
    if name != SEARCH_LOGS_TOOL['function']['name']:
        return f'未知工具: {name}'
    return await run_search_logs_tool(arguments, context, client)
