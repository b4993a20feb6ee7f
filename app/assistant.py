import logging
from collections.abc import AsyncIterator
from functools import lru_cache

from openai import AsyncOpenAI

from app.kibana import KibanaClient
from app.schemas import AgentResponse, RequestContext
from app.settings import get_settings
from app.time_range import current_time
from app.tools import TOOLS, execute_tool_call

settings = get_settings()

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """你是一个智能日志查询助手，专门帮助用户查询和分析应用日志。

你的核心能力：
1. 理解用户的自然语言查询意图，提取关键词、时间范围等查询条件
2. 调用 searchLogs 工具查询 Kibana 中的日志
3. 分析和总结查询到的日志内容，给出有价值的洞察

使用规则：
- 当用户想查询日志时，调用 searchLogs 工具
- 时间格式使用 ISO 8601（如 2026-02-13T00:00:00Z）
- 如果用户说"最近1小时"、"今天"、"昨天"等相对时间，请根据当前时间计算具体时间范围。当前时间会在用户消息中提供。
- 查询结果返回后，请对日志进行总结分析，包括：
  * 错误数量和类型统计
  * 主要问题描述
  * 可能的原因分析
  * 建议的排查方向
- 如果用户没提供索引名，使用默认索引
- 如果用户问的不是日志相关问题，正常回答即可
"""


@lru_cache(maxsize=1)
def get_llm_client() -> AsyncOpenAI:
    # 429 retries with exponential backoff are handled by the client
    return AsyncOpenAI(
        api_key=settings.XAI_API_KEY,
        base_url=settings.XAI_API_URL,
        max_retries=settings.XAI_MAX_RETRIES,
    )


def build_messages(message: str, now_iso: str) -> list[dict]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": f"[当前时间: {now_iso}]\n\n{message}"},
    ]


def merge_tool_call_delta(pending: dict, call) -> None:
    slot = pending.setdefault(
        call.index, {"id": None, "name": "", "arguments": ""})
    if call.id:
        slot["id"] = call.id
    if call.function is not None:
        if call.function.name:
            slot["name"] += call.function.name
        if call.function.arguments:
            slot["arguments"] += call.function.arguments


async def stream_answer(
    message: str,
    context: RequestContext,
    kibana_client: KibanaClient,
    llm_client: AsyncOpenAI | None = None,
) -> AsyncIterator[str]:
    """Yield answer text while resolving searchLogs calls in between.

    The last allowed round is sent without tools so the model has to
    answer in plain text.
    """
    llm_client = llm_client or get_llm_client()
    now_iso = current_time(settings.TIMEZONE).isoformat(timespec='seconds')
    messages = build_messages(message, now_iso)
    logger.info(f'Chat request: message={message}')

    for round_number in range(settings.XAI_MAX_TOOL_ROUNDS):
        params = dict(
            model=settings.XAI_MODEL,
            messages=messages,
            temperature=settings.XAI_TEMP,
            max_tokens=settings.XAI_MAX_TOKENS,
            stream=True,
        )
        if round_number < settings.XAI_MAX_TOOL_ROUNDS - 1:
            params["tools"] = TOOLS
        stream = await llm_client.chat.completions.create(**params)

        content = []
        pending = {}
        async for chunk in stream:
            if not chunk.choices:
                continue
            delta = chunk.choices[0].delta
            if delta.content:
                content.append(delta.content)
                yield delta.content
            for call in delta.tool_calls or []:
                merge_tool_call_delta(pending, call)

        if not pending:
            logger.info('Chat response complete')
            return

        calls = [pending[key] for key in sorted(pending)]
        messages.append({
            "role": "assistant",
            "content": "".join(content) or None,
            "tool_calls": [
                {
                    "id": call["id"],
                    "type": "function",
                    "function": {
                        "name": call["name"],
                        "arguments": call["arguments"],
                    },
                } for call in calls
            ],
        })
        for call in calls:
            result = await execute_tool_call(
                call["name"], call["arguments"], context, kibana_client)
            messages.append({
                "role": "tool",
                "tool_call_id": call["id"],
                "content": result,
            })


async def get_agent_response(
    message: str,
    context: RequestContext,
    kibana_client: KibanaClient,
    llm_client: AsyncOpenAI | None = None,
) -> AgentResponse:
    parts = [
        part async for part in stream_answer(
            message, context, kibana_client, llm_client)
    ]
    return AgentResponse(answer="".join(parts))
