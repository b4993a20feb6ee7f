import json

from app.schemas import SearchHit, SearchResult
from app.settings import get_settings

settings = get_settings()

NO_RESULTS = '未找到匹配的日志记录。'
ELLIPSIS = '...'


def first_value(fields: dict, name: str) -> str | None:
    values = fields.get(name)
    if isinstance(values, list) and values:
        value = values[0]
        if isinstance(value, str):
            return value
        # JSON spelling: null, true, {"k": 1}
        return json.dumps(value, ensure_ascii=False)
    return None


def project_hit(hit: dict, max_message_length: int) -> SearchHit:
    fields = hit.get('fields')
    if not isinstance(fields, dict):
        fields = {}
    message = first_value(fields, 'message')
    if message is not None and len(message) > max_message_length:
        message = message[:max_message_length] + ELLIPSIS
    level = first_value(fields, 'level')
    if level is None and 'level' not in fields:
        level = first_value(fields, 'log.level')
    return SearchHit(
        timestamp=first_value(fields, '@timestamp'),
        message=message,
        level=level,
    )


def build_result(
    hits: list[dict],
    total: int,
    max_entries: int = settings.SUMMARY_MAX_ENTRIES,
    max_message_length: int = settings.SUMMARY_MAX_MESSAGE_LENGTH,
) -> SearchResult:
    entries = [
        project_hit(hit, max_message_length) for hit in hits[:max_entries]]
    return SearchResult(
        total=total, entries=entries, truncated=total > max_entries)


def render_entry(position: int, entry: SearchHit) -> str:
    line = f'[{position}] '
    if entry.timestamp is not None:
        line += f'时间: {entry.timestamp} | '
    if entry.message is not None:
        line += f'内容: {entry.message}'
    if entry.level is not None:
        line += f' | 级别: {entry.level}'
    return line


def render(result: SearchResult, max_entries: int) -> str:
    if not result.entries:
        return NO_RESULTS
    header = f'共找到 {result.total} 条日志记录'
    if result.truncated:
        header += f'（以下展示最近 {max_entries} 条）'
    blocks = [
        render_entry(position, entry)
        for position, entry in enumerate(result.entries, start=1)
    ]
    return header + '：\n\n' + '\n\n'.join(blocks)


def summarize(
    hits: list[dict],
    total: int,
    max_entries: int = settings.SUMMARY_MAX_ENTRIES,
    max_message_length: int = settings.SUMMARY_MAX_MESSAGE_LENGTH,
) -> str:
    result = build_result(hits, total, max_entries, max_message_length)
    return render(result, max_entries)
