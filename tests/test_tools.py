import json
from unittest.mock import patch

from app.schemas import RequestContext
from app.tools import (MISSING_COOKIE, SEARCH_LOGS_TOOL, execute_tool_call,
                       run_search_logs_tool)
from tests.conftest import make_envelope, sent_payload


def test_tool_schema_exposes_only_model_parameters():
    properties = SEARCH_LOGS_TOOL["function"]["parameters"]["properties"]
    assert set(properties) == {"keyword", "startTime", "endTime", "index", "size"}


async def test_missing_cookie_returns_error_text(kibana_factory, recorded_requests):
    client = kibana_factory(body=make_envelope([], 0))
    with patch("app.tools.settings.KIBANA_DEFAULT_COOKIE", ""):
        text = await run_search_logs_tool(
            '{"keyword": "ERROR"}', RequestContext(), client)
    assert text == MISSING_COOKIE
    assert recorded_requests == []


async def test_default_cookie_is_used(kibana_factory, recorded_requests):
    client = kibana_factory(body=make_envelope([], 0))
    with patch("app.tools.settings.KIBANA_DEFAULT_COOKIE", "sid=default"):
        await run_search_logs_tool(
            '{"keyword": "ERROR"}', RequestContext(cookie=" "), client)
    assert recorded_requests[0].headers["Cookie"] == "sid=default"


async def test_scope_comes_from_context_not_arguments(
        kibana_factory, recorded_requests):
    client = kibana_factory(body=make_envelope([], 0))
    arguments = json.dumps({
        "keyword": "timeout",
        "startTime": "2026-02-13T00:00:00Z",
        "endTime": "2026-02-14T00:00:00Z",
        "size": 20,
        "namespace": "hijacked",
    })
    context = RequestContext(cookie="sid=abc", namespace="payments")
    await run_search_logs_tool(arguments, context, client)

    body = sent_payload(recorded_requests[0])["batch"][0]["request"]["params"]["body"]
    clauses = body["query"]["bool"]["filter"]
    assert body["size"] == 20
    assert clauses[1]["range"]["@timestamp"]["gte"] == "2026-02-13T00:00:00Z"
    assert clauses[2] == {"match": {"kubernetes.namespace_name": "payments"}}


async def test_invalid_arguments_return_text(kibana_factory):
    client = kibana_factory(body=make_envelope([], 0))
    text = await run_search_logs_tool(
        "{not json", RequestContext(cookie="sid=abc"), client)
    assert text.startswith("查询失败: 参数无效")


async def test_unknown_tool(kibana_factory):
    client = kibana_factory(body=make_envelope([], 0))
    text = await execute_tool_call(
        "dropIndex", "{}", RequestContext(cookie="sid=abc"), client)
    assert text == "未知工具: dropIndex"


async def test_long_keyword_still_searches(kibana_factory, recorded_requests):
    client = kibana_factory(body=make_envelope([], 0))
    trace = "java.lang.IllegalStateException:" + "x" * 800
    text = await run_search_logs_tool(
        json.dumps({"keyword": trace}), RequestContext(cookie="sid=abc"), client)

    assert text == "未找到匹配的日志记录。"
    body = sent_payload(recorded_requests[0])["batch"][0]["request"]["params"]["body"]
    phrase = body["query"]["bool"]["filter"][0]["bool"]["filter"][0]
    assert phrase["multi_match"]["query"] == trace
