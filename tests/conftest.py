import json
from datetime import datetime, timezone

import httpx
import pytest

from app.kibana import KibanaClient


def make_hit(timestamp=None, message=None, level=None, log_level=None):
    fields = {}
    if timestamp is not None:
        fields["@timestamp"] = [timestamp]
    if message is not None:
        fields["message"] = [message]
    if level is not None:
        fields["level"] = [level]
    if log_level is not None:
        fields["log.level"] = [log_level]
    return {"_index": "app_logs_index", "_id": "x", "fields": fields}


def make_envelope(hits, total=None, shape="array"):
    inner = {"hits": {"hits": hits}}
    if total is not None:
        inner["hits"]["total"] = total
    if shape == "array":
        return [{"id": 0, "result": {"rawResponse": inner}}]
    if shape == "flat":
        return {"rawResponse": inner}
    return {"result": {"rawResponse": inner}}


@pytest.fixture
def now():
    return datetime(2026, 2, 13, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def three_hits():
    return [
        make_hit("2026-02-13T11:59:00.000Z",
                 "java.lang.NullPointerException at OrderService", "ERROR"),
        make_hit("2026-02-13T11:58:00.000Z",
                 "NullPointerException while mapping payload",
                 log_level="WARN"),
        make_hit("2026-02-13T11:57:00.000Z",
                 "NullPointerException swallowed by retry"),
    ]


@pytest.fixture
def recorded_requests():
    return []


@pytest.fixture
def kibana_factory(recorded_requests):
    def factory(status_code=200, body=None):
        def handler(request: httpx.Request) -> httpx.Response:
            recorded_requests.append(request)
            if isinstance(body, (dict, list)):
                return httpx.Response(status_code, json=body)
            return httpx.Response(status_code, content=body or b"")

        http_client = httpx.AsyncClient(
            base_url="http://kibana.test",
            transport=httpx.MockTransport(handler),
        )
        return KibanaClient(http_client, "8.11.0")
    return factory


def sent_payload(request: httpx.Request) -> dict:
    return json.loads(request.content)
