import logging

import httpx

from app.errors import EmptyResponseError, TransportError
from app.settings import get_settings

settings = get_settings()

logger = logging.getLogger(__name__)

BSEARCH_PATH = '/internal/bsearch'


class KibanaClient:
    def __init__(self, http_client: httpx.AsyncClient, kbn_version: str):
        self.http_client = http_client
        self.kbn_version = kbn_version

    async def bsearch(self, payload: dict, cookie: str) -> str:
        headers = {
            'Cookie': cookie,
            'kbn-version': self.kbn_version,
            'kbn-xsrf': 'true',
            'kbn-system-api': 'true',
            'Connection': 'keep-alive',
        }
        try:
            response = await self.http_client.post(
                BSEARCH_PATH, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise TransportError(f'{type(e).__name__}: {e}') from e
        if response.is_error:
            reason = (
                f'Kibana API 返回错误码: {response.status_code} '
                f'{response.reason_phrase}'
            )
            logger.error(reason)
            raise TransportError(reason, response.status_code)
        if not response.content:
            raise EmptyResponseError()
        return response.text

    async def aclose(self):
        await self.http_client.aclose()


def get_kibana_client(transport: httpx.AsyncBaseTransport | None = None):
    http_client = httpx.AsyncClient(
        base_url=settings.KIBANA_BASE_URL,
        timeout=settings.KIBANA_TIMEOUT,
        transport=transport,
    )
    return KibanaClient(http_client, settings.KIBANA_VERSION)
