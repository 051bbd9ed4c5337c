"""HttpxFetcher — the fetch capability backed by httpx.

Cache keys are API paths relative to API_BASE_URL (``user/organizations``,
``organizations/org_123/transactions?limit=5``). Every failure leaves this
module as a FetchError with its kind already decided:

  timeout / connect / read / write errors -> NETWORK_UNREACHABLE
  HTTP 5xx                                -> SERVER_ERROR
  other HTTP status, protocol, bad JSON   -> OTHER

asyncio cancellation is not converted; the cache handles it.
"""

import logging
from typing import Any

import httpx

from src.hcb_common.enums import FetchErrorKind
from src.hcb_common.errors import FetchError

logger = logging.getLogger(__name__)


class HttpxFetcher:
    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 15.0,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def __call__(self, key: str) -> Any:
        try:
            response = await self._client.get(key)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            kind = FetchErrorKind.SERVER_ERROR if status >= 500 else FetchErrorKind.OTHER
            raise FetchError(kind, key, f"HTTP {status}", status_code=status) from exc
        except (httpx.TimeoutException, httpx.NetworkError) as exc:
            raise FetchError(
                FetchErrorKind.NETWORK_UNREACHABLE, key, type(exc).__name__
            ) from exc
        except httpx.TransportError as exc:
            raise FetchError(FetchErrorKind.OTHER, key, type(exc).__name__) from exc

        try:
            return response.json()
        except ValueError as exc:
            raise FetchError(FetchErrorKind.OTHER, key, "invalid JSON body") from exc

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
