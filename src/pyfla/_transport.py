"""HTTP transport with bearer-token headers and envelope error extraction."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pyfla._constants import USER_AGENT
from pyfla.config import FlaConfig
from pyfla.exceptions import FlaTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Tests pass lightweight doubles; production uses :class:`HttpTransport`.
    """

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, str] | None = None,
        json_body: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]: ...


class HttpTransport:
    """aiohttp-backed transport.

    Retries, TLS and connection pooling belong to the supplied
    :class:`aiohttp.ClientSession`; this layer only shapes requests and
    decodes JSON bodies.
    """

    def __init__(self, config: FlaConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session

    def _headers(self) -> dict[str, str]:
        headers = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        if self._config.access_token:
            headers["authorization"] = f"Bearer {self._config.access_token}"
        return headers

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, str] | None = None,
        json_body: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        url = f"{self._config.base_url.rstrip('/')}{endpoint}"
        _logger.debug("%s %s", method, url)
        timeout = aiohttp.ClientTimeout(total=self._config.request_timeout)

        try:
            async with self._http.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=self._headers(),
                timeout=timeout,
            ) as resp:
                text = await resp.text()
                status = resp.status
        except aiohttp.ClientError as exc:
            raise FlaTransportError(f"Request to {endpoint} failed: {exc}", endpoint=endpoint) from exc
        except TimeoutError as exc:
            raise FlaTransportError(f"Request to {endpoint} timed out", endpoint=endpoint) from exc

        if status != 200:
            raise FlaTransportError(
                f"HTTP {status} from {endpoint}: {text[:200]}",
                status_code=status,
                endpoint=endpoint,
            )

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise FlaTransportError(f"Invalid JSON from {endpoint}: {text[:200]}", endpoint=endpoint) from exc

        if not isinstance(body, dict):
            raise FlaTransportError(f"Unexpected body from {endpoint}: {text[:200]}", endpoint=endpoint)
        return body
