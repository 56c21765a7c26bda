from __future__ import annotations

import logging
from typing import Any

import httpx

from signum_bot.core.errors import UpstreamError

logger = logging.getLogger(__name__)


class ResilientHTTPClient:
    """Shared async HTTP client.

    When constructed with several base hosts, ``request_json`` tries the host that
    answered last time first and then walks the rest in order. Absolute URLs skip
    failover entirely.
    """

    def __init__(
        self,
        hosts: list[str] | None = None,
        timeout: float = 10.0,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.hosts = [h.rstrip("/") for h in (hosts or [])]
        self._current = 0
        self.client = httpx.AsyncClient(timeout=timeout, headers=headers, transport=transport)

    @property
    def current_host(self) -> str | None:
        if not self.hosts:
            return None
        return self.hosts[self._current]

    def _host_order(self) -> list[int]:
        n = len(self.hosts)
        return [(self._current + i) % n for i in range(n)]

    async def _once(self, method: str, url: str, params: dict | None, headers: dict | None) -> Any:
        resp = await self.client.request(method, url, params=params, headers=headers)
        resp.raise_for_status()
        return resp.json()

    async def request_json(
        self,
        method: str,
        path: str,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        if path.startswith(("http://", "https://")) or not self.hosts:
            try:
                return await self._once(method, path, params, headers)
            except (httpx.HTTPError, ValueError) as exc:
                raise UpstreamError(f"{method} {path}: {exc}") from exc

        last_exc: Exception | None = None
        for idx in self._host_order():
            host = self.hosts[idx]
            try:
                data = await self._once(method, f"{host}{path}", params, headers)
            except (httpx.HTTPError, ValueError) as exc:
                last_exc = exc
                logger.warning("http_host_failed", extra={"event": "http_host_failed", "host": host, "error": str(exc)})
                continue
            if idx != self._current:
                logger.info("http_host_switched", extra={"event": "http_host_switched", "host": host})
                self._current = idx
            return data
        raise UpstreamError(f"all {len(self.hosts)} hosts failed, last error: {last_exc}") from last_exc

    async def get_json(self, path: str, params: dict | None = None, headers: dict | None = None) -> Any:
        return await self.request_json("GET", path, params=params, headers=headers)

    async def post_json(self, path: str, params: dict | None = None, headers: dict | None = None) -> Any:
        return await self.request_json("POST", path, params=params, headers=headers)

    async def close(self) -> None:
        await self.client.aclose()
