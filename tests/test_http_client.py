from __future__ import annotations

import httpx
import pytest

from signum_bot.core.errors import UpstreamError
from signum_bot.core.http import ResilientHTTPClient


def _transport(down_hosts: set[str], seen: list[str]) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.host)
        if request.url.host in down_hosts:
            return httpx.Response(503, json={"error": "down"})
        return httpx.Response(200, json={"host": request.url.host, "params": dict(request.url.params)})

    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_fails_over_and_sticks_to_working_host() -> None:
    seen: list[str] = []
    http = ResilientHTTPClient(
        hosts=["https://a.example", "https://b.example/"],
        transport=_transport({"a.example"}, seen),
    )
    data = await http.post_json("/burst", params={"requestType": "getMiningInfo"})
    assert data["host"] == "b.example"
    assert data["params"] == {"requestType": "getMiningInfo"}
    assert http.current_host == "https://b.example"

    seen.clear()
    await http.get_json("/burst")
    assert seen == ["b.example"]
    await http.close()


@pytest.mark.asyncio
async def test_all_hosts_down_raises_upstream_error() -> None:
    seen: list[str] = []
    http = ResilientHTTPClient(
        hosts=["https://a.example", "https://b.example"],
        transport=_transport({"a.example", "b.example"}, seen),
    )
    with pytest.raises(UpstreamError):
        await http.get_json("/burst")
    assert seen == ["a.example", "b.example"]
    await http.close()


@pytest.mark.asyncio
async def test_invalid_json_is_upstream_error() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>oops</html>"))
    http = ResilientHTTPClient(transport=transport)
    with pytest.raises(UpstreamError):
        await http.get_json("https://api.example/v1/quotes")
    await http.close()
