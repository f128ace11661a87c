"""
Unit tests for the httpx exchange transport.
"""

import json

import httpx
import pytest
from respx import MockRouter

from wxoauth.core.exceptions import TransportError
from wxoauth.infrastructure.http_transport import HttpxTransport


EXCHANGE_URL = "https://backend.example.com/wx/oauth"


@pytest.mark.asyncio
async def test_post_returns_json(respx_mock: MockRouter):
    """
    Test post sends the body as JSON and returns the decoded response.
    """
    route = respx_mock.post(EXCHANGE_URL).mock(
        return_value=httpx.Response(200, json={"openId": "oX1"})
    )

    transport = HttpxTransport()
    result = await transport.post(EXCHANGE_URL, {"code": "abc", "state": "s1"})

    assert result == {"openId": "oX1"}
    assert route.called
    assert json.loads(route.calls.last.request.content) == {"code": "abc", "state": "s1"}


@pytest.mark.asyncio
async def test_post_http_error(respx_mock: MockRouter):
    """
    Test post raises TransportError when the backend rejects the code.
    """
    respx_mock.post(EXCHANGE_URL).mock(
        return_value=httpx.Response(400, json={"errcode": 40029})
    )

    transport = HttpxTransport()
    with pytest.raises(TransportError, match="rejected: 400"):
        await transport.post(EXCHANGE_URL, {"code": "abc"})


@pytest.mark.asyncio
async def test_post_network_error(respx_mock: MockRouter):
    """
    Test post raises TransportError on network error.
    """
    respx_mock.post(EXCHANGE_URL).mock(
        side_effect=httpx.ConnectError("Connection failed")
    )

    transport = HttpxTransport()
    with pytest.raises(TransportError, match="Network error"):
        await transport.post(EXCHANGE_URL, {"code": "abc"})


@pytest.mark.asyncio
async def test_post_invalid_json(respx_mock: MockRouter):
    """
    Test post raises TransportError when the response is not JSON.
    """
    respx_mock.post(EXCHANGE_URL).mock(
        return_value=httpx.Response(200, text="<html>oops</html>")
    )

    transport = HttpxTransport()
    with pytest.raises(TransportError, match="not valid JSON"):
        await transport.post(EXCHANGE_URL, {"code": "abc"})


@pytest.mark.asyncio
async def test_post_uses_shared_client(respx_mock: MockRouter):
    """
    Test post reuses an injected AsyncClient.
    """
    respx_mock.post(EXCHANGE_URL).mock(
        return_value=httpx.Response(200, json={"ok": True})
    )

    async with httpx.AsyncClient() as client:
        transport = HttpxTransport(client=client)
        result = await transport.post(EXCHANGE_URL, {"code": "abc"})

    assert result == {"ok": True}
