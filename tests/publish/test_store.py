"""
Tests for IpfsStore.

Mocks the aiohttp session the same way the HTTP sink tests do.
"""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from agentmanifest.publish.config import IpfsConfig
from agentmanifest.publish.errors import StoreError
from agentmanifest.publish.store import IpfsStore


def _mock_session(status: int, body: object = None, text: str = "") -> AsyncMock:
    mock_response = AsyncMock()
    mock_response.status = status
    if isinstance(body, Exception):
        mock_response.json = AsyncMock(side_effect=body)
    else:
        mock_response.json = AsyncMock(return_value=body)
    mock_response.text = AsyncMock(return_value=text)
    mock_response.__aenter__ = AsyncMock(return_value=mock_response)
    mock_response.__aexit__ = AsyncMock(return_value=None)

    mock_session = AsyncMock()
    mock_session.post = MagicMock(return_value=mock_response)
    mock_session.closed = False
    return mock_session


@pytest.fixture
def config() -> IpfsConfig:
    return IpfsConfig(url="https://ipfs.example.com/", timeout_s=5.0)


class TestIpfsStore:
    """Tests for IPFS add."""

    @pytest.mark.asyncio
    async def test_publish_returns_hash(self, config: IpfsConfig) -> None:
        store = IpfsStore(config)
        session = _mock_session(200, {"Name": "file", "Hash": "QmHash", "Size": "12"})
        store._session = session

        cid = await store.publish('{"some":"documentation"}')

        assert cid == "QmHash"
        session.post.assert_called_once()
        args, kwargs = session.post.call_args
        assert args[0] == "https://ipfs.example.com/api/v0/add"
        assert kwargs["params"] == {"pin": "true"}
        assert isinstance(kwargs["data"], aiohttp.FormData)
        await store.close()

    @pytest.mark.asyncio
    async def test_http_error_raises_store_error(self, config: IpfsConfig) -> None:
        store = IpfsStore(config)
        store._session = _mock_session(500, text="internal error")

        with pytest.raises(StoreError, match="HTTP 500"):
            await store.publish("content")
        await store.close()

    @pytest.mark.asyncio
    async def test_missing_hash_raises_store_error(self, config: IpfsConfig) -> None:
        store = IpfsStore(config)
        store._session = _mock_session(200, {"Name": "file"})

        with pytest.raises(StoreError, match="no Hash"):
            await store.publish("content")
        await store.close()

    @pytest.mark.asyncio
    async def test_non_json_response_raises_store_error(self, config: IpfsConfig) -> None:
        store = IpfsStore(config)
        store._session = _mock_session(200, json.JSONDecodeError("bad", "doc", 0))

        with pytest.raises(StoreError, match="not JSON"):
            await store.publish("content")
        await store.close()

    @pytest.mark.asyncio
    async def test_connection_error_raises_store_error(self, config: IpfsConfig) -> None:
        store = IpfsStore(config)
        session = AsyncMock()
        session.post = MagicMock(side_effect=aiohttp.ClientConnectionError("refused"))
        session.closed = False
        store._session = session

        with pytest.raises(StoreError, match="connection error") as exc_info:
            await store.publish("content")
        assert isinstance(exc_info.value.__cause__, aiohttp.ClientError)
        await store.close()

    @pytest.mark.asyncio
    async def test_close_closes_session(self, config: IpfsConfig) -> None:
        store = IpfsStore(config)
        session = _mock_session(200, {"Hash": "QmHash"})
        store._session = session

        await store.close()

        session.close.assert_awaited_once()
        assert store._session is None

    def test_repr_hides_headers(self) -> None:
        store = IpfsStore(
            IpfsConfig(url="https://ipfs.example.com", headers={"Authorization": "Basic abc"})
        )
        assert "abc" not in repr(store)
        assert "ipfs.example.com" in repr(store)
