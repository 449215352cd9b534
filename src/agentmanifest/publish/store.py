"""
Content-addressed stores.

A store takes opaque content and returns its address. IpfsStore talks to the
IPFS HTTP API (``POST /api/v0/add``) and returns the CID of the added file.
No retries here; callers decide what to do with a StoreError.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import aiohttp

from agentmanifest.publish.errors import StoreError

if TYPE_CHECKING:
    from agentmanifest.publish.config import IpfsConfig

logger = logging.getLogger(__name__)


class ContentStore(ABC):
    """Abstract base class for content-addressed stores."""

    @abstractmethod
    async def publish(self, content: str) -> str:
        """
        Store content and return its address.

        Args:
            content: Opaque text payload.

        Returns:
            Content address (e.g. an IPFS CID).

        Raises:
            StoreError: If the store rejects or fails the call.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close any resources held by this store."""
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class IpfsStore(ContentStore):
    """IPFS HTTP API client."""

    def __init__(self, config: IpfsConfig) -> None:
        self._config = config
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self._config.timeout_s)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def publish(self, content: str) -> str:
        """Add content to IPFS and return its CID."""
        url = f"{self._config.url}/api/v0/add"
        params = {"pin": "true" if self._config.pin else "false"}

        form = aiohttp.FormData()
        form.add_field(
            "file",
            content.encode("utf-8"),
            filename="file",
            content_type="application/octet-stream",
        )

        try:
            session = await self._get_session()
            async with session.post(
                url, data=form, params=params, headers=self._config.headers
            ) as resp:
                status = resp.status
                if not 200 <= status < 300:
                    error_text = await resp.text()
                    logger.error(
                        "IPFS add failed",
                        extra={"url": url, "status": status},
                    )
                    raise StoreError(f"IPFS add failed: HTTP {status}: {error_text[:200]}")
                try:
                    body = await resp.json(content_type=None)
                except ValueError as e:
                    raise StoreError("IPFS add response is not JSON") from e
        except aiohttp.ClientError as e:
            logger.error(
                "IPFS connection error",
                extra={"url": url, "error": str(e)},
            )
            raise StoreError(f"IPFS connection error: {e}") from e

        cid = body.get("Hash") if isinstance(body, dict) else None
        if not cid or not isinstance(cid, str):
            raise StoreError("IPFS add response has no Hash")

        logger.debug("IPFS add ok", extra={"cid": cid, "size_bytes": len(content)})
        return cid

    async def close(self) -> None:
        """Close aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    def __repr__(self) -> str:
        # Don't expose gateway headers
        return f"{self.__class__.__name__}(url={self._config.url!r})"
