"""Async HTTP client utilities."""

import asyncio
import logging

import aiohttp
from typing import Optional, Dict, Any

from ..errors import TransportError

logger = logging.getLogger(__name__)


class AsyncHTTPClient:
    """Reusable async HTTP client.

    Exposes the two capabilities the installer needs: ``fetch`` for GET
    requests returning raw bytes and ``post`` for JSON bodies. Every
    aiohttp failure surfaces as a TransportError and is never retried here.
    """

    def __init__(self, headers: Optional[Dict[str, str]] = None, timeout: Optional[float] = None):
        self.default_headers = headers or {}
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        self.session = aiohttp.ClientSession(headers=self.default_headers, timeout=self.timeout)
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.session.close()

    async def fetch(self, url: str, headers: Optional[Dict[str, str]] = None) -> bytes:
        """GET request."""
        logger.debug("GET %s", url)
        try:
            async with self.session.get(url, headers=headers) as resp:
                resp.raise_for_status()
                return await resp.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(url, str(e) or type(e).__name__) from e

    async def post(self, url: str, json_data: Optional[Dict[str, Any]] = None,
                   headers: Optional[Dict[str, str]] = None) -> bytes:
        """POST request."""
        logger.debug("POST %s", url)
        try:
            async with self.session.post(url, json=json_data, headers=headers) as resp:
                resp.raise_for_status()
                return await resp.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(url, str(e) or type(e).__name__) from e
