# -*- coding: utf-8 -*-
"""Location: ./licensescanner/services/http_client_service.py
Copyright 2026
SPDX-License-Identifier: Apache-2.0

Shared HTTP Client Service.

This module provides a singleton httpx.AsyncClient shared by the GitHub
client, the npm license resolver and the Slack notifier. One client means one
connection pool for the whole scan, so the hundreds of registry lookups a
large organization produces reuse connections instead of opening new ones.

Usage:
    from licensescanner.services.http_client_service import get_http_client

    client = await get_http_client()
    response = await client.get("https://registry.npmjs.org/left-pad/latest")

    # during shutdown
    await SharedHttpClient.shutdown()

Configuration (environment variables):
    HTTPX_MAX_CONNECTIONS: Maximum concurrent connections (default: 50)
    HTTPX_MAX_KEEPALIVE_CONNECTIONS: Idle connections to retain (default: 20)
    HTTPX_KEEPALIVE_EXPIRY: Idle connection timeout in seconds (default: 30)
    HTTPX_CONNECT_TIMEOUT: Connection timeout in seconds (default: 10)
    HTTPX_READ_TIMEOUT: Read timeout in seconds (default: 60)
    HTTPX_WRITE_TIMEOUT: Write timeout in seconds (default: 30)
    HTTPX_POOL_TIMEOUT: Pool wait timeout in seconds (default: 30)
"""

# Future
from __future__ import annotations

# Standard
import asyncio
import logging
from typing import Optional

# Third-Party
import httpx

# First-Party
from licensescanner import __version__

logger = logging.getLogger(__name__)

USER_AGENT = f"org-license-scanner/{__version__}"


class SharedHttpClient:
    """
    Singleton wrapper for a shared httpx.AsyncClient.

    The client is initialized lazily on first access and closed by
    ``shutdown()`` at the end of a run.
    """

    _instance: Optional["SharedHttpClient"] = None
    _lock: asyncio.Lock = asyncio.Lock()

    def __init__(self) -> None:
        """Initialize the SharedHttpClient wrapper (not the actual client)."""
        self._client: Optional[httpx.AsyncClient] = None
        self._initialized: bool = False

    @classmethod
    async def get_instance(cls) -> "SharedHttpClient":
        """
        Get or create the singleton instance.

        Returns:
            SharedHttpClient: The singleton instance with initialized client.
        """
        if cls._instance is None or not cls._instance._initialized:  # pylint: disable=protected-access
            async with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
                if not cls._instance._initialized:  # pylint: disable=protected-access
                    await cls._instance._initialize()  # pylint: disable=protected-access
        return cls._instance

    async def _initialize(self) -> None:
        """Create the shared AsyncClient from the configured limits and timeouts."""
        # First-Party
        from licensescanner.config import get_settings  # pylint: disable=import-outside-toplevel

        settings = get_settings()
        self._client = httpx.AsyncClient(
            limits=get_http_limits(),
            timeout=get_http_timeout(),
            follow_redirects=True,
            verify=not settings.skip_ssl_verify,
            headers={"User-Agent": USER_AGENT},
        )
        self._initialized = True

        logger.info(
            "Shared HTTP client initialized: max_connections=%d, keepalive=%d",
            settings.httpx_max_connections,
            settings.httpx_max_keepalive_connections,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        """
        Get the shared HTTP client.

        Returns:
            httpx.AsyncClient: The shared client instance.

        Raises:
            RuntimeError: If the client has not been initialized.
        """
        if self._client is None:
            raise RuntimeError("SharedHttpClient not initialized. Call get_instance() first.")
        return self._client

    async def close(self) -> None:
        """Close the shared HTTP client and release all connections."""
        if self._client:
            await self._client.aclose()
            self._client = None
            self._initialized = False
            logger.info("Shared HTTP client closed")

    @classmethod
    async def shutdown(cls) -> None:
        """Shutdown the singleton instance at the end of a run."""
        if cls._instance:
            await cls._instance.close()
            cls._instance = None


async def get_http_client() -> httpx.AsyncClient:
    """
    Get the shared HTTP client for making requests.

    Returns:
        httpx.AsyncClient: The shared client instance.
    """
    instance = await SharedHttpClient.get_instance()
    return instance.client


def get_http_limits() -> httpx.Limits:
    """
    Get configured HTTPX Limits.

    Returns:
        httpx.Limits: Configured limits from settings.
    """
    # First-Party
    from licensescanner.config import get_settings  # pylint: disable=import-outside-toplevel

    settings = get_settings()
    return httpx.Limits(
        max_connections=settings.httpx_max_connections,
        max_keepalive_connections=settings.httpx_max_keepalive_connections,
        keepalive_expiry=settings.httpx_keepalive_expiry,
    )


def get_http_timeout() -> httpx.Timeout:
    """
    Get configured HTTPX Timeout.

    Returns:
        httpx.Timeout: Per-phase timeouts from settings.
    """
    # First-Party
    from licensescanner.config import get_settings  # pylint: disable=import-outside-toplevel

    settings = get_settings()
    return httpx.Timeout(
        connect=settings.httpx_connect_timeout,
        read=settings.httpx_read_timeout,
        write=settings.httpx_write_timeout,
        pool=settings.httpx_pool_timeout,
    )
