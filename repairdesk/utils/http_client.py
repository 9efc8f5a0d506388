"""
Shared outbound HTTP client

One pooled httpx client for calls leaving the service (the SMS/WhatsApp
gateway). It is created lazily and closed on application shutdown.
"""
import httpx
from typing import Optional
import logging

logger = logging.getLogger(__name__)


# Gateways answer quickly or not at all; don't hold a request open for long
GATEWAY_TIMEOUT = httpx.Timeout(connect=5.0, read=15.0, write=10.0, pool=5.0)
GATEWAY_LIMITS = httpx.Limits(max_keepalive_connections=5, max_connections=20, keepalive_expiry=30.0)


class HTTPClient:
    """
    Thin wrapper over httpx.AsyncClient with gateway-friendly defaults

    Usage:
        async with HTTPClient() as client:
            response = await client.post(url, json={...})

    Extra keyword arguments go to httpx.AsyncClient, e.g. ``transport`` in tests.
    """

    def __init__(self, timeout: Optional[httpx.Timeout] = None, **kwargs):
        self.client = httpx.AsyncClient(
            timeout=timeout or GATEWAY_TIMEOUT,
            limits=kwargs.pop("limits", GATEWAY_LIMITS),
            **kwargs
        )

    async def post(self, url: str, **kwargs) -> httpx.Response:
        return await self.client.post(url, **kwargs)

    async def close(self):
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


_default_client: Optional[HTTPClient] = None


def get_http_client() -> HTTPClient:
    """Return the process-wide client, creating it on first use"""
    global _default_client

    if _default_client is None:
        _default_client = HTTPClient()

    return _default_client


async def cleanup_http_clients():
    """Close the process-wide client; called from the app lifespan"""
    global _default_client

    if _default_client:
        await _default_client.close()
        _default_client = None
        logger.info("Default HTTP client closed")
