"""
Pooled httpx client shared by the sidecar clients.

Two sidecars talk over it: the face detection service (one short request
per image) and the chat bridge (one long-poll held open plus outbound
sends). Each request passes its own read timeout.
"""
import httpx
import logging
from typing import Optional

logger = logging.getLogger(__name__)

USER_AGENT = "eventpix-backend/1.0"

# Connecting to a sidecar is bounded separately from the per-request read timeout
CONNECT_TIMEOUT_SECONDS = 5.0
DEFAULT_TIMEOUT_SECONDS = 60.0

_shared_client: Optional[httpx.AsyncClient] = None


def get_shared_http_client() -> httpx.AsyncClient:
    """
    Get or create the shared sidecar client.

    Returns:
        Shared AsyncClient instance
    """
    global _shared_client

    if _shared_client is None:
        _shared_client = httpx.AsyncClient(
            timeout=httpx.Timeout(DEFAULT_TIMEOUT_SECONDS, connect=CONNECT_TIMEOUT_SECONDS),
            limits=httpx.Limits(
                max_keepalive_connections=10,
                max_connections=50,
                keepalive_expiry=30.0,
            ),
            headers={"User-Agent": USER_AGENT},
            http2=True,
        )
        logger.info("Created shared sidecar HTTP client (connect timeout %.0fs)", CONNECT_TIMEOUT_SECONDS)

    return _shared_client


async def close_shared_http_client() -> None:
    """Close the shared client on application shutdown; the next get creates a fresh one."""
    global _shared_client

    if _shared_client is not None:
        await _shared_client.aclose()
        _shared_client = None
        logger.info("Closed shared sidecar HTTP client")
