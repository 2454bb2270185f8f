# Standard library imports
import logging
from typing import Optional

# External package imports
import httpx

# Local application imports
from ..http_client_factory import get_shared_http_client

logger = logging.getLogger(__name__)


class BaseServiceClient:
    """
    Base class for HTTP clients of sidecar services.
    
    Provides common initialization for base_url, timeout and the pooled
    httpx client (injectable for tests).
    """
    
    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize base service client.
        
        Args:
            base_url: Base URL of the service.
            timeout: Request timeout in seconds.
            client: Optional httpx client; the shared pooled client is used when omitted.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client
    
    @property
    def client(self) -> httpx.AsyncClient:
        return self._client or get_shared_http_client()
    
    def url(self, path: str) -> str:
        return f"{self.base_url}{path}"
