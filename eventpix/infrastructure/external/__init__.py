"""External service clients"""

from .base_service_client import BaseServiceClient
from .detection_client import DetectionClient

__all__ = [
    "BaseServiceClient",
    "DetectionClient",
]
