from abc import ABC, abstractmethod
from typing import List

from ..models.face import DetectedFace


class FaceDetector(ABC):
    """Face detection + embedding interface"""
    
    @abstractmethod
    async def detect_faces(self, image_bytes: bytes) -> List[DetectedFace]:
        """
        Detect faces in an encoded image.
        
        Boxes come back in normalized-fraction units. An empty list means
        the image holds no usable face.
        
        Raises:
            DetectionServiceError: the detection backend is unreachable or failed
        """
        pass
