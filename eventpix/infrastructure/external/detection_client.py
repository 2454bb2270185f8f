# Standard library imports
import logging
from typing import Any, Dict, List, Optional

# External package imports
import httpx

# Local application imports
from .base_service_client import BaseServiceClient
from ...domain.exceptions import DetectionServiceError, ValidationError
from ...domain.models.face import BoundingBox, DetectedFace
from ...domain.repositories.face_detector import FaceDetector
from ...utils.image_utils import read_image_size

logger = logging.getLogger(__name__)


class DetectionClient(BaseServiceClient, FaceDetector):
    """
    HTTP client for the face detection sidecar.
    
    POST {base_url}/detect with the image as multipart "image"; the service
    answers {"faces": [{"box": [left, top, right, bottom], "embedding": [...],
    "confidence": 0.97}, ...]} with pixel boxes. Boxes are converted to
    fractions here using the image's own dimensions.
    
    Note:
        Timeouts, HTTP errors and bodies without a "faces" list raise
        DetectionServiceError. An unreadable image is never sent and yields
        an empty list; individual malformed faces are skipped.
    """
    
    async def detect_faces(self, image_bytes: bytes) -> List[DetectedFace]:
        try:
            width, height = read_image_size(image_bytes)
        except ValidationError as e:
            logger.error(f"Cannot read image dimensions before detection: {e}")
            return []
        
        try:
            response = await self.client.post(
                self.url("/detect"),
                files={"image": ("image", image_bytes, "application/octet-stream")},
                timeout=self.timeout,
            )
            response.raise_for_status()
            body = response.json()
        except httpx.TimeoutException as e:
            logger.error(f"Timeout while calling detection service at {self.base_url}")
            raise DetectionServiceError(f"Detection service timed out: {e}") from e
        except httpx.HTTPStatusError as e:
            logger.error(
                f"HTTP error from detection service: {e.response.status_code} - {e.response.text}"
            )
            raise DetectionServiceError(
                f"Detection service returned HTTP {e.response.status_code}",
                details={"status_code": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Detection service unreachable at {self.base_url}: {e}")
            raise DetectionServiceError(f"Detection service unreachable: {e}") from e
        except ValueError as e:
            logger.error(f"Detection service answered with invalid JSON: {e}")
            raise DetectionServiceError("Detection service answered with invalid JSON") from e
        
        faces = self._parse_faces(body, width, height)
        logger.info(f"Detection service returned {len(faces)} face(s) for {width}x{height} image")
        return faces
    
    @staticmethod
    def _parse_faces(body: Any, width: int, height: int) -> List[DetectedFace]:
        raw_faces = body.get("faces") if isinstance(body, dict) else None
        if not isinstance(raw_faces, list):
            logger.error("Detection service response has no 'faces' list")
            raise DetectionServiceError("Detection service response has no 'faces' list")
        
        faces: List[DetectedFace] = []
        for index, raw in enumerate(raw_faces):
            face = DetectionClient._parse_face(raw, width, height)
            if face is None:
                logger.warning(f"Skipping malformed face #{index} in detection response")
                continue
            faces.append(face)
        return faces
    
    @staticmethod
    def _parse_face(raw: Dict[str, Any], width: int, height: int) -> Optional[DetectedFace]:
        try:
            left, top, right, bottom = (float(value) for value in raw["box"])
            box = BoundingBox.from_pixels(left, top, right, bottom, width, height)
            embedding = [float(value) for value in raw.get("embedding") or []]
            confidence = min(max(float(raw.get("confidence", 1.0)), 0.0), 1.0)
        except (KeyError, TypeError, ValueError):
            return None
        return DetectedFace(box=box, embedding=embedding, confidence=confidence)
