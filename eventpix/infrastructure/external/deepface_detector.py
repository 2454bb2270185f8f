"""
In-process face detection + embedding with DeepFace (ArcFace by default).

Alternative to the detection sidecar for single-host deployments; enabled
with DETECTION_BACKEND=deepface and the "deepface" extra installed.
"""
import asyncio
import io
import logging
from typing import Any, Dict, List, Optional

import numpy as np
from PIL import Image, UnidentifiedImageError

from ...domain.exceptions import DetectionServiceError
from ...domain.models.face import BoundingBox, DetectedFace
from ...domain.repositories.face_detector import FaceDetector

logger = logging.getLogger(__name__)

# Model and detector must match across uploads, registrations and searches
DEFAULT_EMBEDDING_MODEL = "ArcFace"
DEFAULT_DETECTOR_BACKEND = "retinaface"


class DeepFaceDetector(FaceDetector):
    """FaceDetector backed by DeepFace.represent, run off the event loop."""

    def __init__(
        self,
        model_name: str = DEFAULT_EMBEDDING_MODEL,
        detector_backend: str = DEFAULT_DETECTOR_BACKEND,
    ) -> None:
        from deepface import DeepFace

        self._deepface = DeepFace
        self.model_name = model_name
        self.detector_backend = detector_backend

    async def detect_faces(self, image_bytes: bytes) -> List[DetectedFace]:
        try:
            return await asyncio.to_thread(self._detect_sync, image_bytes)
        except (UnidentifiedImageError, OSError) as e:
            logger.error("Cannot decode image for DeepFace: %s", e)
            return []
        except Exception as e:
            logger.error("DeepFace detection failed: %s", e, exc_info=True)
            raise DetectionServiceError(f"DeepFace detection failed: {e}") from e

    def _detect_sync(self, image_bytes: bytes) -> List[DetectedFace]:
        with Image.open(io.BytesIO(image_bytes)) as image:
            rgb = image.convert("RGB")
            width, height = rgb.size
            # DeepFace expects BGR like OpenCV
            frame = np.asarray(rgb)[:, :, ::-1]

        objs = self._deepface.represent(
            img_path=frame,
            model_name=self.model_name,
            detector_backend=self.detector_backend,
            enforce_detection=False,
        )

        faces: List[DetectedFace] = []
        for obj in objs or []:
            face = self._to_detected_face(obj, width, height)
            if face is not None:
                faces.append(face)
        logger.info("DeepFace found %d face(s) in %dx%d image", len(faces), width, height)
        return faces

    @staticmethod
    def _to_detected_face(obj: Dict[str, Any], width: int, height: int) -> Optional[DetectedFace]:
        embedding = obj.get("embedding")
        area = obj.get("facial_area") or {}
        x, y = int(area.get("x", 0)), int(area.get("y", 0))
        w, h = int(area.get("w", 0)), int(area.get("h", 0))
        confidence = float(obj.get("face_confidence") or 0.0)
        # enforce_detection=False yields the whole frame with confidence 0 when nothing is found
        if embedding is None or w <= 0 or h <= 0 or confidence <= 0.0:
            return None
        try:
            box = BoundingBox.from_pixels(x, y, x + w, y + h, width, height)
        except ValueError:
            return None
        return DetectedFace(
            box=box,
            embedding=[float(value) for value in embedding],
            confidence=min(confidence, 1.0),
        )
