# Standard library imports
import logging
from typing import Optional

# Local application imports
from ....domain.exceptions import DetectionServiceError
from ....domain.repositories.face_detector import FaceDetector
from ....utils.image_utils import read_image_size, validate_image_upload
from ...dto.guest_dto import GuestSearchResponse
from ...dto.photo_dto import PhotoResponse
from ...services.matching_engine import MatchingEngine

logger = logging.getLogger(__name__)


class SearchGuestPhotosUseCase:
    """Use case for guest self-search by selfie"""
    
    def __init__(self, face_detector: FaceDetector, matching_engine: MatchingEngine) -> None:
        self.face_detector = face_detector
        self.matching_engine = matching_engine
    
    async def execute(
        self,
        filename: Optional[str],
        content: bytes,
        content_type: Optional[str] = None,
    ) -> GuestSearchResponse:
        """
        Find event photos of the person in the selfie, nearest first
        
        Raises:
            ValidationError: bad image
            NoFaceFoundError: no face in the selfie
            MultipleFacesError: more than one face in the selfie
        
        A detection outage is reported as NoFaceFoundError.
        """
        validate_image_upload(filename, content_type, content)
        read_image_size(content)
        try:
            faces = await self.face_detector.detect_faces(content)
        except DetectionServiceError as e:
            logger.warning("Detection unavailable during guest search: %s", e.message)
            faces = []
        photos = await self.matching_engine.search_photos(faces)
        return GuestSearchResponse(photos=[PhotoResponse.from_photo(photo) for photo in photos])
