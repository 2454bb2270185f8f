# Standard library imports
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

# Local application imports
from ....domain.constants import MAX_REGISTRATION_PHOTOS, REFERENCE_PHOTO_SUBDIR
from ....domain.exceptions import DetectionServiceError, NoFaceFoundError, ValidationError
from ....domain.models.face import DetectedFace
from ....domain.models.person import normalize_phone
from ....domain.models.photo import Photo, PhotoStatus
from ....domain.repositories.face_detector import FaceDetector
from ....domain.repositories.identity_store import IdentityStore
from ....domain.repositories.object_storage import ObjectStorage
from ....utils.image_utils import content_type_for, read_image_size, unique_filename, validate_image_upload
from ....utils.retry_utils import async_retry_on_exception
from ...dto.guest_dto import GuestRegistrationResponse
from ...services.matching_engine import MatchingEngine

logger = logging.getLogger(__name__)

# (filename, content, content_type) of one uploaded selfie
UploadedImage = Tuple[Optional[str], bytes, Optional[str]]


@dataclass
class _ReferenceSelfie:
    ext: str
    content: bytes
    width: int
    height: int
    face: DetectedFace
    embedding: List[float]
    url: Optional[str] = None


class RegisterGuestUseCase:
    """Use case for guest self-registration with reference selfies"""
    
    def __init__(
        self,
        identity_store: IdentityStore,
        object_storage: ObjectStorage,
        face_detector: FaceDetector,
        matching_engine: MatchingEngine,
        max_retries: int = 3,
    ) -> None:
        self.identity_store = identity_store
        self.object_storage = object_storage
        self.face_detector = face_detector
        self.matching_engine = matching_engine
        self._persist_with_retry = async_retry_on_exception(max_retries=max_retries)(self._persist)
    
    async def execute(
        self,
        name: str,
        phone: str,
        images: Sequence[UploadedImage],
    ) -> GuestRegistrationResponse:
        """
        Register a guest
        
        Each selfie contributes its highest-confidence face. Selfies without
        a usable face are skipped; none usable at all fails the whole request.
        
        Raises:
            ValidationError: missing name/phone, bad image count or format
            NoFaceFoundError: no submitted selfie contains a usable face
        """
        display_name = (name or "").strip()
        phone_number = normalize_phone(phone or "")
        if not display_name:
            raise ValidationError("Name is required")
        if not phone_number:
            raise ValidationError("A valid phone number is required")
        if not images:
            raise ValidationError("At least one photo is required")
        if len(images) > MAX_REGISTRATION_PHOTOS:
            raise ValidationError(f"Upload at most {MAX_REGISTRATION_PHOTOS} photos")
        
        selfies: List[_ReferenceSelfie] = []
        for index, (filename, content, content_type) in enumerate(images):
            ext = validate_image_upload(filename, content_type, content)
            width, height = read_image_size(content)
            try:
                faces = await self.face_detector.detect_faces(content)
            except DetectionServiceError as e:
                logger.warning("Detection unavailable for registration photo %d: %s", index + 1, e.message)
                faces = []
            best = self.matching_engine.best_registration_face(faces)
            embedding = self.matching_engine.normalize(best) if best else None
            if embedding is None:
                logger.warning("Registration photo %d for %s has no usable face, skipping", index + 1, phone_number)
                continue
            selfies.append(_ReferenceSelfie(ext, content, width, height, best, embedding))
        
        if not selfies:
            raise NoFaceFoundError(
                "No face found in any registration photo",
                user_message="No face could be detected. Use clear photos with your face visible.",
            )
        
        stored_urls: List[str] = []
        try:
            for selfie in selfies:
                selfie.url = await self.object_storage.put(
                    REFERENCE_PHOTO_SUBDIR, unique_filename(selfie.ext), selfie.content, content_type_for(selfie.ext)
                )
                stored_urls.append(selfie.url)
            person_id = await self._persist_with_retry(phone_number, display_name, selfies)
        except Exception:
            for url in stored_urls:
                try:
                    await self.object_storage.delete(url)
                except Exception as e:
                    logger.warning("Could not release blob %s after failed registration: %s", url, e)
            raise
        
        logger.info("Registered guest %s with %d reference face(s)", person_id, len(selfies))
        return GuestRegistrationResponse(person_id=person_id, count=len(selfies))
    
    async def _persist(self, phone_number: str, name: str, selfies: List[_ReferenceSelfie]) -> str:
        async with self.identity_store.transaction() as session:
            person = await self.identity_store.upsert_person_by_phone(phone_number, name=name, session=session)
            for selfie in selfies:
                photo = await self.identity_store.insert_photo(
                    Photo(
                        id=None,
                        url=selfie.url,
                        status=PhotoStatus.REFERENCE,
                        width=selfie.width,
                        height=selfie.height,
                    ),
                    session=session,
                )
                await self.identity_store.insert_face(
                    photo_id=photo.id,
                    person_id=person.id,
                    box=selfie.face.box,
                    embedding=selfie.embedding,
                    confidence=selfie.face.confidence,
                    session=session,
                )
        return person.id
