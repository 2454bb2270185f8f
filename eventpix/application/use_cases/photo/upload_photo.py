# Standard library imports
import logging
from typing import Any, Callable, Dict, List, Optional, TYPE_CHECKING

# Local application imports
from ....domain.constants import EVENT_PHOTO_SUBDIR, ORIGINAL_PHOTO_SUBDIR
from ....domain.models.person import Person
from ....domain.models.photo import Photo, PhotoStatus
from ....domain.repositories.face_detector import FaceDetector
from ....domain.repositories.identity_store import IdentityStore
from ....domain.repositories.object_storage import ObjectStorage
from ....utils.image_utils import content_type_for, read_image_size, unique_filename, validate_image_upload
from ....utils.retry_utils import async_retry_on_exception
from ...dto.photo_dto import PhotoResponse, PhotoUploadResponse
from ...services.matching_engine import FaceAssociation, MatchingEngine

if TYPE_CHECKING:
    from ....infrastructure.notifications.fanout import NotificationFanout

logger = logging.getLogger(__name__)


class UploadPhotoUseCase:
    """Use case for the photographer upload pipeline"""
    
    def __init__(
        self,
        identity_store: IdentityStore,
        object_storage: ObjectStorage,
        face_detector: FaceDetector,
        matching_engine: MatchingEngine,
        fanout: Optional["NotificationFanout"] = None,
        max_retries: int = 3,
    ) -> None:
        self.identity_store = identity_store
        self.object_storage = object_storage
        self.face_detector = face_detector
        self.matching_engine = matching_engine
        self.fanout = fanout
        self._persist_with_retry = async_retry_on_exception(max_retries=max_retries)(self._persist)
    
    async def execute(
        self,
        filename: Optional[str],
        content: bytes,
        content_type: Optional[str] = None,
        original_filename: Optional[str] = None,
        original_content: Optional[bytes] = None,
        original_content_type: Optional[str] = None,
        schedule: Optional[Callable[..., Any]] = None,
    ) -> PhotoUploadResponse:
        """
        Store, detect, associate and persist one event photo.
        
        The Photo and all of its Faces are written in one transaction as
        COMPLETED; observers are notified only after the commit. When
        `schedule` is given (e.g. BackgroundTasks.add_task) the fan-out is
        handed to it instead of being awaited here.
        
        Raises:
            ValidationError: unsupported or unreadable image
            StorageError: blob storage failed (nothing is written)
            DetectionServiceError: detection backend failed (blobs released, nothing is written)
        """
        ext = validate_image_upload(filename, content_type, content)
        width, height = read_image_size(content)
        original_ext = None
        if original_content is not None:
            original_ext = validate_image_upload(original_filename, original_content_type, original_content)
        
        # Blobs first: a storage failure leaves no rows behind
        stored_urls: List[str] = []
        url = await self.object_storage.put(
            EVENT_PHOTO_SUBDIR, unique_filename(ext), content, content_type_for(ext)
        )
        stored_urls.append(url)
        original_url = None
        try:
            if original_content is not None:
                original_url = await self.object_storage.put(
                    ORIGINAL_PHOTO_SUBDIR, unique_filename(original_ext), original_content, content_type_for(original_ext)
                )
                stored_urls.append(original_url)
            
            detected = await self.face_detector.detect_faces(content)
            associations = await self.matching_engine.associate(detected)
            
            photo = Photo(
                id=None,
                url=url,
                status=PhotoStatus.COMPLETED,
                original_url=original_url,
                width=width,
                height=height,
            )
            saved_photo = await self._persist_with_retry(photo, associations)
        except Exception:
            await self._release_blobs(stored_urls)
            raise
        
        matched = self._distinct_persons(associations)
        logger.info(
            "Photo %s stored with %d face(s), %d matched person(s)",
            saved_photo.id, len(associations), len(matched),
        )
        
        if self.fanout:
            if schedule is not None:
                schedule(self.fanout.photo_ready, saved_photo, matched)
            else:
                await self.fanout.photo_ready(saved_photo, matched)
        
        return PhotoUploadResponse(
            photo=PhotoResponse.from_photo(saved_photo),
            face_count=len(associations),
            matched_person_ids=[person.id for person in matched if person.id],
        )
    
    async def _persist(self, photo: Photo, associations: List[FaceAssociation]) -> Photo:
        async with self.identity_store.transaction() as session:
            saved_photo = await self.identity_store.insert_photo(photo, session=session)
            for association in associations:
                await self.identity_store.insert_face(
                    photo_id=saved_photo.id,
                    person_id=association.person.id if association.person else None,
                    box=association.detected.box,
                    embedding=association.embedding,
                    confidence=association.detected.confidence,
                    session=session,
                )
        return saved_photo
    
    async def _release_blobs(self, urls: List[str]) -> None:
        for stored in urls:
            try:
                await self.object_storage.delete(stored)
            except Exception as e:
                logger.warning("Could not release blob %s after failed upload: %s", stored, e)
    
    @staticmethod
    def _distinct_persons(associations: List[FaceAssociation]) -> List[Person]:
        persons: Dict[str, Person] = {}
        for association in associations:
            person = association.person
            if person is not None and person.id and person.id not in persons:
                persons[person.id] = person
        return list(persons.values())
