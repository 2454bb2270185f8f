# Standard library imports
import logging
from typing import Any, Callable, Dict, List, Optional, TYPE_CHECKING

# Local application imports
from ....domain.models.photo import Photo
from ....domain.repositories.identity_store import IdentityStore
from ...dto.face_dto import FaceNameResponse
from ...services.auto_tag_propagator import AutoTagPropagator, PropagationResult

if TYPE_CHECKING:
    from ....infrastructure.notifications.fanout import NotificationFanout

logger = logging.getLogger(__name__)


class NameFaceUseCase:
    """Use case for naming a face and auto-tagging similar unlabeled faces"""
    
    def __init__(
        self,
        propagator: AutoTagPropagator,
        identity_store: IdentityStore,
        fanout: Optional["NotificationFanout"] = None,
    ) -> None:
        self.propagator = propagator
        self.identity_store = identity_store
        self.fanout = fanout
    
    async def execute(
        self,
        face_id: str,
        name: str,
        schedule: Optional[Callable[..., Any]] = None,
    ) -> FaceNameResponse:
        """
        Name a face
        
        Fan-out is handed to `schedule` when given, otherwise awaited.
        
        Raises:
            ValidationError: empty name
            NotFoundError: unknown face
            NamingFailedError: the naming transaction failed; no face changed
        """
        result = await self.propagator.name_face(face_id, name)
        
        if self.fanout:
            photos = await self._photos_of(result)
            if schedule is not None:
                schedule(self.fanout.person_renamed, result.person, result.all_face_ids, photos)
            else:
                await self.fanout.person_renamed(result.person, result.all_face_ids, photos)
        
        return FaceNameResponse(
            person_id=result.person.id or "",
            name=result.person.name or "",
            face_ids=result.all_face_ids,
            propagated_count=len(result.propagated_face_ids),
        )
    
    async def _photos_of(self, result: PropagationResult) -> List[Photo]:
        """Event photos containing the newly linked faces, in face order"""
        photos: Dict[str, Photo] = {}
        for face_id in result.all_face_ids:
            face = await self.identity_store.find_face(face_id)
            if face is None or face.photo_id in photos:
                continue
            photo = await self.identity_store.find_photo(face.photo_id)
            if photo is not None and not photo.is_reference:
                photos[face.photo_id] = photo
        return list(photos.values())
