# Standard library imports
from typing import List

# Local application imports
from ....domain.exceptions import NotFoundError
from ....domain.repositories.identity_store import IdentityStore
from ...dto.photo_dto import BoundingBoxResponse, FaceResponse


class ListPhotoFacesUseCase:
    """Use case for listing the faces of one photo with their person names"""
    
    def __init__(self, identity_store: IdentityStore) -> None:
        self.identity_store = identity_store
    
    async def execute(self, photo_id: str) -> List[FaceResponse]:
        """
        List faces of a photo
        
        Raises:
            NotFoundError: If the photo does not exist
        """
        photo = await self.identity_store.find_photo(photo_id)
        if not photo:
            raise NotFoundError("Photo", photo_id)
        
        faces = await self.identity_store.list_faces_for_photo(photo_id)
        person_ids = sorted({face.person_id for face in faces if face.person_id})
        persons = await self.identity_store.find_persons(person_ids) if person_ids else []
        names = {person.id: person.name for person in persons}
        
        return [
            FaceResponse(
                id=face.id or "",
                photo_id=face.photo_id,
                person_id=face.person_id,
                person_name=names.get(face.person_id) if face.person_id else None,
                box=BoundingBoxResponse.from_box(face.box),
                confidence=face.confidence,
            )
            for face in faces
        ]
