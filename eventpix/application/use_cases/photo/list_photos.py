# Standard library imports
from typing import List

# Local application imports
from ....domain.repositories.identity_store import IdentityStore
from ...dto.photo_dto import PhotoResponse


class ListPhotosUseCase:
    """Use case for listing event photos (registration selfies excluded)"""
    
    def __init__(self, identity_store: IdentityStore) -> None:
        self.identity_store = identity_store
    
    async def execute(self) -> List[PhotoResponse]:
        photos = await self.identity_store.list_photos(include_reference=False)
        return [PhotoResponse.from_photo(photo) for photo in photos]
