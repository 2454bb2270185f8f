# Standard library imports
import logging
from typing import Optional, TYPE_CHECKING

# Local application imports
from ....domain.exceptions import NotFoundError
from ....domain.repositories.identity_store import IdentityStore
from ....domain.repositories.object_storage import ObjectStorage
from ....utils.retry_utils import async_retry_on_exception
from ...dto.photo_dto import PhotoDeleteResponse

if TYPE_CHECKING:
    from ....infrastructure.notifications.fanout import NotificationFanout

logger = logging.getLogger(__name__)


class DeletePhotoUseCase:
    """Use case for deleting a photo, its faces and its blobs"""
    
    def __init__(
        self,
        identity_store: IdentityStore,
        object_storage: ObjectStorage,
        fanout: Optional["NotificationFanout"] = None,
        max_retries: int = 3,
    ) -> None:
        self.identity_store = identity_store
        self.object_storage = object_storage
        self.fanout = fanout
        self._delete_with_retry = async_retry_on_exception(max_retries=max_retries)(self._delete)
    
    async def execute(self, photo_id: str) -> PhotoDeleteResponse:
        """
        Delete a photo
        
        Raises:
            NotFoundError: If the photo does not exist
        """
        photo = await self.identity_store.find_photo(photo_id)
        if not photo:
            raise NotFoundError("Photo", photo_id)
        
        deleted = await self._delete_with_retry(photo_id)
        if not deleted:
            raise NotFoundError("Photo", photo_id)
        
        # Rows are gone; a blob that cannot be released only leaks storage
        for url in (photo.url, photo.original_url):
            if not url:
                continue
            try:
                await self.object_storage.delete(url)
            except Exception as e:
                logger.warning("Could not release blob %s of deleted photo %s: %s", url, photo_id, e)
        
        if self.fanout:
            await self.fanout.photo_deleted(photo_id)
        
        return PhotoDeleteResponse(photo_id=photo_id, deleted=True)
    
    async def _delete(self, photo_id: str) -> bool:
        async with self.identity_store.transaction() as session:
            return await self.identity_store.delete_photo(photo_id, session=session)
