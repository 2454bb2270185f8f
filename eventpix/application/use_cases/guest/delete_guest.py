# Standard library imports
import logging

# Local application imports
from ....domain.exceptions import NotFoundError
from ....domain.repositories.identity_store import IdentityStore
from ....utils.retry_utils import async_retry_on_exception
from ...dto.guest_dto import GuestDeleteResponse

logger = logging.getLogger(__name__)


class DeleteGuestUseCase:
    """Use case for the explicit operator delete of a guest; faces are unlabeled, not deleted"""
    
    def __init__(self, identity_store: IdentityStore, max_retries: int = 3) -> None:
        self.identity_store = identity_store
        self._delete_with_retry = async_retry_on_exception(max_retries=max_retries)(self._delete)
    
    async def execute(self, person_id: str) -> GuestDeleteResponse:
        """
        Delete a guest
        
        Raises:
            NotFoundError: If the guest does not exist
        """
        deleted = await self._delete_with_retry(person_id)
        if not deleted:
            raise NotFoundError("Guest", person_id)
        logger.info("Deleted guest %s", person_id)
        return GuestDeleteResponse(person_id=person_id, deleted=True)
    
    async def _delete(self, person_id: str) -> bool:
        async with self.identity_store.transaction() as session:
            return await self.identity_store.delete_person(person_id, session=session)
