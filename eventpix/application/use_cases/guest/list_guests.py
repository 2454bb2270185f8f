# Standard library imports
from typing import List

# Local application imports
from ....domain.repositories.identity_store import IdentityStore
from ...dto.guest_dto import GuestResponse


class ListGuestsUseCase:
    """Use case for listing all guests ordered by name"""
    
    def __init__(self, identity_store: IdentityStore) -> None:
        self.identity_store = identity_store
    
    async def execute(self) -> List[GuestResponse]:
        persons = await self.identity_store.list_persons()
        return [GuestResponse.from_person(person) for person in persons]
