# Standard library imports
import logging
from typing import List, Optional

# Local application imports
from ....domain.exceptions import ValidationError
from ....domain.models.person import normalize_phone
from ....domain.repositories.identity_store import IdentityStore
from ....utils.retry_utils import async_retry_on_exception
from ...dto.guest_dto import (
    GuestBulkUpsertRequest,
    GuestBulkUpsertResponse,
    GuestResponse,
    GuestUpsertRequest,
)

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class UpsertGuestUseCase:
    """Use case for creating or updating guests keyed by phone number"""
    
    def __init__(self, identity_store: IdentityStore, max_retries: int = 3) -> None:
        self.identity_store = identity_store
        self._upsert_many_with_retry = async_retry_on_exception(max_retries=max_retries)(self._upsert_many)
    
    async def execute(self, request: GuestUpsertRequest) -> GuestResponse:
        """
        Upsert one guest
        
        Raises:
            ValidationError: phone number has no digits
        """
        persons = await self._upsert_many_with_retry([self._validated(request, 1)])
        return GuestResponse.from_person(persons[0])
    
    async def execute_bulk(self, request: GuestBulkUpsertRequest) -> GuestBulkUpsertResponse:
        """
        Upsert many guests in one transaction; one invalid row rejects the batch
        
        Raises:
            ValidationError: empty batch or a row without a usable phone number
        """
        if not request.guests:
            raise ValidationError("No guests provided")
        rows = [self._validated(guest, index + 1) for index, guest in enumerate(request.guests)]
        persons = await self._upsert_many_with_retry(rows)
        logger.info("Bulk upserted %d guest(s)", len(persons))
        return GuestBulkUpsertResponse(
            count=len(persons),
            guests=[GuestResponse.from_person(person) for person in persons],
        )
    
    @staticmethod
    def _validated(request: GuestUpsertRequest, row: int) -> GuestUpsertRequest:
        phone_number = normalize_phone(request.phone)
        if not phone_number:
            raise ValidationError(f"Row {row}: a valid phone number is required")
        return GuestUpsertRequest(
            phone=phone_number,
            name=_clean(request.name),
            seat_number=_clean(request.seat_number),
        )
    
    async def _upsert_many(self, rows: List[GuestUpsertRequest]):
        persons = []
        async with self.identity_store.transaction() as session:
            for row in rows:
                persons.append(
                    await self.identity_store.upsert_person_by_phone(
                        row.phone,
                        name=row.name,
                        seat_number=row.seat_number,
                        session=session,
                    )
                )
        return persons
