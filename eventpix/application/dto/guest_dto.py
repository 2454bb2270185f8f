from typing import List, Optional
from pydantic import BaseModel, Field

from ...domain.models.person import Person
from .photo_dto import PhotoResponse


class GuestResponse(BaseModel):
    """DTO for guest (person) response"""
    id: str
    name: Optional[str] = None
    phone_number: Optional[str] = None
    seat_number: Optional[str] = None

    @classmethod
    def from_person(cls, person: Person) -> "GuestResponse":
        return cls(
            id=person.id or "",
            name=person.name,
            phone_number=person.phone_number,
            seat_number=person.seat_number,
        )


class GuestUpsertRequest(BaseModel):
    """DTO for creating or updating a guest keyed by phone number"""
    phone: str = Field(..., min_length=1)
    name: Optional[str] = None
    seat_number: Optional[str] = None


class GuestBulkUpsertRequest(BaseModel):
    """DTO for bulk guest upsert"""
    guests: List[GuestUpsertRequest]


class GuestBulkUpsertResponse(BaseModel):
    """DTO for bulk guest upsert response"""
    count: int
    guests: List[GuestResponse]


class GuestRegistrationResponse(BaseModel):
    """DTO for guest self-registration response"""
    person_id: str
    count: int


class GuestSearchResponse(BaseModel):
    """DTO for guest self-search response, nearest photo first"""
    photos: List[PhotoResponse]


class GuestDeleteResponse(BaseModel):
    """DTO for guest delete response"""
    person_id: str
    deleted: bool
