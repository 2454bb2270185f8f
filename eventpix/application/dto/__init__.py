from .photo_dto import (
    BoundingBoxResponse,
    PhotoResponse,
    FaceResponse,
    PhotoUploadResponse,
    PhotoDeleteResponse,
)
from .face_dto import FaceNameRequest, FaceNameResponse
from .guest_dto import (
    GuestResponse,
    GuestUpsertRequest,
    GuestBulkUpsertRequest,
    GuestBulkUpsertResponse,
    GuestRegistrationResponse,
    GuestSearchResponse,
    GuestDeleteResponse,
)
from .messaging_dto import MessagingStatusResponse

__all__ = [
    "BoundingBoxResponse",
    "PhotoResponse",
    "FaceResponse",
    "PhotoUploadResponse",
    "PhotoDeleteResponse",
    "FaceNameRequest",
    "FaceNameResponse",
    "GuestResponse",
    "GuestUpsertRequest",
    "GuestBulkUpsertRequest",
    "GuestBulkUpsertResponse",
    "GuestRegistrationResponse",
    "GuestSearchResponse",
    "GuestDeleteResponse",
    "MessagingStatusResponse",
]
