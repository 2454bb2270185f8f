from typing import List, Optional
from pydantic import BaseModel

from ...domain.models.face import BoundingBox
from ...domain.models.photo import Photo
from ...utils.datetime_utils import to_iso


class BoundingBoxResponse(BaseModel):
    """Face box in normalized-fraction units"""
    x1: float
    y1: float
    x2: float
    y2: float

    @classmethod
    def from_box(cls, box: BoundingBox) -> "BoundingBoxResponse":
        return cls(**box.as_dict())


class PhotoResponse(BaseModel):
    """DTO for photo response"""
    id: str
    url: str
    original_url: Optional[str] = None
    status: str
    width: int = 0
    height: int = 0
    created_at: Optional[str] = None

    @classmethod
    def from_photo(cls, photo: Photo) -> "PhotoResponse":
        return cls(
            id=photo.id or "",
            url=photo.url,
            original_url=photo.original_url,
            status=photo.status.value,
            width=photo.width,
            height=photo.height,
            created_at=to_iso(photo.created_at),
        )


class FaceResponse(BaseModel):
    """DTO for one face of a photo"""
    id: str
    photo_id: str
    person_id: Optional[str] = None
    person_name: Optional[str] = None
    box: BoundingBoxResponse
    confidence: float


class PhotoUploadResponse(BaseModel):
    """DTO for photo upload response"""
    photo: PhotoResponse
    face_count: int
    matched_person_ids: List[str] = []


class PhotoDeleteResponse(BaseModel):
    """DTO for photo delete response"""
    photo_id: str
    deleted: bool
