"""Constants for domain model field names"""

from .person_fields import PersonFields
from .photo_fields import PhotoFields
from .face_fields import FaceFields
from .media_constants import (
    ALLOWED_IMAGE_EXTENSIONS,
    ALLOWED_IMAGE_MIME,
    MAX_IMAGE_BYTES,
    MAX_REGISTRATION_PHOTOS,
    EVENT_PHOTO_SUBDIR,
    ORIGINAL_PHOTO_SUBDIR,
    REFERENCE_PHOTO_SUBDIR,
)

__all__ = [
    "PersonFields",
    "PhotoFields",
    "FaceFields",
    "ALLOWED_IMAGE_EXTENSIONS",
    "ALLOWED_IMAGE_MIME",
    "MAX_IMAGE_BYTES",
    "MAX_REGISTRATION_PHOTOS",
    "EVENT_PHOTO_SUBDIR",
    "ORIGINAL_PHOTO_SUBDIR",
    "REFERENCE_PHOTO_SUBDIR",
]
