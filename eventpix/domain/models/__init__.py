from .person import Person, normalize_phone
from .photo import Photo, PhotoStatus
from .face import BoundingBox, DetectedFace, Face

__all__ = [
    "Person",
    "normalize_phone",
    "Photo",
    "PhotoStatus",
    "BoundingBox",
    "DetectedFace",
    "Face",
]
