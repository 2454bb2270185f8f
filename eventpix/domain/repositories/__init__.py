from .identity_store import IdentityStore
from .object_storage import ObjectStorage
from .face_detector import FaceDetector

__all__ = ["IdentityStore", "ObjectStorage", "FaceDetector"]
