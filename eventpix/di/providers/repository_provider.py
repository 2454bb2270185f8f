from typing import TYPE_CHECKING
from ...core.config import get_settings
from ...domain.repositories.face_detector import FaceDetector
from ...domain.repositories.identity_store import IdentityStore
from ...domain.repositories.object_storage import ObjectStorage
from ...infrastructure.db.mongo_identity_store import MongoIdentityStore
from ...infrastructure.external.detection_client import DetectionClient
from ...infrastructure.storage.local_object_storage import LocalObjectStorage

if TYPE_CHECKING:
    from ..base_container import BaseContainer


class RepositoryProvider:
    """Wires domain interfaces (store, blob storage, detector) to infrastructure implementations"""
    
    @staticmethod
    def register(container: "BaseContainer") -> None:
        settings = get_settings()
        
        container.register_singleton(
            IdentityStore,
            MongoIdentityStore(
                client=container.get("mongo_client"),
                person_collection=container.get("person_collection"),
                photo_collection=container.get("photo_collection"),
                face_collection=container.get("face_collection"),
            )
        )
        
        container.register_singleton(ObjectStorage, LocalObjectStorage(root_dir=settings.storage_dir))
        
        if settings.detection_backend == "deepface":
            # Heavy import; only when selected
            from ...infrastructure.external.deepface_detector import DeepFaceDetector
            detector: FaceDetector = DeepFaceDetector()
        else:
            detector = DetectionClient(
                base_url=settings.detection_service_url,
                timeout=settings.detection_timeout_seconds,
            )
        container.register_singleton(FaceDetector, detector)
