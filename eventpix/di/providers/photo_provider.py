from typing import TYPE_CHECKING
from ...core.config import get_settings
from ...domain.repositories.face_detector import FaceDetector
from ...domain.repositories.identity_store import IdentityStore
from ...domain.repositories.object_storage import ObjectStorage
from ...application.services.matching_engine import MatchingEngine
from ...application.use_cases.photo import (
    DeletePhotoUseCase,
    ListPhotoFacesUseCase,
    ListPhotosUseCase,
    UploadPhotoUseCase,
)
from ...infrastructure.notifications import NotificationFanout

if TYPE_CHECKING:
    from ..base_container import BaseContainer


class PhotoProvider:
    """Photo use case provider - registers all photo-related use cases"""
    
    @staticmethod
    def register(container: "BaseContainer") -> None:
        """
        Register all photo use cases.
        Use cases are created on-demand via factories.
        """
        max_retries = get_settings().transaction_max_retries
        
        container.register_factory(
            UploadPhotoUseCase,
            lambda: UploadPhotoUseCase(
                identity_store=container.get(IdentityStore),
                object_storage=container.get(ObjectStorage),
                face_detector=container.get(FaceDetector),
                matching_engine=container.get(MatchingEngine),
                fanout=container.get(NotificationFanout),
                max_retries=max_retries,
            )
        )
        
        container.register_factory(
            ListPhotosUseCase,
            lambda: ListPhotosUseCase(identity_store=container.get(IdentityStore))
        )
        
        container.register_factory(
            ListPhotoFacesUseCase,
            lambda: ListPhotoFacesUseCase(identity_store=container.get(IdentityStore))
        )
        
        container.register_factory(
            DeletePhotoUseCase,
            lambda: DeletePhotoUseCase(
                identity_store=container.get(IdentityStore),
                object_storage=container.get(ObjectStorage),
                fanout=container.get(NotificationFanout),
                max_retries=max_retries,
            )
        )
