from typing import TYPE_CHECKING
from ...core.config import get_settings
from ...domain.repositories.face_detector import FaceDetector
from ...domain.repositories.identity_store import IdentityStore
from ...domain.repositories.object_storage import ObjectStorage
from ...application.services.matching_engine import MatchingEngine
from ...application.use_cases.guest import (
    DeleteGuestUseCase,
    ListGuestsUseCase,
    RegisterGuestUseCase,
    SearchGuestPhotosUseCase,
    UpsertGuestUseCase,
)

if TYPE_CHECKING:
    from ..base_container import BaseContainer


class GuestProvider:
    """Guest use case provider - registration, search and guest list management"""
    
    @staticmethod
    def register(container: "BaseContainer") -> None:
        max_retries = get_settings().transaction_max_retries
        
        container.register_factory(
            RegisterGuestUseCase,
            lambda: RegisterGuestUseCase(
                identity_store=container.get(IdentityStore),
                object_storage=container.get(ObjectStorage),
                face_detector=container.get(FaceDetector),
                matching_engine=container.get(MatchingEngine),
                max_retries=max_retries,
            )
        )
        
        container.register_factory(
            SearchGuestPhotosUseCase,
            lambda: SearchGuestPhotosUseCase(
                face_detector=container.get(FaceDetector),
                matching_engine=container.get(MatchingEngine),
            )
        )
        
        container.register_factory(
            UpsertGuestUseCase,
            lambda: UpsertGuestUseCase(
                identity_store=container.get(IdentityStore),
                max_retries=max_retries,
            )
        )
        
        container.register_factory(
            ListGuestsUseCase,
            lambda: ListGuestsUseCase(identity_store=container.get(IdentityStore))
        )
        
        container.register_factory(
            DeleteGuestUseCase,
            lambda: DeleteGuestUseCase(
                identity_store=container.get(IdentityStore),
                max_retries=max_retries,
            )
        )
