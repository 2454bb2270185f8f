from typing import TYPE_CHECKING
from ...domain.repositories.identity_store import IdentityStore
from ...application.services.auto_tag_propagator import AutoTagPropagator
from ...application.use_cases.face import NameFaceUseCase
from ...infrastructure.notifications import NotificationFanout

if TYPE_CHECKING:
    from ..base_container import BaseContainer


class FaceProvider:
    """Face use case provider"""
    
    @staticmethod
    def register(container: "BaseContainer") -> None:
        container.register_factory(
            NameFaceUseCase,
            lambda: NameFaceUseCase(
                propagator=container.get(AutoTagPropagator),
                identity_store=container.get(IdentityStore),
                fanout=container.get(NotificationFanout),
            )
        )
