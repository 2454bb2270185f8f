from typing import TYPE_CHECKING
from ...application.use_cases.messaging import GetPairingStatusUseCase, RestartMessagingUseCase
from ...infrastructure.messaging import MessagingSessionManager

if TYPE_CHECKING:
    from ..base_container import BaseContainer


class MessagingProvider:
    """Messaging use case provider - pairing status and restart"""
    
    @staticmethod
    def register(container: "BaseContainer") -> None:
        container.register_factory(
            GetPairingStatusUseCase,
            lambda: GetPairingStatusUseCase(session_manager=container.get(MessagingSessionManager))
        )
        
        container.register_factory(
            RestartMessagingUseCase,
            lambda: RestartMessagingUseCase(session_manager=container.get(MessagingSessionManager))
        )
