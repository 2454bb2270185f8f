# Standard library imports
import logging
from typing import Optional, TYPE_CHECKING

# Local application imports
from ....domain.exceptions import MessagingError
from ...dto.messaging_dto import MessagingStatusResponse
from .get_pairing_status import build_status

if TYPE_CHECKING:
    from ....infrastructure.messaging.session_manager import MessagingSessionManager

logger = logging.getLogger(__name__)


class RestartMessagingUseCase:
    """Use case for the operator restart of the messaging session (fresh pairing after logout)"""
    
    def __init__(self, session_manager: Optional["MessagingSessionManager"] = None) -> None:
        self.session_manager = session_manager
    
    async def execute(self) -> MessagingStatusResponse:
        """
        Restart the session
        
        Raises:
            MessagingError: messaging is disabled in this deployment
        """
        if self.session_manager is None:
            raise MessagingError("Messaging is disabled", user_message="Messaging is disabled.")
        
        logger.info("Operator requested messaging restart (state=%s)", self.session_manager.state.value)
        await self.session_manager.restart()
        return build_status(self.session_manager)
