# Standard library imports
from typing import Optional, TYPE_CHECKING

# Local application imports
from ...dto.messaging_dto import MessagingStatusResponse

if TYPE_CHECKING:
    from ....infrastructure.messaging.session_manager import MessagingSessionManager

DISABLED_STATE = "DISABLED"


def build_status(session_manager: Optional["MessagingSessionManager"]) -> MessagingStatusResponse:
    """Operator-facing view of the messaging session"""
    if session_manager is None:
        return MessagingStatusResponse(
            state=DISABLED_STATE,
            connected=False,
            message="Messaging is disabled",
        )
    
    state = session_manager.state.value
    if session_manager.is_connected:
        message = "already connected"
    elif session_manager.pairing_code:
        message = "Scan the pairing code with the messaging app"
    elif state == "LOGGED_OUT":
        message = "Logged out by the network; restart to pair again"
    elif state == "DISCONNECTED":
        message = "Reconnecting"
    else:
        message = "Waiting for pairing code"
    
    return MessagingStatusResponse(
        state=state,
        connected=session_manager.is_connected,
        pairing_code=session_manager.pairing_code,
        message=message,
    )


class GetPairingStatusUseCase:
    """Use case for reading the pairing challenge / connection state"""
    
    def __init__(self, session_manager: Optional["MessagingSessionManager"] = None) -> None:
        self.session_manager = session_manager
    
    async def execute(self) -> MessagingStatusResponse:
        return build_status(self.session_manager)
