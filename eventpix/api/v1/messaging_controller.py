# External package imports
from fastapi import APIRouter

# Local application imports
from ...application.dto.messaging_dto import MessagingStatusResponse
from ...application.use_cases.messaging import GetPairingStatusUseCase, RestartMessagingUseCase
from ...di.container import get_container
from ...domain.exceptions import EventPixError
from .dependencies import to_http_exception


router = APIRouter(tags=["messaging"])


@router.get("/pairing", response_model=MessagingStatusResponse)
async def get_pairing() -> MessagingStatusResponse:
    """Current pairing code for the operator, or "already connected" """
    container = get_container()
    pairing_use_case = container.get(GetPairingStatusUseCase)
    return await pairing_use_case.execute()


@router.post("/restart", response_model=MessagingStatusResponse)
async def restart_messaging() -> MessagingStatusResponse:
    """Restart the messaging session; after a logout this starts a fresh pairing"""
    container = get_container()
    restart_use_case = container.get(RestartMessagingUseCase)
    
    try:
        return await restart_use_case.execute()
    except EventPixError as exception:
        raise to_http_exception(exception)
