from .get_pairing_status import GetPairingStatusUseCase
from .restart_messaging import RestartMessagingUseCase

__all__ = [
    "GetPairingStatusUseCase",
    "RestartMessagingUseCase",
]
