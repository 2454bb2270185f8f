"""Chat transport abstraction used by the messaging session manager."""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class TransportListener(ABC):
    """Callbacks a transport emits while a session is open"""
    
    @abstractmethod
    async def on_pairing_challenge(self, code: str) -> None:
        """A pairing challenge must be shown to the operator"""
        pass
    
    @abstractmethod
    async def on_connected(self, credentials: Dict[str, Any]) -> None:
        """The network accepted the session; credentials allow reconnecting without pairing"""
        pass
    
    @abstractmethod
    async def on_disconnected(self, reason: str, logged_out: bool) -> None:
        """The session dropped; logged_out marks an explicit logout by the network"""
        pass


class ChatTransport(ABC):
    """One connection to an external chat network"""
    
    @abstractmethod
    async def connect(self, credentials: Optional[Dict[str, Any]], listener: TransportListener) -> None:
        """
        Open a session, resuming with credentials when given.
        
        Raises:
            CredentialsRejectedError: the credentials are no longer valid
        """
        pass
    
    @abstractmethod
    async def send_text(self, handle: str, text: str) -> None:
        """
        Send a text message to a contact handle.
        
        Raises:
            MessageSendError: the network rejected the message
        """
        pass
    
    @abstractmethod
    async def close(self) -> None:
        """Close the session; no callbacks fire afterwards"""
        pass
