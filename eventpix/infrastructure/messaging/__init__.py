"""Messaging infrastructure: chat session lifecycle and transports"""

from .backoff import BackoffPolicy
from .credential_store import JsonCredentialStore
from .transport import ChatTransport, TransportListener
from .bridge_transport import BridgeChatTransport
from .session_manager import MessagingSessionManager, SessionState

__all__ = [
    "BackoffPolicy",
    "JsonCredentialStore",
    "ChatTransport",
    "TransportListener",
    "BridgeChatTransport",
    "MessagingSessionManager",
    "SessionState",
]
