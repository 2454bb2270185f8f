from typing import TYPE_CHECKING
from ...core.config import get_settings
from ...domain.repositories.identity_store import IdentityStore
from ...application.services.matching_engine import MatchingEngine
from ...application.services.auto_tag_propagator import AutoTagPropagator
from ...infrastructure.messaging import (
    BackoffPolicy,
    BridgeChatTransport,
    JsonCredentialStore,
    MessagingSessionManager,
)
from ...infrastructure.notifications import NotificationFanout, WebSocketManager

if TYPE_CHECKING:
    from ..base_container import BaseContainer


class ServicesProvider:
    """Registers process-wide services: matching, propagation, live notifications and messaging"""
    
    @staticmethod
    def register(container: "BaseContainer") -> None:
        settings = get_settings()
        identity_store = container.get(IdentityStore)
        
        container.register_singleton(
            MatchingEngine,
            MatchingEngine(
                identity_store=identity_store,
                association_threshold=settings.association_threshold,
                search_threshold=settings.search_threshold,
                search_limit=settings.search_result_limit,
                embedding_dimension=settings.embedding_dimension,
            )
        )
        
        container.register_singleton(
            AutoTagPropagator,
            AutoTagPropagator(
                identity_store=identity_store,
                propagation_threshold=settings.propagation_threshold,
                max_retries=settings.transaction_max_retries,
            )
        )
        
        websocket_manager = WebSocketManager()
        container.register_singleton(WebSocketManager, websocket_manager)
        
        session_manager = None
        if settings.messaging_enabled:
            session_manager = MessagingSessionManager(
                transport=BridgeChatTransport(base_url=settings.messaging_bridge_url),
                credential_store=JsonCredentialStore(settings.messaging_credentials_path),
                backoff=BackoffPolicy(
                    initial_delay=settings.messaging_backoff_initial_seconds,
                    max_delay=settings.messaging_backoff_max_seconds,
                ),
            )
        # None when messaging is disabled; consumers treat it as optional
        container.register_singleton(MessagingSessionManager, session_manager)
        
        container.register_singleton(
            NotificationFanout,
            NotificationFanout(
                websocket_manager=websocket_manager,
                messaging=session_manager,
                public_base_url=settings.public_base_url,
            )
        )
