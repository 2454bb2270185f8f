# Standard library imports
import asyncio
import logging
from typing import Any, Dict, List, Optional

# External package imports
import httpx

# Local application imports
from ..external.base_service_client import BaseServiceClient
from ...domain.exceptions import CredentialsRejectedError, MessageSendError
from .transport import ChatTransport, TransportListener

logger = logging.getLogger(__name__)

EVENT_PAIRING = "pairing"
EVENT_CONNECTED = "connected"
EVENT_DISCONNECTED = "disconnected"


class BridgeChatTransport(BaseServiceClient, ChatTransport):
    """
    ChatTransport talking to a chat-bridge sidecar over HTTP.
    
    Bridge API:
    - POST /session/start {"credentials": {...} | null} -> {"session_id"}; 401 when credentials are rejected
    - GET  /session/events?session_id=..&wait=N (long poll) -> {"events": [...]}
    - POST /messages {"session_id", "to", "text"}
    - POST /session/close {"session_id"}
    
    Events are {"type": "pairing", "code"}, {"type": "connected", "credentials"}
    and {"type": "disconnected", "reason", "logged_out"}.
    """
    
    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        poll_wait_seconds: float = 25.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(base_url, timeout=timeout, client=client)
        self.poll_wait_seconds = poll_wait_seconds
        self._session_id: Optional[str] = None
        self._listener: Optional[TransportListener] = None
        self._poll_task: Optional[asyncio.Task] = None
    
    @property
    def session_id(self) -> Optional[str]:
        return self._session_id
    
    async def connect(self, credentials: Optional[Dict[str, Any]], listener: TransportListener) -> None:
        await self._stop_polling()
        
        response = await self.client.post(
            self.url("/session/start"),
            json={"credentials": credentials},
            timeout=self.timeout,
        )
        if response.status_code == 401:
            raise CredentialsRejectedError("Chat bridge rejected the stored credentials")
        response.raise_for_status()
        
        self._session_id = response.json()["session_id"]
        self._listener = listener
        self._poll_task = asyncio.create_task(self._poll_events(self._session_id), name="chat-bridge-events")
        logger.info(f"Chat bridge session {self._session_id} started (resumed={credentials is not None})")
    
    async def send_text(self, handle: str, text: str) -> None:
        if not self._session_id:
            raise MessageSendError("No open chat bridge session")
        try:
            response = await self.client.post(
                self.url("/messages"),
                json={"session_id": self._session_id, "to": handle, "text": text},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise MessageSendError(
                f"Chat bridge rejected message: {e.response.status_code} - {e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise MessageSendError(f"Chat bridge unreachable: {e}") from e
    
    async def close(self) -> None:
        session_id = self._session_id
        await self._stop_polling()
        self._session_id = None
        self._listener = None
        if not session_id:
            return
        try:
            await self.client.post(
                self.url("/session/close"),
                json={"session_id": session_id},
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            logger.warning(f"Failed to close chat bridge session {session_id}: {e}")
    
    async def _stop_polling(self) -> None:
        task = self._poll_task
        self._poll_task = None
        if task is None or task is asyncio.current_task() or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
    
    async def _poll_events(self, session_id: str) -> None:
        """Long-poll bridge events until the session ends or the bridge is lost."""
        while self._session_id == session_id:
            try:
                response = await self.client.get(
                    self.url("/session/events"),
                    params={"session_id": session_id, "wait": self.poll_wait_seconds},
                    timeout=self.poll_wait_seconds + self.timeout,
                )
                response.raise_for_status()
                events = response.json().get("events") or []
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning(f"Lost chat bridge event stream for session {session_id}: {e}")
                await self._dispatch_disconnected(session_id, f"bridge unreachable: {e}", logged_out=False)
                return
            
            if not await self._dispatch(session_id, events):
                return
    
    async def _dispatch(self, session_id: str, events: List[Dict[str, Any]]) -> bool:
        """Forward events to the listener; False once the session is over."""
        listener = self._listener
        for event in events:
            if listener is None or self._session_id != session_id:
                return False
            event_type = event.get("type")
            try:
                if event_type == EVENT_PAIRING:
                    await listener.on_pairing_challenge(str(event.get("code", "")))
                elif event_type == EVENT_CONNECTED:
                    await listener.on_connected(event.get("credentials") or {})
                elif event_type == EVENT_DISCONNECTED:
                    await self._dispatch_disconnected(
                        session_id,
                        str(event.get("reason", "disconnected")),
                        logged_out=bool(event.get("logged_out", False)),
                    )
                    return False
                else:
                    logger.debug(f"Ignoring unknown chat bridge event: {event_type}")
            except Exception as e:
                logger.error(f"Error handling chat bridge event {event_type}: {e}", exc_info=True)
        return True
    
    async def _dispatch_disconnected(self, session_id: str, reason: str, logged_out: bool) -> None:
        listener = self._listener
        if self._session_id != session_id or listener is None:
            return
        self._session_id = None
        self._poll_task = None
        await listener.on_disconnected(reason, logged_out)
