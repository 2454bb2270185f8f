"""
Messaging session manager: one long-lived chat session per deployment.

State machine:
    UNINITIALIZED -> PAIRING -> CONNECTED -> DISCONNECTED -> (PAIRING | CONNECTED | LOGGED_OUT)

Transport drops reconnect automatically with backoff, without limit. An
explicit logout by the network is terminal until restart() starts a fresh
pairing. Credentials are persisted before the session is declared CONNECTED.
"""
import asyncio
import logging
from enum import Enum
from typing import Any, Dict, Optional

from ...domain.exceptions import (
    CredentialsRejectedError,
    MessageSendError,
    MessagingError,
    SessionNotConnectedError,
)
from .backoff import BackoffPolicy
from .credential_store import JsonCredentialStore
from .transport import ChatTransport, TransportListener

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    UNINITIALIZED = "UNINITIALIZED"
    PAIRING = "PAIRING"
    CONNECTED = "CONNECTED"
    DISCONNECTED = "DISCONNECTED"
    LOGGED_OUT = "LOGGED_OUT"


class MessagingSessionManager(TransportListener):
    """Owns the chat session lifecycle and serializes outbound sends."""

    def __init__(
        self,
        transport: ChatTransport,
        credential_store: JsonCredentialStore,
        backoff: Optional[BackoffPolicy] = None,
    ) -> None:
        self.transport = transport
        self.credential_store = credential_store
        self.backoff = backoff or BackoffPolicy()
        self._state = SessionState.UNINITIALIZED
        self._pairing_code: Optional[str] = None
        self._last_disconnect_reason: Optional[str] = None
        self._send_lock = asyncio.Lock()
        self._reconnect_task: Optional[asyncio.Task] = None
        self._stopped = False

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state == SessionState.CONNECTED

    @property
    def pairing_code(self) -> Optional[str]:
        """Current pairing challenge, only while PAIRING"""
        return self._pairing_code if self._state == SessionState.PAIRING else None

    @property
    def last_disconnect_reason(self) -> Optional[str]:
        return self._last_disconnect_reason

    def _set_state(self, state: SessionState) -> None:
        if state != self._state:
            logger.info("Messaging session %s -> %s", self._state.value, state.value)
            self._state = state

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Open the session with stored credentials, or begin pairing without them."""
        if self._state != SessionState.UNINITIALIZED:
            logger.warning("Messaging session already started (state=%s)", self._state.value)
            return
        self._stopped = False
        await self._open(self.credential_store.load())

    async def restart(self) -> None:
        """
        Operator-driven restart.
        
        From LOGGED_OUT this begins a fresh pairing; from PAIRING or
        DISCONNECTED it retries immediately. A CONNECTED session is kept.
        """
        if self._state == SessionState.CONNECTED:
            logger.info("Messaging session already connected, restart ignored")
            return

        self._stopped = False
        self._cancel_reconnect()
        await self.transport.close()
        credentials = None if self._state == SessionState.LOGGED_OUT else self.credential_store.load()
        self.backoff.reset()
        await self._open(credentials)

    async def stop(self) -> None:
        """Close the session for shutdown; no reconnects afterwards."""
        self._stopped = True
        self._cancel_reconnect()
        try:
            await self.transport.close()
        except Exception as e:
            logger.error("Error closing chat transport: %s", e, exc_info=True)
        self._pairing_code = None
        self._state = SessionState.UNINITIALIZED
        logger.info("Messaging session stopped")

    async def _open(self, credentials: Optional[Dict[str, Any]]) -> None:
        self._pairing_code = None
        self._set_state(SessionState.PAIRING)
        try:
            await self.transport.connect(credentials, self)
        except CredentialsRejectedError as e:
            logger.warning("Stored messaging credentials rejected (%s); starting fresh pairing", e.message)
            self.credential_store.clear()
            await self._connect_or_schedule(None)
        except Exception as e:
            logger.error("Failed to open messaging session: %s", e)
            self._set_state(SessionState.DISCONNECTED)
            self._schedule_reconnect()

    async def _connect_or_schedule(self, credentials: Optional[Dict[str, Any]]) -> None:
        try:
            await self.transport.connect(credentials, self)
        except Exception as e:
            logger.error("Failed to open messaging session: %s", e)
            self._set_state(SessionState.DISCONNECTED)
            self._schedule_reconnect()

    # ------------------------------------------------------------------
    # Reconnect
    # ------------------------------------------------------------------

    def _schedule_reconnect(self) -> None:
        if self._stopped or (self._reconnect_task and not self._reconnect_task.done()):
            return
        self._reconnect_task = asyncio.create_task(self._reconnect_loop(), name="messaging-reconnect")

    def _cancel_reconnect(self) -> None:
        task = self._reconnect_task
        self._reconnect_task = None
        if task and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def _reconnect_loop(self) -> None:
        while not self._stopped and self._state == SessionState.DISCONNECTED:
            delay = self.backoff.next_delay()
            logger.info("Reconnecting messaging session in %.1fs (attempt %d)", delay, self.backoff.attempt)
            await asyncio.sleep(delay)
            if self._stopped or self._state != SessionState.DISCONNECTED:
                return

            credentials = self.credential_store.load()
            try:
                await self.transport.connect(credentials, self)
            except CredentialsRejectedError:
                logger.warning("Stored messaging credentials rejected on reconnect; pairing required")
                self.credential_store.clear()
                continue
            except Exception as e:
                logger.warning("Messaging reconnect failed: %s", e)
                continue

            if credentials is None:
                self._set_state(SessionState.PAIRING)
            return

    # ------------------------------------------------------------------
    # Transport callbacks
    # ------------------------------------------------------------------

    async def on_pairing_challenge(self, code: str) -> None:
        # Printable ASCII only for operator display
        self._pairing_code = "".join(ch for ch in code if 32 <= ord(ch) < 127)
        self._set_state(SessionState.PAIRING)
        logger.info("Messaging pairing challenge available")

    async def on_connected(self, credentials: Dict[str, Any]) -> None:
        try:
            self.credential_store.save(credentials)
        except OSError as e:
            logger.error("Could not persist messaging credentials, not declaring connected: %s", e)
            await self.transport.close()
            self._set_state(SessionState.DISCONNECTED)
            self._schedule_reconnect()
            return

        self._pairing_code = None
        self._last_disconnect_reason = None
        self.backoff.reset()
        self._set_state(SessionState.CONNECTED)

    async def on_disconnected(self, reason: str, logged_out: bool) -> None:
        if self._stopped:
            return
        self._last_disconnect_reason = reason
        self._pairing_code = None

        if logged_out:
            logger.warning("Messaging session logged out by the network: %s", reason)
            self.credential_store.clear()
            self._cancel_reconnect()
            self._set_state(SessionState.LOGGED_OUT)
            return

        logger.warning("Messaging session disconnected: %s", reason)
        self._set_state(SessionState.DISCONNECTED)
        self._schedule_reconnect()

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    async def send_text(self, handle: str, text: str) -> None:
        """
        Send one message on the shared session, in submission order.
        
        Raises:
            SessionNotConnectedError: the session is not CONNECTED (fails fast)
            MessageSendError: the network rejected the message
        """
        if not self.is_connected:
            raise SessionNotConnectedError(self._state.value)

        async with self._send_lock:
            if not self.is_connected:
                raise SessionNotConnectedError(self._state.value)
            try:
                await self.transport.send_text(handle, text)
            except MessagingError:
                raise
            except Exception as e:
                raise MessageSendError(f"Sending to {handle} failed: {e}") from e
        logger.info("Sent chat message to %s", handle)
