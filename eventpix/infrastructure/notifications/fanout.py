"""
Notification fan-out after committed photo / person changes.

Two independent deliveries per change:
(a) broadcast to live UI viewers over WebSocket
(b) a chat message to each affected guest with a contact handle

A failure in one delivery is logged and never affects the other, nor the
already-committed change that triggered it.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, TYPE_CHECKING

from ...domain.exceptions import MessagingError
from ...domain.models.person import Person
from ...domain.models.photo import Photo
from .notification_service import NotificationService
from .websocket_manager import WebSocketManager

if TYPE_CHECKING:
    from ..messaging.session_manager import MessagingSessionManager

logger = logging.getLogger(__name__)


@dataclass
class FanoutResult:
    """Delivery counts of one fan-out."""
    viewers_notified: int = 0
    messages_sent: int = 0
    messages_failed: int = 0


class NotificationFanout:
    """Failure-isolated broadcast + guest messaging."""

    def __init__(
        self,
        websocket_manager: WebSocketManager,
        messaging: Optional["MessagingSessionManager"] = None,
        public_base_url: Optional[str] = None,
    ) -> None:
        self.websocket_manager = websocket_manager
        self.messaging = messaging
        self.public_base_url = public_base_url

    async def photo_ready(self, photo: Photo, persons: Sequence[Person]) -> FanoutResult:
        """A new photo is committed; persons are the distinct Persons linked to its faces."""
        result = FanoutResult()
        result.viewers_notified = await self._broadcast(NotificationService.format_photo_ready(photo))
        await self._message_persons(persons, [photo], result)
        return result

    async def photo_deleted(self, photo_id: str) -> FanoutResult:
        result = FanoutResult()
        result.viewers_notified = await self._broadcast(NotificationService.format_photo_deleted(photo_id))
        return result

    async def person_renamed(
        self,
        person: Person,
        face_ids: Sequence[str],
        photos: Sequence[Photo] = (),
    ) -> FanoutResult:
        """A face was named (and possibly auto-tagged); photos are the event photos of those faces."""
        result = FanoutResult()
        result.viewers_notified = await self._broadcast(
            NotificationService.format_person_renamed(person, face_ids)
        )
        await self._message_persons([person], photos, result)
        return result

    async def _broadcast(self, payload: Dict) -> int:
        try:
            return await self.websocket_manager.broadcast_to_all(payload)
        except Exception as e:
            logger.error(f"Broadcast of {payload.get('type')} failed: {e}", exc_info=True)
            return 0

    async def _message_persons(
        self,
        persons: Sequence[Person],
        photos: Sequence[Photo],
        result: FanoutResult,
    ) -> None:
        if self.messaging is None or not photos:
            return

        # Once per distinct Person per photo
        seen: Dict[str, Person] = {}
        for person in persons:
            if person.id and person.id not in seen and person.can_be_messaged:
                seen[person.id] = person

        for person in seen.values():
            for photo in photos:
                if photo.is_reference:
                    continue
                text = NotificationService.format_guest_message(person, photo.url, self.public_base_url)
                try:
                    await self.messaging.send_text(person.phone_number, text)
                    result.messages_sent += 1
                except MessagingError as e:
                    result.messages_failed += 1
                    logger.warning(f"Message to person {person.id} about photo {photo.id} not sent: {e.message}")
                except Exception as e:
                    result.messages_failed += 1
                    logger.error(f"Unexpected error messaging person {person.id}: {e}", exc_info=True)
