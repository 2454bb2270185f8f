"""Notification Service for formatting live UI payloads and guest chat messages"""

import logging
from typing import Any, Dict, Optional, Sequence

from ...domain.models.person import Person
from ...domain.models.photo import Photo
from ...utils.datetime_utils import to_iso, utc_now

logger = logging.getLogger(__name__)

PHOTO_READY = "photo_ready"
PHOTO_DELETED = "photo_deleted"
PERSON_RENAMED = "person_renamed"


class NotificationService:
    """
    Formats domain changes into notification payloads.
    
    Payloads are plain dicts ready for WebSocket transmission; chat messages
    are plain text for the messaging session.
    """
    
    @staticmethod
    def format_photo(photo: Photo) -> Dict[str, Any]:
        return {
            "id": photo.id,
            "url": photo.url,
            "original_url": photo.original_url,
            "status": photo.status.value,
            "created_at": to_iso(photo.created_at),
        }
    
    @staticmethod
    def format_photo_ready(photo: Photo) -> Dict[str, Any]:
        return {
            "type": PHOTO_READY,
            "photo": NotificationService.format_photo(photo),
            "sent_at": to_iso(utc_now()),
        }
    
    @staticmethod
    def format_photo_deleted(photo_id: str) -> Dict[str, Any]:
        return {
            "type": PHOTO_DELETED,
            "photo_id": photo_id,
            "sent_at": to_iso(utc_now()),
        }
    
    @staticmethod
    def format_person_renamed(person: Person, face_ids: Sequence[str]) -> Dict[str, Any]:
        return {
            "type": PERSON_RENAMED,
            "person": {"id": person.id, "name": person.name},
            "face_ids": list(face_ids),
            "sent_at": to_iso(utc_now()),
        }
    
    @staticmethod
    def format_guest_message(person: Person, photo_url: str, public_base_url: Optional[str] = None) -> str:
        """
        Chat text telling a guest a photo of them is ready.
        
        Relative photo URLs are made absolute with public_base_url when given.
        """
        link = photo_url
        if public_base_url and photo_url.startswith("/"):
            link = public_base_url.rstrip("/") + photo_url
        
        greeting = f"Hi {person.name}!" if person.name else "Hi!"
        return f"{greeting} A new photo of you from the event is ready: {link}"
