from .photo_controller import router as photo_router
from .face_controller import router as face_router
from .guest_controller import router as guest_router
from .messaging_controller import router as messaging_router
from .notifications_controller import router as notifications_router


__all__ = ["photo_router", "face_router", "guest_router", "messaging_router", "notifications_router"]
