from .database_provider import DatabaseProvider
from .repository_provider import RepositoryProvider
from .services_provider import ServicesProvider
from .photo_provider import PhotoProvider
from .face_provider import FaceProvider
from .guest_provider import GuestProvider
from .messaging_provider import MessagingProvider


__all__ = [
    "DatabaseProvider",
    "RepositoryProvider",
    "ServicesProvider",
    "PhotoProvider",
    "FaceProvider",
    "GuestProvider",
    "MessagingProvider",
]
