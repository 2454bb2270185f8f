from .register_guest import RegisterGuestUseCase
from .search_guest_photos import SearchGuestPhotosUseCase
from .upsert_guest import UpsertGuestUseCase
from .list_guests import ListGuestsUseCase
from .delete_guest import DeleteGuestUseCase

__all__ = [
    "RegisterGuestUseCase",
    "SearchGuestPhotosUseCase",
    "UpsertGuestUseCase",
    "ListGuestsUseCase",
    "DeleteGuestUseCase",
]
