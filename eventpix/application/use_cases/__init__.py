from .photo import (
    UploadPhotoUseCase,
    ListPhotosUseCase,
    ListPhotoFacesUseCase,
    DeletePhotoUseCase,
)
from .face import NameFaceUseCase
from .guest import (
    RegisterGuestUseCase,
    SearchGuestPhotosUseCase,
    UpsertGuestUseCase,
    ListGuestsUseCase,
    DeleteGuestUseCase,
)
from .messaging import (
    GetPairingStatusUseCase,
    RestartMessagingUseCase,
)

__all__ = [
    "UploadPhotoUseCase",
    "ListPhotosUseCase",
    "ListPhotoFacesUseCase",
    "DeletePhotoUseCase",
    "NameFaceUseCase",
    "RegisterGuestUseCase",
    "SearchGuestPhotosUseCase",
    "UpsertGuestUseCase",
    "ListGuestsUseCase",
    "DeleteGuestUseCase",
    "GetPairingStatusUseCase",
    "RestartMessagingUseCase",
]
