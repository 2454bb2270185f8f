from .upload_photo import UploadPhotoUseCase
from .list_photos import ListPhotosUseCase
from .list_photo_faces import ListPhotoFacesUseCase
from .delete_photo import DeletePhotoUseCase

__all__ = [
    "UploadPhotoUseCase",
    "ListPhotosUseCase",
    "ListPhotoFacesUseCase",
    "DeletePhotoUseCase",
]
