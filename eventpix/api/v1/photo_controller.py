# Standard library imports
from typing import List, Optional

# External package imports
from fastapi import APIRouter, BackgroundTasks, File, UploadFile, status

# Local application imports
from ...application.dto.photo_dto import FaceResponse, PhotoDeleteResponse, PhotoResponse, PhotoUploadResponse
from ...application.use_cases.photo import (
    DeletePhotoUseCase,
    ListPhotoFacesUseCase,
    ListPhotosUseCase,
    UploadPhotoUseCase,
)
from ...di.container import get_container
from ...domain.exceptions import EventPixError
from .dependencies import to_http_exception


router = APIRouter(tags=["photos"])


@router.post("/upload", response_model=PhotoUploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_photo(
    background_tasks: BackgroundTasks,
    photo: UploadFile = File(...),
    original: Optional[UploadFile] = File(None),
) -> PhotoUploadResponse:
    """
    Upload an event photo
    
    Faces are detected and linked to known guests; live viewers and matched
    guests are notified once the photo is stored.
    
    Args:
        photo: Distributable version of the photo
        original: Optional original/raw version
    """
    container = get_container()
    upload_photo_use_case = container.get(UploadPhotoUseCase)
    
    content = await photo.read()
    original_content = await original.read() if original is not None else None
    
    try:
        return await upload_photo_use_case.execute(
            filename=photo.filename,
            content=content,
            content_type=photo.content_type,
            original_filename=original.filename if original is not None else None,
            original_content=original_content,
            original_content_type=original.content_type if original is not None else None,
            schedule=background_tasks.add_task,
        )
    except EventPixError as exception:
        raise to_http_exception(exception)


@router.get("/list", response_model=List[PhotoResponse])
async def list_photos() -> List[PhotoResponse]:
    """List all event photos, newest first (registration selfies excluded)"""
    container = get_container()
    list_photos_use_case = container.get(ListPhotosUseCase)
    
    try:
        return await list_photos_use_case.execute()
    except EventPixError as exception:
        raise to_http_exception(exception)


@router.get("/{photo_id}/faces", response_model=List[FaceResponse])
async def list_photo_faces(photo_id: str) -> List[FaceResponse]:
    """
    List the faces of a photo with their person names
    
    Args:
        photo_id: ID of the photo
    """
    container = get_container()
    list_faces_use_case = container.get(ListPhotoFacesUseCase)
    
    try:
        return await list_faces_use_case.execute(photo_id)
    except EventPixError as exception:
        raise to_http_exception(exception)


@router.delete("/{photo_id}", response_model=PhotoDeleteResponse)
async def delete_photo(photo_id: str) -> PhotoDeleteResponse:
    """
    Delete a photo, its faces and its stored images
    
    Args:
        photo_id: ID of the photo
    """
    container = get_container()
    delete_photo_use_case = container.get(DeletePhotoUseCase)
    
    try:
        return await delete_photo_use_case.execute(photo_id)
    except EventPixError as exception:
        raise to_http_exception(exception)
