# Standard library imports
from typing import List

# External package imports
from fastapi import APIRouter, File, Form, UploadFile, status

# Local application imports
from ...application.dto.guest_dto import (
    GuestBulkUpsertRequest,
    GuestBulkUpsertResponse,
    GuestDeleteResponse,
    GuestRegistrationResponse,
    GuestResponse,
    GuestSearchResponse,
    GuestUpsertRequest,
)
from ...application.use_cases.guest import (
    DeleteGuestUseCase,
    ListGuestsUseCase,
    RegisterGuestUseCase,
    SearchGuestPhotosUseCase,
    UpsertGuestUseCase,
)
from ...di.container import get_container
from ...domain.exceptions import EventPixError
from .dependencies import to_http_exception


router = APIRouter(tags=["guests"])


@router.post("/register", response_model=GuestRegistrationResponse, status_code=status.HTTP_201_CREATED)
async def register_guest(
    name: str = Form(..., min_length=1, max_length=200),
    phone: str = Form(..., min_length=1, max_length=40),
    photos: List[UploadFile] = File(...),
) -> GuestRegistrationResponse:
    """
    Register a guest with one to three selfies
    
    Fails with 400 when no selfie contains a usable face.
    """
    container = get_container()
    register_guest_use_case = container.get(RegisterGuestUseCase)
    
    images = [(photo.filename, await photo.read(), photo.content_type) for photo in photos]
    try:
        return await register_guest_use_case.execute(name=name, phone=phone, images=images)
    except EventPixError as exception:
        raise to_http_exception(exception)


@router.post("/search", response_model=GuestSearchResponse)
async def search_guest_photos(selfie: UploadFile = File(...)) -> GuestSearchResponse:
    """
    Find event photos of the guest in the selfie, nearest first
    
    An empty list means no match. Selfies with zero or several faces get 400.
    """
    container = get_container()
    search_use_case = container.get(SearchGuestPhotosUseCase)
    
    content = await selfie.read()
    try:
        return await search_use_case.execute(
            filename=selfie.filename,
            content=content,
            content_type=selfie.content_type,
        )
    except EventPixError as exception:
        raise to_http_exception(exception)


@router.post("/upsert", response_model=GuestResponse)
async def upsert_guest(request: GuestUpsertRequest) -> GuestResponse:
    """Create or update a guest keyed by phone number"""
    container = get_container()
    upsert_use_case = container.get(UpsertGuestUseCase)
    
    try:
        return await upsert_use_case.execute(request)
    except EventPixError as exception:
        raise to_http_exception(exception)


@router.post("/upsert-bulk", response_model=GuestBulkUpsertResponse)
async def upsert_guests_bulk(request: GuestBulkUpsertRequest) -> GuestBulkUpsertResponse:
    """Create or update many guests at once (all or nothing)"""
    container = get_container()
    upsert_use_case = container.get(UpsertGuestUseCase)
    
    try:
        return await upsert_use_case.execute_bulk(request)
    except EventPixError as exception:
        raise to_http_exception(exception)


@router.get("/list", response_model=List[GuestResponse])
async def list_guests() -> List[GuestResponse]:
    """List all guests ordered by name"""
    container = get_container()
    list_guests_use_case = container.get(ListGuestsUseCase)
    
    try:
        return await list_guests_use_case.execute()
    except EventPixError as exception:
        raise to_http_exception(exception)


@router.delete("/{person_id}", response_model=GuestDeleteResponse)
async def delete_guest(person_id: str) -> GuestDeleteResponse:
    """
    Delete a guest
    
    Their faces stay in the photos but lose the name.
    """
    container = get_container()
    delete_guest_use_case = container.get(DeleteGuestUseCase)
    
    try:
        return await delete_guest_use_case.execute(person_id)
    except EventPixError as exception:
        raise to_http_exception(exception)
