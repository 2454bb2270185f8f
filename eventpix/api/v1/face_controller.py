# External package imports
from fastapi import APIRouter, BackgroundTasks

# Local application imports
from ...application.dto.face_dto import FaceNameRequest, FaceNameResponse
from ...application.use_cases.face import NameFaceUseCase
from ...di.container import get_container
from ...domain.exceptions import EventPixError
from .dependencies import to_http_exception


router = APIRouter(tags=["faces"])


@router.post("/{face_id}/name", response_model=FaceNameResponse)
async def name_face(
    face_id: str,
    request: FaceNameRequest,
    background_tasks: BackgroundTasks,
) -> FaceNameResponse:
    """
    Name a face
    
    The name is extended to every unlabeled face similar enough to this one.
    Faces that already carry a name are never changed.
    
    Args:
        face_id: ID of the face
        request: The name to assign
    """
    container = get_container()
    name_face_use_case = container.get(NameFaceUseCase)
    
    try:
        return await name_face_use_case.execute(
            face_id=face_id,
            name=request.name,
            schedule=background_tasks.add_task,
        )
    except EventPixError as exception:
        raise to_http_exception(exception)
