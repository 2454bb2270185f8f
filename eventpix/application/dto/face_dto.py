from typing import List
from pydantic import BaseModel, Field


class FaceNameRequest(BaseModel):
    """DTO for naming a face"""
    name: str = Field(..., min_length=1, max_length=200)


class FaceNameResponse(BaseModel):
    """DTO for naming result: the person and every face now linked by this action"""
    person_id: str
    name: str
    face_ids: List[str]
    propagated_count: int
