from typing import Optional
from pydantic import BaseModel


class MessagingStatusResponse(BaseModel):
    """DTO for the messaging session status shown to the operator"""
    state: str
    connected: bool
    pairing_code: Optional[str] = None
    message: str
