# Standard library imports
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class PhotoStatus(str, Enum):
    """Photo processing status."""
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    REFERENCE = "REFERENCE"  # Registration selfie, never listed with event photos


@dataclass
class Photo:
    """
    Pure domain model for Photo entity.
    
    One uploaded image. url points at the distributable version,
    original_url (optional) at the raw upload.
    """
    id: Optional[str]
    url: str
    status: PhotoStatus = PhotoStatus.PENDING
    original_url: Optional[str] = None
    width: int = 0
    height: int = 0
    created_at: Optional[datetime] = None
    
    def __post_init__(self) -> None:
        """Business validations"""
        if not self.url or len(self.url.strip()) < 1:
            raise ValueError("Photo URL is required")
        self.status = PhotoStatus(self.status)
        if self.width < 0 or self.height < 0:
            raise ValueError("Photo dimensions cannot be negative")
    
    @property
    def is_reference(self) -> bool:
        return self.status == PhotoStatus.REFERENCE
