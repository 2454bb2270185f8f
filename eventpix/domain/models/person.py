# Standard library imports
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


def normalize_phone(phone: str) -> str:
    """Keep digits only: the contact handle is country code + number."""
    return "".join(ch for ch in (phone or "") if ch.isdigit())


@dataclass
class Person:
    """
    Pure domain model for Person entity.
    
    A named identity. The contact handle (phone_number) is the canonical
    identity key when present; the display name is a mutable label.
    """
    id: Optional[str]
    name: Optional[str] = None
    phone_number: Optional[str] = None
    seat_number: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    
    def __post_init__(self) -> None:
        """Business validations"""
        if self.name is not None:
            self.name = self.name.strip() or None
        if self.phone_number is not None:
            self.phone_number = normalize_phone(self.phone_number) or None
        if not self.name and not self.phone_number:
            raise ValueError("Person needs a name or a phone number")
    
    @property
    def can_be_messaged(self) -> bool:
        return bool(self.phone_number)
