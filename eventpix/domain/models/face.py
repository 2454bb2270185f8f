# Standard library imports
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional


@dataclass(frozen=True)
class BoundingBox:
    """
    Face bounding box in normalized-fraction units.

    0 <= x1 < x2 <= 1 and 0 <= y1 < y2 <= 1, relative to the owning
    photo's width and height. Pixel boxes are converted at the edges.
    """
    x1: float
    y1: float
    x2: float
    y2: float
    
    def __post_init__(self) -> None:
        for value in (self.x1, self.y1, self.x2, self.y2):
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"Bounding box coordinate {value} is outside [0, 1]")
        if self.x1 >= self.x2 or self.y1 >= self.y2:
            raise ValueError("Bounding box must have positive width and height")
    
    @classmethod
    def from_pixels(
        cls,
        left: float,
        top: float,
        right: float,
        bottom: float,
        width: int,
        height: int,
    ) -> "BoundingBox":
        """Convert a pixel box to fractions, clamping it into the image."""
        if width <= 0 or height <= 0:
            raise ValueError("Image dimensions must be positive")
        
        def clamp(value: float) -> float:
            return min(max(value, 0.0), 1.0)
        
        return cls(
            x1=clamp(left / width),
            y1=clamp(top / height),
            x2=clamp(right / width),
            y2=clamp(bottom / height),
        )
    
    def to_pixels(self, width: int, height: int) -> List[int]:
        return [
            int(round(self.x1 * width)),
            int(round(self.y1 * height)),
            int(round(self.x2 * width)),
            int(round(self.y2 * height)),
        ]
    
    @property
    def area(self) -> float:
        return (self.x2 - self.x1) * (self.y2 - self.y1)
    
    def as_dict(self) -> Dict[str, float]:
        return {"x1": self.x1, "y1": self.y1, "x2": self.x2, "y2": self.y2}


@dataclass
class Face:
    """
    Pure domain model for Face entity.
    
    One detected face inside exactly one Photo. person_id is the only
    field that changes after creation.
    """
    id: Optional[str]
    photo_id: str
    embedding: List[float]
    box: BoundingBox
    confidence: float = 1.0
    person_id: Optional[str] = None
    created_at: Optional[datetime] = None
    
    def __post_init__(self) -> None:
        """Business validations"""
        if not self.photo_id:
            raise ValueError("Face must belong to a photo")
        if not self.embedding:
            raise ValueError("Face embedding is required")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError("Face confidence must be within [0, 1]")
    
    @property
    def is_labeled(self) -> bool:
        return self.person_id is not None


@dataclass
class DetectedFace:
    """A face as reported by the detection service, box already in fractions."""
    box: BoundingBox
    embedding: List[float] = field(default_factory=list)
    confidence: float = 1.0
