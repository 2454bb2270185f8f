from abc import ABC, abstractmethod
from typing import Any, AsyncContextManager, List, Optional, Sequence, Tuple

from ..models.face import BoundingBox, Face
from ..models.person import Person
from ..models.photo import Photo


class IdentityStore(ABC):
    """
    Repository interface - durable Person <-> Face <-> Photo mapping with
    vector-similarity queries.
    
    Every method takes an optional session obtained from transaction();
    calls sharing a session commit or roll back together.
    """
    
    @abstractmethod
    def transaction(self) -> AsyncContextManager[Any]:
        """Open an atomic unit of work and yield its session handle"""
        pass
    
    # ------------------------------------------------------------------
    # Photos
    # ------------------------------------------------------------------
    
    @abstractmethod
    async def insert_photo(self, photo: Photo, session: Optional[Any] = None) -> Photo:
        """Persist a new photo and return it with its id"""
        pass
    
    @abstractmethod
    async def find_photo(self, photo_id: str, session: Optional[Any] = None) -> Optional[Photo]:
        """Find photo by ID"""
        pass
    
    @abstractmethod
    async def list_photos(self, include_reference: bool = False) -> List[Photo]:
        """List photos, newest first; reference photos only when asked"""
        pass
    
    @abstractmethod
    async def delete_photo(self, photo_id: str, session: Optional[Any] = None) -> bool:
        """Delete a photo and all of its faces"""
        pass
    
    # ------------------------------------------------------------------
    # Faces
    # ------------------------------------------------------------------
    
    @abstractmethod
    async def insert_face(
        self,
        photo_id: str,
        person_id: Optional[str],
        box: BoundingBox,
        embedding: Sequence[float],
        confidence: float = 1.0,
        session: Optional[Any] = None,
    ) -> str:
        """Persist a face (embedding already normalized) and return its id"""
        pass
    
    @abstractmethod
    async def find_face(self, face_id: str, session: Optional[Any] = None) -> Optional[Face]:
        """Find face by ID"""
        pass
    
    @abstractmethod
    async def list_faces_for_photo(self, photo_id: str) -> List[Face]:
        """All faces detected in one photo"""
        pass
    
    @abstractmethod
    async def set_face_person(
        self,
        face_id: str,
        person_id: Optional[str],
        session: Optional[Any] = None,
    ) -> bool:
        """Set (or clear) the person link of one face"""
        pass
    
    @abstractmethod
    async def unlabeled_faces_within(
        self,
        embedding: Sequence[float],
        max_distance: float,
        exclude_face_id: Optional[str] = None,
        session: Optional[Any] = None,
    ) -> List[Tuple[Face, float]]:
        """Faces with no person link within max_distance, nearest first"""
        pass
    
    @abstractmethod
    async def label_unlabeled_faces(
        self,
        face_ids: Sequence[str],
        person_id: str,
        session: Optional[Any] = None,
    ) -> List[str]:
        """Link the given faces to person_id, skipping any that gained a link meanwhile"""
        pass
    
    # ------------------------------------------------------------------
    # Similarity queries
    # ------------------------------------------------------------------
    
    @abstractmethod
    async def nearest_person(
        self,
        embedding: Sequence[float],
        max_distance: float,
        session: Optional[Any] = None,
    ) -> Optional[Person]:
        """Person owning the closest labeled face within max_distance"""
        pass
    
    @abstractmethod
    async def photos_matching(
        self,
        embedding: Sequence[float],
        max_distance: float,
        limit: int,
    ) -> List[Photo]:
        """Event photos with any face within max_distance, nearest first"""
        pass
    
    # ------------------------------------------------------------------
    # Persons
    # ------------------------------------------------------------------
    
    @abstractmethod
    async def rename_or_create_person(self, name: str, session: Optional[Any] = None) -> Person:
        """
        Find a person by display name or create one (idempotent on name).
        
        When several Persons share the name the oldest is returned. A
        concurrent creation of the same name raises TransactionConflictError.
        """
        pass
    
    @abstractmethod
    async def upsert_person_by_phone(
        self,
        phone_number: str,
        name: Optional[str] = None,
        seat_number: Optional[str] = None,
        session: Optional[Any] = None,
    ) -> Person:
        """Create or update a person keyed by contact handle"""
        pass
    
    @abstractmethod
    async def find_person(self, person_id: str, session: Optional[Any] = None) -> Optional[Person]:
        """Find person by ID"""
        pass
    
    @abstractmethod
    async def find_persons(self, person_ids: Sequence[str]) -> List[Person]:
        """Find several persons by ID"""
        pass
    
    @abstractmethod
    async def list_persons(self) -> List[Person]:
        """All persons ordered by name"""
        pass
    
    @abstractmethod
    async def delete_person(self, person_id: str, session: Optional[Any] = None) -> bool:
        """Delete a person; its faces lose their link but are kept"""
        pass
