"""
Matching engine: turns detected faces into identity decisions.

Two entry points:
- associate(): upload-time association of each detected face with the
  nearest known Person (or none) under the association threshold.
- search_photos(): guest self-search, all event photos containing a face
  near the selfie's single face, nearest first.
"""
import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from ...domain.exceptions import InvalidEmbeddingError, MultipleFacesError, NoFaceFoundError
from ...domain.models.face import DetectedFace
from ...domain.models.person import Person
from ...domain.models.photo import Photo
from ...domain.repositories.identity_store import IdentityStore
from ...utils.face_embedding import normalize_embedding

logger = logging.getLogger(__name__)


@dataclass
class FaceAssociation:
    """A detected face with its normalized embedding and resolved Person (if any)."""
    detected: DetectedFace
    embedding: List[float]
    person: Optional[Person] = None


class MatchingEngine:
    """Nearest-neighbour identity decisions on top of the IdentityStore."""

    def __init__(
        self,
        identity_store: IdentityStore,
        association_threshold: float = 0.6,
        search_threshold: float = 0.6,
        search_limit: int = 50,
        embedding_dimension: Optional[int] = None,
    ) -> None:
        self.identity_store = identity_store
        self.association_threshold = association_threshold
        self.search_threshold = search_threshold
        self.search_limit = search_limit
        self.embedding_dimension = embedding_dimension

    def normalize(self, face: DetectedFace) -> Optional[List[float]]:
        """Normalized embedding of a face, or None when it is unidentifiable."""
        try:
            return normalize_embedding(face.embedding, self.embedding_dimension)
        except InvalidEmbeddingError as e:
            logger.warning("Skipping unidentifiable face: %s", e.message)
            return None

    async def associate(
        self,
        faces: Sequence[DetectedFace],
        session: Optional[Any] = None,
    ) -> List[FaceAssociation]:
        """
        Resolve each detected face of a new photo against known Persons.

        Faces with a degenerate embedding are dropped. A face with no Person
        within the association threshold stays unlinked; it never creates
        a Person by itself.
        """
        associations: List[FaceAssociation] = []
        for face in faces:
            embedding = self.normalize(face)
            if embedding is None:
                continue
            person = await self.identity_store.nearest_person(
                embedding, self.association_threshold, session=session
            )
            associations.append(FaceAssociation(detected=face, embedding=embedding, person=person))

        linked = sum(1 for association in associations if association.person is not None)
        logger.info(
            "Associated %d/%d usable face(s) with known persons (%d detected)",
            linked, len(associations), len(faces),
        )
        return associations

    async def search_photos(self, selfie_faces: Sequence[DetectedFace]) -> List[Photo]:
        """
        Event photos containing the selfie's face, nearest first.

        Raises NoFaceFoundError for zero usable faces and MultipleFacesError
        when more than one face was detected. An empty list is a normal
        "no match" result.
        """
        if not selfie_faces:
            raise NoFaceFoundError("No face found in the selfie")
        if len(selfie_faces) > 1:
            raise MultipleFacesError(len(selfie_faces))

        embedding = self.normalize(selfie_faces[0])
        if embedding is None:
            raise NoFaceFoundError("The face in the selfie could not be read")

        photos = await self.identity_store.photos_matching(embedding, self.search_threshold, self.search_limit)
        logger.info("Guest search matched %d photo(s)", len(photos))
        return photos

    @staticmethod
    def best_registration_face(faces: Sequence[DetectedFace]) -> Optional[DetectedFace]:
        """Highest-confidence face of a registration selfie (largest box on ties)."""
        if not faces:
            return None
        return max(faces, key=lambda face: (face.confidence, face.box.area))
