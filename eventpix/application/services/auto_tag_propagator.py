"""
Auto-tag propagation.

Naming one face resolves (or creates) the Person by name, links the face,
and extends the same Person to every other still-unlabeled face within the
propagation threshold. All three steps share one transaction.
"""
import logging
from dataclasses import dataclass, field
from typing import List

from ...domain.exceptions import DatabaseError, NamingFailedError, NotFoundError, ValidationError
from ...domain.models.person import Person
from ...domain.repositories.identity_store import IdentityStore
from ...utils.retry_utils import async_retry_on_exception

logger = logging.getLogger(__name__)


@dataclass
class PropagationResult:
    """Outcome of one naming action."""
    person: Person
    face_id: str
    propagated_face_ids: List[str] = field(default_factory=list)

    @property
    def all_face_ids(self) -> List[str]:
        return [self.face_id, *self.propagated_face_ids]


class AutoTagPropagator:
    """Transactional naming + propagation to similar unlabeled faces."""

    def __init__(
        self,
        identity_store: IdentityStore,
        propagation_threshold: float = 0.75,
        max_retries: int = 3,
    ) -> None:
        self.identity_store = identity_store
        self.propagation_threshold = propagation_threshold
        self._name_face_with_retry = async_retry_on_exception(max_retries=max_retries)(self._name_face_once)

    async def name_face(self, face_id: str, name: str) -> PropagationResult:
        """
        Assign `name` to one face and propagate it.

        Raises:
            ValidationError: empty name
            NotFoundError: unknown face
            NamingFailedError: the transaction could not be committed; nothing changed
        """
        if not name or not name.strip():
            raise ValidationError("Name is required")

        try:
            result = await self._name_face_with_retry(face_id, name.strip())
        except DatabaseError as e:
            raise NamingFailedError(f"Naming face {face_id} failed: {e.message}", operation="name_face") from e

        logger.info(
            "Named face %s as '%s' (person %s), propagated to %d unlabeled face(s)",
            face_id, result.person.name, result.person.id, len(result.propagated_face_ids),
        )
        return result

    async def _name_face_once(self, face_id: str, name: str) -> PropagationResult:
        async with self.identity_store.transaction() as session:
            face = await self.identity_store.find_face(face_id, session=session)
            if face is None:
                raise NotFoundError("Face", face_id)

            person = await self.identity_store.rename_or_create_person(name, session=session)
            await self.identity_store.set_face_person(face_id, person.id, session=session)

            candidates = await self.identity_store.unlabeled_faces_within(
                face.embedding,
                self.propagation_threshold,
                exclude_face_id=face_id,
                session=session,
            )
            # Strictly below the threshold; association and search are inclusive
            propagated = await self.identity_store.label_unlabeled_faces(
                [candidate.id for candidate, distance in candidates if distance < self.propagation_threshold],
                person.id,
                session=session,
            )

        return PropagationResult(person=person, face_id=face_id, propagated_face_ids=propagated)
