"""
Test doubles shared across unit tests.

InMemoryIdentityStore mirrors the Mongo store's semantics in plain dicts;
transaction() snapshots all state and restores it when the block raises.
"""
import copy
import io
import itertools
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
from PIL import Image

from eventpix.domain.models.face import BoundingBox, Face
from eventpix.domain.models.person import Person, normalize_phone
from eventpix.domain.models.photo import Photo, PhotoStatus
from eventpix.domain.repositories.identity_store import IdentityStore
from eventpix.infrastructure.messaging.transport import ChatTransport, TransportListener
from eventpix.utils.face_embedding import rank_by_distance

_EPOCH = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _normalized_name(name: str) -> str:
    return " ".join(name.strip().lower().split())


class InMemoryIdentityStore(IdentityStore):
    def __init__(self) -> None:
        self.persons: Dict[str, Person] = {}
        self.photos: Dict[str, Photo] = {}
        self.faces: Dict[str, Face] = {}
        self._ids = itertools.count(1)
        self._failures: Dict[str, Tuple[Exception, Optional[int]]] = {}
        self.transactions_started = 0
        self.transactions_rolled_back = 0

    # -- test helpers -----------------------------------------------------

    def inject_failure(self, operation: str, exception: Exception, times: Optional[int] = None) -> None:
        """Make `operation` raise `exception` (every call, or the next `times` calls)."""
        self._failures[operation] = (exception, times)

    def _maybe_fail(self, operation: str) -> None:
        if operation not in self._failures:
            return
        exception, times = self._failures[operation]
        if times is not None:
            if times <= 0:
                del self._failures[operation]
                return
            self._failures[operation] = (exception, times - 1)
        raise exception

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids)}"

    def _now(self) -> datetime:
        # Strictly increasing timestamps keep "newest first" deterministic
        return _EPOCH + timedelta(seconds=len(self.photos) + len(self.persons) + len(self.faces))

    # -- transactions -----------------------------------------------------

    @asynccontextmanager
    async def transaction(self):
        snapshot = copy.deepcopy((self.persons, self.photos, self.faces))
        self.transactions_started += 1
        try:
            yield {"transaction": self.transactions_started}
        except BaseException:
            self.persons, self.photos, self.faces = snapshot
            self.transactions_rolled_back += 1
            raise

    async def ensure_indexes(self) -> None:
        pass

    # -- photos -----------------------------------------------------------

    async def insert_photo(self, photo: Photo, session: Optional[Any] = None) -> Photo:
        self._maybe_fail("insert_photo")
        stored = copy.copy(photo)
        stored.id = self._next_id("photo")
        stored.created_at = photo.created_at or self._now()
        self.photos[stored.id] = stored
        return copy.copy(stored)

    async def find_photo(self, photo_id: str, session: Optional[Any] = None) -> Optional[Photo]:
        photo = self.photos.get(photo_id)
        return copy.copy(photo) if photo else None

    async def list_photos(self, include_reference: bool = False) -> List[Photo]:
        photos = [
            copy.copy(photo) for photo in self.photos.values()
            if include_reference or photo.status != PhotoStatus.REFERENCE
        ]
        return sorted(photos, key=lambda photo: photo.created_at, reverse=True)

    async def delete_photo(self, photo_id: str, session: Optional[Any] = None) -> bool:
        self._maybe_fail("delete_photo")
        if photo_id not in self.photos:
            return False
        self.faces = {face_id: face for face_id, face in self.faces.items() if face.photo_id != photo_id}
        del self.photos[photo_id]
        return True

    # -- faces ------------------------------------------------------------

    async def insert_face(
        self,
        photo_id: str,
        person_id: Optional[str],
        box: BoundingBox,
        embedding: Sequence[float],
        confidence: float = 1.0,
        session: Optional[Any] = None,
    ) -> str:
        self._maybe_fail("insert_face")
        face_id = self._next_id("face")
        self.faces[face_id] = Face(
            id=face_id,
            photo_id=photo_id,
            embedding=list(embedding),
            box=box,
            confidence=confidence,
            person_id=person_id,
            created_at=self._now(),
        )
        return face_id

    async def find_face(self, face_id: str, session: Optional[Any] = None) -> Optional[Face]:
        face = self.faces.get(face_id)
        return copy.copy(face) if face else None

    async def list_faces_for_photo(self, photo_id: str) -> List[Face]:
        return [copy.copy(face) for face in self.faces.values() if face.photo_id == photo_id]

    async def set_face_person(self, face_id: str, person_id: Optional[str], session: Optional[Any] = None) -> bool:
        self._maybe_fail("set_face_person")
        if face_id not in self.faces:
            return False
        self.faces[face_id].person_id = person_id
        return True

    async def unlabeled_faces_within(
        self,
        embedding: Sequence[float],
        max_distance: float,
        exclude_face_id: Optional[str] = None,
        session: Optional[Any] = None,
    ) -> List[Tuple[Face, float]]:
        self._maybe_fail("unlabeled_faces_within")
        candidates = [
            (copy.copy(face), face.embedding) for face in self.faces.values()
            if face.person_id is None and face.id != exclude_face_id
        ]
        return rank_by_distance(embedding, candidates, max_distance)

    async def label_unlabeled_faces(
        self,
        face_ids: Sequence[str],
        person_id: str,
        session: Optional[Any] = None,
    ) -> List[str]:
        self._maybe_fail("label_unlabeled_faces")
        labeled = []
        for face_id in face_ids:
            face = self.faces.get(face_id)
            if face is not None and face.person_id is None:
                face.person_id = person_id
                labeled.append(face_id)
        return labeled

    # -- similarity -------------------------------------------------------

    async def nearest_person(
        self,
        embedding: Sequence[float],
        max_distance: float,
        session: Optional[Any] = None,
    ) -> Optional[Person]:
        candidates = [(face.person_id, face.embedding) for face in self.faces.values() if face.person_id]
        for person_id, _distance in rank_by_distance(embedding, candidates, max_distance):
            if person_id in self.persons:
                return copy.copy(self.persons[person_id])
        return None

    async def photos_matching(self, embedding: Sequence[float], max_distance: float, limit: int) -> List[Photo]:
        candidates = [(face.photo_id, face.embedding) for face in self.faces.values()]
        result: List[Photo] = []
        seen = set()
        for photo_id, _distance in rank_by_distance(embedding, candidates, max_distance):
            if photo_id in seen:
                continue
            seen.add(photo_id)
            photo = self.photos.get(photo_id)
            if photo is None or photo.status == PhotoStatus.REFERENCE:
                continue
            result.append(copy.copy(photo))
            if len(result) >= limit:
                break
        return result

    # -- persons ----------------------------------------------------------

    async def rename_or_create_person(self, name: str, session: Optional[Any] = None) -> Person:
        self._maybe_fail("rename_or_create_person")
        key = _normalized_name(name)
        for person in self.persons.values():
            if person.name and _normalized_name(person.name) == key:
                return copy.copy(person)
        person = Person(id=self._next_id("person"), name=name.strip(), created_at=self._now())
        self.persons[person.id] = person
        return copy.copy(person)

    async def upsert_person_by_phone(
        self,
        phone_number: str,
        name: Optional[str] = None,
        seat_number: Optional[str] = None,
        session: Optional[Any] = None,
    ) -> Person:
        self._maybe_fail("upsert_person_by_phone")
        phone_number = normalize_phone(phone_number)
        for person in self.persons.values():
            if person.phone_number == phone_number:
                if name:
                    person.name = name
                if seat_number:
                    person.seat_number = seat_number
                person.updated_at = self._now()
                return copy.copy(person)
        person = Person(
            id=self._next_id("person"),
            name=name,
            phone_number=phone_number,
            seat_number=seat_number,
            created_at=self._now(),
        )
        self.persons[person.id] = person
        return copy.copy(person)

    async def find_person(self, person_id: str, session: Optional[Any] = None) -> Optional[Person]:
        person = self.persons.get(person_id)
        return copy.copy(person) if person else None

    async def find_persons(self, person_ids: Sequence[str]) -> List[Person]:
        return [copy.copy(self.persons[pid]) for pid in person_ids if pid in self.persons]

    async def list_persons(self) -> List[Person]:
        return sorted((copy.copy(p) for p in self.persons.values()), key=lambda p: (p.name or "").lower())

    async def delete_person(self, person_id: str, session: Optional[Any] = None) -> bool:
        self._maybe_fail("delete_person")
        if person_id not in self.persons:
            return False
        for face in self.faces.values():
            if face.person_id == person_id:
                face.person_id = None
        del self.persons[person_id]
        return True

    # -- seeding ----------------------------------------------------------

    async def seed_face(
        self,
        embedding: Sequence[float],
        person_id: Optional[str] = None,
        status: PhotoStatus = PhotoStatus.COMPLETED,
    ) -> Face:
        """One photo with one face, for matching scenarios."""
        photo = await self.insert_photo(Photo(id=None, url=f"/media/photos/{len(self.photos)}.jpg", status=status))
        face_id = await self.insert_face(photo.id, person_id, BoundingBox(0.1, 0.1, 0.4, 0.5), embedding)
        return self.faces[face_id]


class FakeChatTransport(ChatTransport):
    """Records calls; tests drive listener callbacks directly."""

    def __init__(self) -> None:
        self.listener: Optional[TransportListener] = None
        self.connect_calls: List[Optional[Dict[str, Any]]] = []
        self.sent: List[Tuple[str, str]] = []
        self.closed = 0
        self.connect_error: Optional[Exception] = None
        self.send_error: Optional[Exception] = None

    async def connect(self, credentials, listener) -> None:
        self.connect_calls.append(credentials)
        if self.connect_error is not None:
            error, self.connect_error = self.connect_error, None
            raise error
        self.listener = listener

    async def send_text(self, handle: str, text: str) -> None:
        if self.send_error is not None:
            raise self.send_error
        self.sent.append((handle, text))

    async def close(self) -> None:
        self.closed += 1


# -- vectors and images ---------------------------------------------------

def unit(*values: float) -> List[float]:
    """Unit-length copy of a vector."""
    vector = np.asarray(values, dtype=np.float64)
    return [float(x) for x in vector / np.linalg.norm(vector)]


def at_distance(base: List[float], distance: float) -> List[float]:
    """
    Unit vector at an exact Euclidean distance from a unit vector `base`.

    base must be axis-aligned on one of the first three axes; the result
    rotates towards the last axis.
    """
    # |a - b|^2 = 2 - 2cos  =>  cos = 1 - d^2 / 2
    cos = 1.0 - distance ** 2 / 2.0
    sin = float(np.sqrt(max(0.0, 1.0 - cos ** 2)))
    result = [cos * value for value in base]
    result[-1] += sin
    return result


def make_image_bytes(width: int = 64, height: int = 48, fmt: str = "JPEG") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color=(200, 150, 100)).save(buffer, format=fmt)
    return buffer.getvalue()
