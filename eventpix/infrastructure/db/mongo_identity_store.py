# Standard library imports
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence, Tuple

# External package imports
from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

# Local application imports
from ...domain.constants import FaceFields, PersonFields, PhotoFields
from ...domain.exceptions import DatabaseError, TransactionConflictError
from ...domain.models.face import BoundingBox, Face
from ...domain.models.person import Person, normalize_phone
from ...domain.models.photo import Photo, PhotoStatus
from ...domain.repositories.identity_store import IdentityStore
from ...utils.datetime_utils import ensure_utc, utc_now
from ...utils.face_embedding import rank_by_distance
from .mongo_connection import (
    get_client,
    get_face_collection,
    get_person_collection,
    get_photo_collection,
)

logger = logging.getLogger(__name__)

_TRANSIENT_LABELS = ("TransientTransactionError", "UnknownTransactionCommitResult")


def normalized_name(name: str) -> str:
    """Normalized for MongoDB lookup: lowercase, single spaces."""
    return " ".join(name.strip().lower().split())


def _to_object_id(value: str) -> Optional[ObjectId]:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def _database_error(e: PyMongoError, message: str, operation: str) -> DatabaseError:
    """Map a driver error, keeping transient transaction failures retryable."""
    if any(e.has_error_label(label) for label in _TRANSIENT_LABELS):
        return TransactionConflictError(f"{message}: {e}", operation=operation)
    return DatabaseError(f"{message}: {e}", operation=operation)


class MongoIdentityStore(IdentityStore):
    """
    MongoDB implementation of IdentityStore.

    Nearest-neighbour queries scan the stored face embeddings and rank
    them in process. Multi-document writes run inside client-session
    transactions, which need a replica set.
    """

    def __init__(
        self,
        client: Optional[AsyncIOMotorClient] = None,
        person_collection: Optional[AsyncIOMotorCollection] = None,
        photo_collection: Optional[AsyncIOMotorCollection] = None,
        face_collection: Optional[AsyncIOMotorCollection] = None,
    ) -> None:
        self.client = client if client is not None else get_client()
        self.person_collection = person_collection if person_collection is not None else get_person_collection()
        self.photo_collection = photo_collection if photo_collection is not None else get_photo_collection()
        self.face_collection = face_collection if face_collection is not None else get_face_collection()

    async def ensure_indexes(self) -> None:
        """Create the indexes the store relies on (idempotent)."""
        await self.person_collection.create_index(
            PersonFields.PHONE_NUMBER,
            unique=True,
            partialFilterExpression={PersonFields.PHONE_NUMBER: {"$type": "string"}},
        )
        await self.person_collection.create_index(PersonFields.NORMALIZED_NAME)
        await self.person_collection.create_index(
            PersonFields.NAME_KEY,
            unique=True,
            partialFilterExpression={PersonFields.NAME_KEY: {"$type": "string"}},
        )
        await self.photo_collection.create_index([(PhotoFields.STATUS, ASCENDING), (PhotoFields.CREATED_AT, DESCENDING)])
        await self.face_collection.create_index(FaceFields.PHOTO_ID)
        await self.face_collection.create_index(FaceFields.PERSON_ID)
        logger.info("MongoDB indexes ensured for persons, photos and faces")

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Any]:
        async with await self.client.start_session() as session:
            try:
                async with session.start_transaction():
                    yield session
            except PyMongoError as e:
                raise _database_error(e, "Transaction aborted", "transaction") from e

    # ------------------------------------------------------------------
    # Photos
    # ------------------------------------------------------------------

    async def insert_photo(self, photo: Photo, session: Optional[Any] = None) -> Photo:
        """Persist a new photo and return it with its id"""
        if not photo:
            raise ValueError("Photo cannot be None")

        document = self._photo_to_dict(photo)
        document[PhotoFields.CREATED_AT] = photo.created_at or utc_now()
        try:
            result = await self.photo_collection.insert_one(document, session=session)
        except PyMongoError as e:
            raise _database_error(e, "Error saving photo", "insert_photo") from e
        document[PhotoFields.MONGO_ID] = result.inserted_id
        return self._document_to_photo(document)

    async def find_photo(self, photo_id: str, session: Optional[Any] = None) -> Optional[Photo]:
        """Find photo by ID"""
        object_id = _to_object_id(photo_id)
        if object_id is None:
            return None

        try:
            document = await self.photo_collection.find_one({PhotoFields.MONGO_ID: object_id}, session=session)
        except PyMongoError as e:
            raise _database_error(e, "Error finding photo by ID", "find_photo") from e
        return self._document_to_photo(document) if document else None

    async def list_photos(self, include_reference: bool = False) -> List[Photo]:
        """List photos, newest first; reference photos only when asked"""
        query: Dict[str, Any] = {}
        if not include_reference:
            query[PhotoFields.STATUS] = {"$ne": PhotoStatus.REFERENCE.value}

        try:
            cursor = self.photo_collection.find(query).sort(PhotoFields.CREATED_AT, DESCENDING)
            return [self._document_to_photo(document) async for document in cursor]
        except PyMongoError as e:
            raise _database_error(e, "Error listing photos", "list_photos") from e

    async def delete_photo(self, photo_id: str, session: Optional[Any] = None) -> bool:
        """Delete a photo and all of its faces"""
        object_id = _to_object_id(photo_id)
        if object_id is None:
            return False

        try:
            faces = await self.face_collection.delete_many({FaceFields.PHOTO_ID: photo_id}, session=session)
            result = await self.photo_collection.delete_one({PhotoFields.MONGO_ID: object_id}, session=session)
        except PyMongoError as e:
            raise _database_error(e, "Error deleting photo", "delete_photo") from e
        logger.info("Deleted photo %s and %d face(s)", photo_id, faces.deleted_count)
        return result.deleted_count > 0

    # ------------------------------------------------------------------
    # Faces
    # ------------------------------------------------------------------

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
        document = {
            FaceFields.PHOTO_ID: photo_id,
            FaceFields.PERSON_ID: person_id,
            FaceFields.EMBEDDING: [float(x) for x in embedding],
            FaceFields.BOX: box.as_dict(),
            FaceFields.CONFIDENCE: float(confidence),
            FaceFields.CREATED_AT: utc_now(),
        }
        try:
            result = await self.face_collection.insert_one(document, session=session)
        except PyMongoError as e:
            raise _database_error(e, "Error saving face", "insert_face") from e
        return str(result.inserted_id)

    async def find_face(self, face_id: str, session: Optional[Any] = None) -> Optional[Face]:
        """Find face by ID"""
        object_id = _to_object_id(face_id)
        if object_id is None:
            return None

        try:
            document = await self.face_collection.find_one({FaceFields.MONGO_ID: object_id}, session=session)
        except PyMongoError as e:
            raise _database_error(e, "Error finding face by ID", "find_face") from e
        return self._document_to_face(document) if document else None

    async def list_faces_for_photo(self, photo_id: str) -> List[Face]:
        """All faces detected in one photo"""
        try:
            cursor = self.face_collection.find({FaceFields.PHOTO_ID: photo_id}).sort(FaceFields.MONGO_ID, ASCENDING)
            return [self._document_to_face(document) async for document in cursor]
        except PyMongoError as e:
            raise _database_error(e, "Error listing faces", "list_faces_for_photo") from e

    async def set_face_person(
        self,
        face_id: str,
        person_id: Optional[str],
        session: Optional[Any] = None,
    ) -> bool:
        """Set (or clear) the person link of one face"""
        object_id = _to_object_id(face_id)
        if object_id is None:
            return False

        try:
            result = await self.face_collection.update_one(
                {FaceFields.MONGO_ID: object_id},
                {"$set": {FaceFields.PERSON_ID: person_id}},
                session=session,
            )
        except PyMongoError as e:
            raise _database_error(e, "Error updating face", "set_face_person") from e
        return result.matched_count > 0

    async def unlabeled_faces_within(
        self,
        embedding: Sequence[float],
        max_distance: float,
        exclude_face_id: Optional[str] = None,
        session: Optional[Any] = None,
    ) -> List[Tuple[Face, float]]:
        """Faces with no person link within max_distance, nearest first"""
        query: Dict[str, Any] = {FaceFields.PERSON_ID: None}
        exclude = _to_object_id(exclude_face_id) if exclude_face_id else None
        if exclude is not None:
            query[FaceFields.MONGO_ID] = {"$ne": exclude}

        candidates = await self._scan_faces(query, session=session)
        return rank_by_distance(embedding, [(face, face.embedding) for face in candidates], max_distance)

    async def label_unlabeled_faces(
        self,
        face_ids: Sequence[str],
        person_id: str,
        session: Optional[Any] = None,
    ) -> List[str]:
        """Link the given faces to person_id, skipping any that gained a link meanwhile"""
        object_ids = [oid for oid in (_to_object_id(face_id) for face_id in face_ids) if oid is not None]
        if not object_ids:
            return []

        # The person_id: None filter is what keeps an existing label from being overwritten
        query = {FaceFields.MONGO_ID: {"$in": object_ids}, FaceFields.PERSON_ID: None}
        try:
            cursor = self.face_collection.find(query, projection={FaceFields.MONGO_ID: 1}, session=session)
            still_unlabeled = [document[FaceFields.MONGO_ID] async for document in cursor]
            if not still_unlabeled:
                return []
            await self.face_collection.update_many(
                {FaceFields.MONGO_ID: {"$in": still_unlabeled}, FaceFields.PERSON_ID: None},
                {"$set": {FaceFields.PERSON_ID: person_id}},
                session=session,
            )
        except PyMongoError as e:
            raise _database_error(e, "Error labeling faces", "label_unlabeled_faces") from e
        return [str(oid) for oid in still_unlabeled]

    # ------------------------------------------------------------------
    # Similarity queries
    # ------------------------------------------------------------------

    async def nearest_person(
        self,
        embedding: Sequence[float],
        max_distance: float,
        session: Optional[Any] = None,
    ) -> Optional[Person]:
        """Person owning the closest labeled face within max_distance"""
        labeled = await self._scan_faces({FaceFields.PERSON_ID: {"$ne": None}}, session=session)
        ranked = rank_by_distance(embedding, [(face, face.embedding) for face in labeled], max_distance)

        checked = set()
        for face, distance in ranked:
            if face.person_id in checked:
                continue
            checked.add(face.person_id)
            person = await self.find_person(face.person_id, session=session)
            if person is not None:
                logger.debug("Nearest person %s at distance %.4f", person.id, distance)
                return person
        return None

    async def photos_matching(
        self,
        embedding: Sequence[float],
        max_distance: float,
        limit: int,
    ) -> List[Photo]:
        """Event photos with any face within max_distance, nearest first"""
        if limit <= 0:
            return []

        faces = await self._scan_faces({})
        ranked = rank_by_distance(embedding, [(face, face.embedding) for face in faces], max_distance)

        # Keep each photo once, at the position of its nearest face
        ordered_ids: List[str] = []
        for face, _distance in ranked:
            if face.photo_id not in ordered_ids:
                ordered_ids.append(face.photo_id)
        if not ordered_ids:
            return []

        object_ids = [oid for oid in (_to_object_id(photo_id) for photo_id in ordered_ids) if oid is not None]
        try:
            cursor = self.photo_collection.find({
                PhotoFields.MONGO_ID: {"$in": object_ids},
                PhotoFields.STATUS: {"$ne": PhotoStatus.REFERENCE.value},
            })
            photos = {str(document[PhotoFields.MONGO_ID]): self._document_to_photo(document) async for document in cursor}
        except PyMongoError as e:
            raise _database_error(e, "Error loading matched photos", "photos_matching") from e

        return [photos[photo_id] for photo_id in ordered_ids if photo_id in photos][:limit]

    # ------------------------------------------------------------------
    # Persons
    # ------------------------------------------------------------------

    async def rename_or_create_person(self, name: str, session: Optional[Any] = None) -> Person:
        """
        Resolve a display name to a Person, creating one when none exists.

        The oldest Person carrying the name wins. Persons created here carry
        a unique name_key, so two concurrent creations of the same name
        collide and surface as TransactionConflictError.
        """
        if not name or not name.strip():
            raise ValueError("Person name is required")

        key = normalized_name(name)
        now = utc_now()
        try:
            document = await self.person_collection.find_one_and_update(
                {PersonFields.NORMALIZED_NAME: key},
                {"$set": {PersonFields.UPDATED_AT: now}},
                sort=[(PersonFields.MONGO_ID, ASCENDING)],
                return_document=ReturnDocument.AFTER,
                session=session,
            )
            if document is None:
                document = await self.person_collection.find_one_and_update(
                    {PersonFields.NAME_KEY: key},
                    {
                        "$setOnInsert": {
                            PersonFields.NAME: name.strip(),
                            PersonFields.NORMALIZED_NAME: key,
                            PersonFields.CREATED_AT: now,
                        },
                        "$set": {PersonFields.UPDATED_AT: now},
                    },
                    upsert=True,
                    return_document=ReturnDocument.AFTER,
                    session=session,
                )
        except DuplicateKeyError as e:
            raise TransactionConflictError(
                f"Concurrent creation of person '{key}'", operation="rename_or_create_person"
            ) from e
        except PyMongoError as e:
            raise _database_error(e, "Error resolving person by name", "rename_or_create_person") from e
        return self._document_to_person(document)

    async def upsert_person_by_phone(
        self,
        phone_number: str,
        name: Optional[str] = None,
        seat_number: Optional[str] = None,
        session: Optional[Any] = None,
    ) -> Person:
        """Create or update a person keyed by contact handle"""
        phone = normalize_phone(phone_number)
        if not phone:
            raise ValueError("Phone number is required")

        now = utc_now()
        updates: Dict[str, Any] = {PersonFields.UPDATED_AT: now}
        if name and name.strip():
            updates[PersonFields.NAME] = name.strip()
            updates[PersonFields.NORMALIZED_NAME] = normalized_name(name)
        if seat_number and seat_number.strip():
            updates[PersonFields.SEAT_NUMBER] = seat_number.strip()

        try:
            document = await self.person_collection.find_one_and_update(
                {PersonFields.PHONE_NUMBER: phone},
                {
                    "$setOnInsert": {PersonFields.PHONE_NUMBER: phone, PersonFields.CREATED_AT: now},
                    "$set": updates,
                },
                upsert=True,
                return_document=ReturnDocument.AFTER,
                session=session,
            )
        except DuplicateKeyError as e:
            # Two concurrent upserts on the same handle; the loser retries as a plain update
            raise TransactionConflictError(f"Concurrent upsert for phone {phone}", operation="upsert_person") from e
        except PyMongoError as e:
            raise _database_error(e, "Error upserting person", "upsert_person_by_phone") from e
        return self._document_to_person(document)

    async def find_person(self, person_id: str, session: Optional[Any] = None) -> Optional[Person]:
        """Find person by ID"""
        object_id = _to_object_id(person_id)
        if object_id is None:
            return None

        try:
            document = await self.person_collection.find_one({PersonFields.MONGO_ID: object_id}, session=session)
        except PyMongoError as e:
            raise _database_error(e, "Error finding person by ID", "find_person") from e
        return self._document_to_person(document) if document else None

    async def find_persons(self, person_ids: Sequence[str]) -> List[Person]:
        """Find several persons by ID"""
        object_ids = [oid for oid in (_to_object_id(person_id) for person_id in person_ids) if oid is not None]
        if not object_ids:
            return []

        try:
            cursor = self.person_collection.find({PersonFields.MONGO_ID: {"$in": object_ids}})
            return [self._document_to_person(document) async for document in cursor]
        except PyMongoError as e:
            raise _database_error(e, "Error finding persons", "find_persons") from e

    async def list_persons(self) -> List[Person]:
        """All persons ordered by name"""
        try:
            cursor = self.person_collection.find({}).sort(
                [(PersonFields.NORMALIZED_NAME, ASCENDING), (PersonFields.MONGO_ID, ASCENDING)]
            )
            return [self._document_to_person(document) async for document in cursor]
        except PyMongoError as e:
            raise _database_error(e, "Error listing persons", "list_persons") from e

    async def delete_person(self, person_id: str, session: Optional[Any] = None) -> bool:
        """Delete a person; its faces lose their link but are kept"""
        object_id = _to_object_id(person_id)
        if object_id is None:
            return False

        try:
            unlinked = await self.face_collection.update_many(
                {FaceFields.PERSON_ID: person_id},
                {"$set": {FaceFields.PERSON_ID: None}},
                session=session,
            )
            result = await self.person_collection.delete_one({PersonFields.MONGO_ID: object_id}, session=session)
        except PyMongoError as e:
            raise _database_error(e, "Error deleting person", "delete_person") from e
        logger.info("Deleted person %s, unlabeled %d face(s)", person_id, unlinked.modified_count)
        return result.deleted_count > 0

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _scan_faces(self, query: Dict[str, Any], session: Optional[Any] = None) -> List[Face]:
        try:
            cursor = self.face_collection.find(query, session=session).sort(FaceFields.MONGO_ID, ASCENDING)
            return [self._document_to_face(document) async for document in cursor]
        except PyMongoError as e:
            raise _database_error(e, "Error scanning faces", "scan_faces") from e

    def _document_to_person(self, document: Dict[str, Any]) -> Person:
        """Convert MongoDB document to Person domain model"""
        if not document:
            raise ValueError("Invalid document: document is None or empty")

        return Person(
            id=str(document[PersonFields.MONGO_ID]),
            name=document.get(PersonFields.NAME),
            phone_number=document.get(PersonFields.PHONE_NUMBER),
            seat_number=document.get(PersonFields.SEAT_NUMBER),
            created_at=ensure_utc(document.get(PersonFields.CREATED_AT)),
            updated_at=ensure_utc(document.get(PersonFields.UPDATED_AT)),
        )

    def _document_to_photo(self, document: Dict[str, Any]) -> Photo:
        """Convert MongoDB document to Photo domain model"""
        if not document:
            raise ValueError("Invalid document: document is None or empty")

        return Photo(
            id=str(document[PhotoFields.MONGO_ID]),
            url=document.get(PhotoFields.URL, ""),
            original_url=document.get(PhotoFields.ORIGINAL_URL),
            status=PhotoStatus(document.get(PhotoFields.STATUS, PhotoStatus.PENDING.value)),
            width=int(document.get(PhotoFields.WIDTH, 0)),
            height=int(document.get(PhotoFields.HEIGHT, 0)),
            created_at=ensure_utc(document.get(PhotoFields.CREATED_AT)),
        )

    def _photo_to_dict(self, photo: Photo) -> Dict[str, Any]:
        """Convert Photo domain model to MongoDB document"""
        return {
            PhotoFields.URL: photo.url,
            PhotoFields.ORIGINAL_URL: photo.original_url,
            PhotoFields.STATUS: photo.status.value,
            PhotoFields.WIDTH: photo.width,
            PhotoFields.HEIGHT: photo.height,
        }

    def _document_to_face(self, document: Dict[str, Any]) -> Face:
        """Convert MongoDB document to Face domain model"""
        if not document:
            raise ValueError("Invalid document: document is None or empty")

        box = document.get(FaceFields.BOX) or {}
        return Face(
            id=str(document[FaceFields.MONGO_ID]),
            photo_id=document.get(FaceFields.PHOTO_ID, ""),
            person_id=document.get(FaceFields.PERSON_ID),
            embedding=list(document.get(FaceFields.EMBEDDING) or []),
            box=BoundingBox(x1=box["x1"], y1=box["y1"], x2=box["x2"], y2=box["y2"]),
            confidence=float(document.get(FaceFields.CONFIDENCE, 1.0)),
            created_at=ensure_utc(document.get(FaceFields.CREATED_AT)),
        )
