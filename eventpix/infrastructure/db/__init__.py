from .mongo_connection import (
    get_client,
    get_database,
    get_person_collection,
    get_photo_collection,
    get_face_collection,
    close_client,
)
from .mongo_identity_store import MongoIdentityStore

__all__ = [
    "get_client",
    "get_database",
    "get_person_collection",
    "get_photo_collection",
    "get_face_collection",
    "close_client",
    "MongoIdentityStore",
]
