from typing import TYPE_CHECKING
from ...infrastructure.db.mongo_connection import (
    get_client,
    get_database,
    get_person_collection,
    get_photo_collection,
    get_face_collection,
)

if TYPE_CHECKING:
    from ..base_container import BaseContainer


class DatabaseProvider:
    """Centralized database connection provider - single source of truth for all DB connections"""
    
    @staticmethod
    def register(container: "BaseContainer") -> None:
        """
        Register the Mongo client, database and collections.
        The client is needed by the identity store to open transaction sessions.
        """
        container.register_singleton("mongo_client", get_client())
        container.register_singleton("database", get_database())
        container.register_singleton("person_collection", get_person_collection())
        container.register_singleton("photo_collection", get_photo_collection())
        container.register_singleton("face_collection", get_face_collection())
