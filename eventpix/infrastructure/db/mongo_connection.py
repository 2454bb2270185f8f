# Standard library imports
from typing import Optional

# External package imports
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase, AsyncIOMotorCollection

# Local application imports
from ...core.config import get_settings


# Global MongoDB connection instances (singleton pattern)
_mongo_client: Optional[AsyncIOMotorClient] = None
_mongo_database: Optional[AsyncIOMotorDatabase] = None


def get_client() -> AsyncIOMotorClient:
    """
    Get MongoDB client instance (singleton pattern)
    
    Transactions need the client (sessions are started from it), so it is
    exposed alongside the database.
    
    Returns:
        MongoDB client instance
    """
    global _mongo_client
    
    if _mongo_client is None:
        settings = get_settings()
        _mongo_client = AsyncIOMotorClient(settings.mongo_uri, tz_aware=True)
    return _mongo_client


def get_database() -> AsyncIOMotorDatabase:
    """
    Get MongoDB database instance (singleton pattern)
    
    Returns:
        MongoDB database instance
    """
    global _mongo_database
    
    if _mongo_database is not None:
        return _mongo_database
    
    settings = get_settings()
    _mongo_database = get_client()[settings.mongo_database_name]
    return _mongo_database


def get_person_collection() -> AsyncIOMotorCollection:
    """
    Get persons collection from MongoDB
    
    Returns:
        MongoDB collection for persons (guests)
    """
    return get_database()["persons"]


def get_photo_collection() -> AsyncIOMotorCollection:
    """
    Get photos collection from MongoDB
    
    Returns:
        MongoDB collection for photos
    """
    return get_database()["photos"]


def get_face_collection() -> AsyncIOMotorCollection:
    """
    Get faces collection from MongoDB
    
    Returns:
        MongoDB collection for faces
    """
    return get_database()["faces"]


def close_client() -> None:
    """Close the MongoDB client (call on application shutdown)."""
    global _mongo_client, _mongo_database
    
    if _mongo_client is not None:
        _mongo_client.close()
    _mongo_client = None
    _mongo_database = None
