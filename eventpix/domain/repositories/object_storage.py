from abc import ABC, abstractmethod


class ObjectStorage(ABC):
    """Blob storage interface for image bytes"""
    
    @abstractmethod
    async def put(self, folder: str, filename: str, data: bytes, content_type: str = "image/jpeg") -> str:
        """Store bytes and return the public reference URL"""
        pass
    
    @abstractmethod
    async def delete(self, url: str) -> bool:
        """Release the blob behind a URL returned by put()"""
        pass
