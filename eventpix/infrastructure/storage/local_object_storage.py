# Standard library imports
import asyncio
import logging
import os
from pathlib import Path
from typing import Optional

# Local application imports
from ...domain.exceptions import StorageError
from ...domain.repositories.object_storage import ObjectStorage

logger = logging.getLogger(__name__)

MEDIA_URL_PREFIX = "/media"


class LocalObjectStorage(ObjectStorage):
    """
    Filesystem implementation of ObjectStorage.
    
    Blobs live under root_dir/<folder>/<filename> and are served by the app
    as static files under /media; the returned URL is that public path.
    """
    
    def __init__(self, root_dir: str, url_prefix: str = MEDIA_URL_PREFIX) -> None:
        self.root_dir = Path(root_dir).resolve()
        self.url_prefix = url_prefix.rstrip("/")
    
    async def put(self, folder: str, filename: str, data: bytes, content_type: str = "image/jpeg") -> str:
        target = self._resolve(f"{folder}/{filename}")
        if target is None:
            raise StorageError(f"Refusing to write outside storage root: {folder}/{filename}")
        
        try:
            await asyncio.to_thread(self._write_atomic, target, data)
        except OSError as e:
            logger.error(f"Failed to store blob {folder}/{filename}: {e}")
            raise StorageError(f"Failed to store {folder}/{filename}: {e}") from e
        
        url = f"{self.url_prefix}/{folder}/{filename}"
        logger.debug(f"Stored {len(data)} bytes ({content_type}) at {url}")
        return url
    
    async def delete(self, url: str) -> bool:
        if not url.startswith(self.url_prefix + "/"):
            logger.warning(f"Not a local storage URL: {url}")
            return False
        
        target = self._resolve(url[len(self.url_prefix) + 1:])
        if target is None:
            logger.warning(f"Refusing to delete outside storage root: {url}")
            return False
        
        try:
            existed = target.exists()
            await asyncio.to_thread(target.unlink, missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to delete {url}: {e}") from e
        return existed
    
    def _resolve(self, relative: str) -> Optional[Path]:
        target = (self.root_dir / relative).resolve()
        if target == self.root_dir or self.root_dir not in target.parents:
            return None
        return target
    
    @staticmethod
    def _write_atomic(target: Path, data: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp = target.with_name(target.name + ".tmp")
        tmp.write_bytes(data)
        os.replace(tmp, target)
