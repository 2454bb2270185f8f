"""
Unit tests for LocalObjectStorage.
"""
import pytest

from eventpix.domain.exceptions import StorageError
from eventpix.infrastructure.storage import LocalObjectStorage


@pytest.fixture
def storage(tmp_path):
    return LocalObjectStorage(str(tmp_path))


class TestLocalObjectStorage:
    @pytest.mark.asyncio
    async def test_put_returns_public_url(self, storage, tmp_path):
        url = await storage.put("photos", "a.jpg", b"jpeg-bytes")

        assert url == "/media/photos/a.jpg"
        assert (tmp_path / "photos" / "a.jpg").read_bytes() == b"jpeg-bytes"
        assert not (tmp_path / "photos" / "a.jpg.tmp").exists()

    @pytest.mark.asyncio
    async def test_delete(self, storage, tmp_path):
        url = await storage.put("photos", "a.jpg", b"x")

        assert await storage.delete(url) is True
        assert not (tmp_path / "photos" / "a.jpg").exists()
        assert await storage.delete(url) is False

    @pytest.mark.asyncio
    async def test_foreign_and_traversal_urls_ignored(self, storage, tmp_path):
        (tmp_path.parent / "outside.txt").write_text("keep")

        assert await storage.delete("https://cdn.example.com/a.jpg") is False
        assert await storage.delete("/media/../outside.txt") is False
        assert (tmp_path.parent / "outside.txt").exists()

    @pytest.mark.asyncio
    async def test_put_outside_root_refused(self, storage):
        with pytest.raises(StorageError):
            await storage.put("..", "escape.jpg", b"x")
