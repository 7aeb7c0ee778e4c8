"""
Local disk image storage.

Files are written under a single directory with generated names and served
by the application under a URL prefix.
"""

import asyncio
from pathlib import Path
from uuid import uuid4

from loguru import logger

from storefront.core.exceptions import BlobStoreError
from storefront.modules.storage.base import BlobStore, StoredBlob


class LocalBlobStore(BlobStore):
    """
    Stores images on the local filesystem.

    Usage:
        store = LocalBlobStore("uploads", url_prefix="/uploads")
        blob = await store.upload(data, "apple.png")
    """

    def __init__(self, root: str | Path, url_prefix: str = "/uploads") -> None:
        self.root = Path(root)
        self.url_prefix = url_prefix.rstrip("/")

    def _path_for(self, public_id: str) -> Path:
        path = (self.root / public_id).resolve()
        if path.parent != self.root.resolve():
            raise BlobStoreError(f"Invalid blob id: {public_id}")
        return path

    async def upload(
        self,
        data: bytes,
        filename: str,
        content_type: str | None = None,
    ) -> StoredBlob:
        """Write the image to disk under a generated name."""
        suffix = Path(filename).suffix.lower()
        public_id = f"{uuid4().hex}{suffix}"
        path = self._path_for(public_id)

        try:
            await asyncio.to_thread(self.root.mkdir, parents=True, exist_ok=True)
            await asyncio.to_thread(path.write_bytes, data)
        except OSError as e:
            raise BlobStoreError(f"Failed to write {public_id}: {e}") from e

        logger.debug(f"Stored image {public_id} ({len(data)} bytes)")
        return StoredBlob(url=f"{self.url_prefix}/{public_id}", public_id=public_id)

    async def delete(self, public_id: str) -> None:
        """Remove the image file; a missing file is not an error."""
        path = self._path_for(public_id)
        try:
            await asyncio.to_thread(path.unlink, missing_ok=True)
        except OSError as e:
            raise BlobStoreError(f"Failed to delete {public_id}: {e}") from e
