"""
Blob storage interface for product images.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ImageUpload:
    """Image file received from a client."""

    data: bytes
    filename: str
    content_type: str | None = None


@dataclass(frozen=True)
class StoredBlob:
    """Location of an uploaded blob."""

    url: str
    public_id: str | None = None  # handle used to delete the blob later


class BlobStore(ABC):
    """Abstract interface all image storage backends implement."""

    @abstractmethod
    async def upload(
        self,
        data: bytes,
        filename: str,
        content_type: str | None = None,
    ) -> StoredBlob:
        """
        Store a blob.

        Raises:
            BlobStoreError: The backend rejected or failed the upload
        """

    @abstractmethod
    async def delete(self, public_id: str) -> None:
        """
        Remove a previously stored blob.

        Raises:
            BlobStoreError: The backend failed the deletion
        """
