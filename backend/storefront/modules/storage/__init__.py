"""
Storage Module - Product image hosting.

Backends:
- Local disk (served by the application)
- Cloudinary
"""

from storefront.core.config import settings
from storefront.modules.storage.base import BlobStore, ImageUpload, StoredBlob
from storefront.modules.storage.cloudinary import CloudinaryBlobStore
from storefront.modules.storage.local import LocalBlobStore

__all__ = [
    "BlobStore",
    "ImageUpload",
    "StoredBlob",
    "LocalBlobStore",
    "CloudinaryBlobStore",
    "get_blob_store",
]


# Singleton instance
_blob_store: BlobStore | None = None


def get_blob_store() -> BlobStore:
    """Get or create the configured blob store."""
    global _blob_store
    if _blob_store is None:
        if settings.storage_backend == "cloudinary":
            _blob_store = CloudinaryBlobStore(
                cloud_name=settings.cloudinary_cloud_name,
                api_key=settings.cloudinary_api_key,
                api_secret=settings.cloudinary_api_secret,
                folder=settings.cloudinary_folder,
                timeout=settings.storage_timeout,
            )
        else:
            _blob_store = LocalBlobStore(
                settings.upload_dir,
                url_prefix=settings.upload_url_prefix,
            )
    return _blob_store
