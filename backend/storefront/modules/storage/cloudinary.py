"""
Cloudinary image storage.

Talks to the Cloudinary Upload API directly over HTTPS using signed requests.

Docs: https://cloudinary.com/documentation/image_upload_api_reference
"""

import hashlib
import time
from typing import Any

import httpx
from loguru import logger

from storefront.core.exceptions import BlobStoreError
from storefront.modules.storage.base import BlobStore, StoredBlob


class CloudinaryBlobStore(BlobStore):
    """
    Stores images in a Cloudinary account.

    Usage:
        store = CloudinaryBlobStore(cloud_name, api_key, api_secret)
        blob = await store.upload(data, "apple.png", "image/png")
        await store.delete(blob.public_id)
    """

    API_BASE = "https://api.cloudinary.com/v1_1"

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize Cloudinary storage.

        Args:
            cloud_name: Cloudinary cloud name
            api_key: API key
            api_secret: API secret used to sign requests
            folder: Folder uploads are placed in
            timeout: Request timeout in seconds
            transport: Custom httpx transport
        """
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder
        self.timeout = timeout
        self._transport = transport

        self.api_url = f"{self.API_BASE}/{cloud_name}/image"

        if not (cloud_name and api_key and api_secret):
            logger.warning("Cloudinary credentials not configured")

    def sign(self, params: dict[str, Any]) -> str:
        """
        Compute the request signature.

        Parameters are sorted by name, joined as ``key=value`` pairs with ``&``,
        the API secret is appended and the result is SHA-1 hashed.
        """
        to_sign = "&".join(
            f"{key}={value}"
            for key, value in sorted(params.items())
            if value is not None and value != ""
        )
        return hashlib.sha1(f"{to_sign}{self.api_secret}".encode()).hexdigest()

    def _signed(self, params: dict[str, Any]) -> dict[str, Any]:
        params = {k: v for k, v in params.items() if v is not None}
        params["timestamp"] = int(time.time())
        params["signature"] = self.sign(params)
        params["api_key"] = self.api_key
        return params

    async def _post(
        self,
        endpoint: str,
        data: dict[str, Any],
        files: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    f"{self.api_url}/{endpoint}",
                    data={k: str(v) for k, v in data.items()},
                    files=files,
                )
                response.raise_for_status()
                result = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Cloudinary {endpoint} failed: {e.response.status_code} {e.response.text}"
            )
            raise BlobStoreError(f"Cloudinary {endpoint} failed") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Cloudinary {endpoint} error: {e}")
            raise BlobStoreError(f"Cloudinary {endpoint} error") from e

        if not isinstance(result, dict):
            logger.error(f"Cloudinary {endpoint} returned unexpected body: {result!r}")
            raise BlobStoreError(f"Cloudinary {endpoint} returned unexpected body")
        return result

    async def upload(
        self,
        data: bytes,
        filename: str,
        content_type: str | None = None,
    ) -> StoredBlob:
        """Upload an image and return its secure URL and public id."""
        params = self._signed({"folder": self.folder})
        result = await self._post(
            "upload",
            params,
            files={"file": (filename, data, content_type or "application/octet-stream")},
        )

        url = result.get("secure_url") or result.get("url")
        if not url:
            raise BlobStoreError(f"Cloudinary upload returned no URL: {result}")

        logger.debug(f"Uploaded image to Cloudinary: {result.get('public_id')}")
        return StoredBlob(url=url, public_id=result.get("public_id"))

    async def delete(self, public_id: str) -> None:
        """Destroy an image by public id."""
        params = self._signed({"public_id": public_id})
        result = await self._post("destroy", params)

        outcome = result.get("result")
        if outcome == "not found":
            logger.debug(f"Cloudinary image already gone: {public_id}")
        elif outcome != "ok":
            raise BlobStoreError(f"Cloudinary destroy returned {outcome!r}")
