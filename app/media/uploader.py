"""
Media host client.

Uploads go straight to the Cloudinary REST upload endpoint with a signed
request, the returned `secure_url` is what gets stored on the record.
"""

import hashlib
import logging
import time
from typing import Optional

import httpx

from app.core import config
from app.core.errors import UpstreamError

logger = logging.getLogger(__name__)


def sign_params(params: dict, api_secret: str) -> str:
    """Cloudinary signature: sorted key=value pairs joined by '&', then the secret"""
    to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params) if params[k] not in (None, ""))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode()).hexdigest()


class MediaStore:
    def __init__(
        self,
        cloud_name: str = config.CLOUDINARY_CLOUD_NAME,
        api_key: str = config.CLOUDINARY_API_KEY,
        api_secret: str = config.CLOUDINARY_API_SECRET,
        folder: str = config.MEDIA_FOLDER,
        base_url: str = config.CLOUDINARY_API_URL,
        timeout: float = config.MEDIA_UPLOAD_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def upload_url(self, resource_type: str) -> str:
        return f"{self.base_url}/{self.cloud_name}/{resource_type}/upload"

    async def upload(
        self,
        data: bytes,
        content_type: Optional[str],
        resource_type: str = "image",
        public_id: Optional[str] = None,
        filename: str = "upload",
    ) -> str:
        if not (self.cloud_name and self.api_key and self.api_secret):
            raise UpstreamError("Media storage is not configured")

        params = {
            "folder": self.folder,
            "public_id": public_id,
            "timestamp": str(int(time.time())),
        }
        form = {k: v for k, v in params.items() if v}
        form["api_key"] = self.api_key
        form["signature"] = sign_params(params, self.api_secret)
        files = {"file": (filename, data, content_type or "application/octet-stream")}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.upload_url(resource_type), data=form, files=files)
        except httpx.HTTPError as e:
            logger.error("Media upload failed for %s: %s", public_id, e)
            raise UpstreamError("Media upload failed, please try again")

        if response.status_code >= 300:
            logger.error("Media host rejected %s (%s): %s", public_id, response.status_code, response.text)
            raise UpstreamError("Media upload failed, please try again")

        secure_url = response.json().get("secure_url")
        if not secure_url:
            raise UpstreamError("Media host returned no URL")

        logger.info("Uploaded %s to %s", public_id, secure_url)
        return secure_url


_store: Optional[MediaStore] = None


def get_media_store() -> MediaStore:
    """Media store dependency"""
    global _store
    if _store is None:
        _store = MediaStore()
    return _store
