"""
Media storage: user-namespaced uploads into the Supabase Storage bucket
"""

import secrets
import string
from typing import Optional
from uuid import UUID

from utils.supabase_client import SupabaseClient
from utils.exceptions import StorageError
from utils.structured_logging import get_structured_logger

logger = get_structured_logger(__name__)

BUCKET_OPTIONS = {
    "public": False,
    "file_size_limit": 1024 * 1024 * 1024,
}

_NAME_ALPHABET = string.ascii_lowercase + string.digits


def build_object_path(user_id: UUID, filename: str) -> str:
    """`{user_id}/{random}.{ext}`, keeping the original extension"""
    ext = filename.rsplit(".", 1)[-1] if "." in filename else "bin"
    name = "".join(secrets.choice(_NAME_ALPHABET) for _ in range(13))
    return f"{user_id}/{name}.{ext.lower()}"


class MediaStore:
    """Stores raw media files and hands back their public URL"""

    def __init__(self, client: SupabaseClient, bucket: str = "media"):
        self.client = client
        self.bucket = bucket

    async def upload(
        self,
        user_id: UUID,
        filename: str,
        data: bytes,
        content_type: Optional[str] = None
    ) -> str:
        """Upload a file and return its public URL"""
        path = build_object_path(user_id, filename)
        try:
            await self.client.ensure_bucket(self.bucket, BUCKET_OPTIONS)
            await self.client.upload(self.bucket, path, data, content_type or "application/octet-stream")
            url = self.client.get_public_url(self.bucket, path)
        except Exception as e:
            logger.error("Media upload failed", path=path, error=str(e))
            raise StorageError("Failed to upload media file", {"service": "storage", "error": str(e)})

        if not url:
            raise StorageError("Failed to upload media file", {"service": "storage"})

        logger.info("Media uploaded", path=path, size=len(data))
        return url
