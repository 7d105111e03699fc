"""
Supabase client utilities for storage operations
"""

import asyncio
from functools import lru_cache
from typing import Any, Dict

from supabase import create_client, Client

from utils.config import get_config


class SupabaseClient:
    """Supabase client wrapper for storage operations"""

    def __init__(self, supabase_url: str, supabase_key: str):
        if not supabase_url or not supabase_key:
            raise ValueError("Supabase URL and Service Role Key must be set")

        self.client: Client = create_client(supabase_url, supabase_key)
        self._known_buckets: set = set()

    async def ensure_bucket(self, bucket: str, options: Dict[str, Any]) -> None:
        """Create the bucket if it does not exist yet"""
        if bucket in self._known_buckets:
            return
        try:
            await asyncio.to_thread(self.client.storage.get_bucket, bucket)
        except Exception:
            await asyncio.to_thread(self.client.storage.create_bucket, bucket, options=options)
        self._known_buckets.add(bucket)

    async def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> None:
        """Upload raw bytes under path"""
        await asyncio.to_thread(
            self.client.storage.from_(bucket).upload,
            path,
            data,
            {"content-type": content_type},
        )

    def get_public_url(self, bucket: str, path: str) -> str:
        """Public URL for an object"""
        return self.client.storage.from_(bucket).get_public_url(path)


@lru_cache()
def get_supabase_client() -> SupabaseClient:
    """Shared client built from configuration"""
    config = get_config()
    return SupabaseClient(config.supabase_url, config.supabase_service_role_key)
