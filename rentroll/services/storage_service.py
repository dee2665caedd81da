"""
Document Storage Service
Uploads contract attachments to a Supabase Storage bucket and issues
time-limited signed URLs for reading them back.

The supabase client is synchronous, so its calls run in a worker thread to
keep the event loop free while a contract transaction is open.
"""
import asyncio
import logging
import re
import time
from dataclasses import dataclass
from typing import Optional, Protocol

from supabase import create_client, Client

from rentroll.core.config import settings
from rentroll.core.exceptions import StorageError

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


@dataclass(frozen=True)
class UploadedDocument:
    """An attachment received with a contract request."""
    file_name: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)


class DocumentStorage(Protocol):
    async def upload(
        self, content: bytes, mime_type: Optional[str], original_name: str, folder: str
    ) -> str: ...

    async def signed_url(self, path: str, ttl: int) -> str: ...


def build_object_name(folder: str, original_name: str, now_ms: Optional[int] = None) -> str:
    """``<folder>/<epoch-millis>-<sanitized name>``"""
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{folder}/{stamp}-{_UNSAFE_CHARS.sub('_', original_name)}"


class SupabaseDocumentStorage:
    """DocumentStorage backed by a Supabase Storage bucket."""

    def __init__(
        self,
        url: Optional[str] = None,
        key: Optional[str] = None,
        bucket: Optional[str] = None,
        client: Optional[Client] = None,
    ):
        self.bucket_name = bucket or settings.STORAGE_BUCKET
        self._url = url or settings.SUPABASE_URL
        self._key = key or settings.SUPABASE_KEY
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            if not (self._url and self._key):
                raise StorageError("document storage is not configured")
            try:
                self._client = create_client(self._url, self._key)
            except Exception as e:
                logger.error(f"[STORAGE] Failed to initialize Supabase client: {e}")
                raise StorageError("document storage unavailable") from e
            logger.info(f"[STORAGE] Supabase storage initialized for bucket: {self.bucket_name}")
        return self._client

    def _bucket(self):
        return self.client.storage.from_(self.bucket_name)

    async def upload(
        self, content: bytes, mime_type: Optional[str], original_name: str, folder: str
    ) -> str:
        object_name = build_object_name(folder, original_name)
        options = {"content-type": mime_type or "application/octet-stream", "upsert": "false"}
        try:
            await asyncio.to_thread(
                self._bucket().upload, path=object_name, file=content, file_options=options
            )
        except StorageError:
            raise
        except Exception as e:
            logger.error(f"[STORAGE] Upload of '{original_name}' failed: {e}")
            raise StorageError(f"upload failed for '{original_name}'") from e

        logger.info(f"[STORAGE] Uploaded '{original_name}' as {object_name}")
        return object_name

    async def signed_url(self, path: str, ttl: int) -> str:
        try:
            result = await asyncio.to_thread(self._bucket().create_signed_url, path, ttl)
        except StorageError:
            raise
        except Exception as e:
            logger.error(f"[STORAGE] Failed to get signed URL for {path}: {e}")
            raise StorageError("could not sign document url") from e

        url = (result.get("signedURL") or result.get("signedUrl")) if isinstance(result, dict) else None
        if not url:
            raise StorageError("storage returned no signed url")
        return url
