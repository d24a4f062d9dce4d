"""Chat attachment storage on top of a Supabase Storage bucket.

Uploaded images live under ``<user_id>/<uuid>.<ext>`` in the attachments
bucket. Metadata rows are kept in the ``chat_attachments`` table (see
:mod:`vectorius.memory.crud`).
"""

import functools
import uuid
from typing import Any, Dict, Iterable, List, Optional

from supabase import Client

from vectorius.config import (
    ALLOWED_MIME_TYPES,
    ATTACHMENTS_BUCKET,
    MAX_UPLOAD_BYTES,
    StorageSettings,
)
from vectorius.memory import crud
from vectorius.storage.supabase_client import get_supabase_client
from vectorius.utils.error_handler import AttachmentRejectedError, StorageError
from vectorius.utils.logger import get_logger

logger = get_logger(__name__)


def validate_upload(mime_type: str | None, size: int) -> None:
    """Raise AttachmentRejectedError unless the file is an allowed image under 8 MB."""
    if mime_type not in ALLOWED_MIME_TYPES:
        raise AttachmentRejectedError(
            f"Unsupported file type: {mime_type}. Allowed: jpg, png, heic"
        )
    if size > MAX_UPLOAD_BYTES:
        raise AttachmentRejectedError(
            f"File too large ({size / 1024 / 1024:.1f}MB). Max: 8MB"
        )


def build_storage_path(user_id: str, file_name: str | None) -> str:
    ext = "jpg"
    if file_name and "." in file_name:
        ext = file_name.rsplit(".", 1)[-1].lower() or "jpg"
    return f"{user_id}/{uuid.uuid4()}.{ext}"


class AttachmentStorage:
    """Thin wrapper around one Supabase Storage bucket."""

    def __init__(self, client: Client, bucket: str = ATTACHMENTS_BUCKET):
        self.client = client
        self.bucket = bucket

    def _bucket(self):
        return self.client.storage.from_(self.bucket)

    def create_signed_url(self, path: str, expires_in: int) -> str:
        """Return a URL for *path* that stays valid for *expires_in* seconds."""
        try:
            signed = self._bucket().create_signed_url(path, expires_in)
        except Exception as e:
            raise StorageError(f"Failed to sign {path}: {e}") from e
        url = (signed or {}).get("signedUrl") or (signed or {}).get("signedURL")
        if not url:
            raise StorageError(f"Failed to sign {path}: empty response")
        return url

    def upload(self, path: str, data: bytes, content_type: str) -> None:
        try:
            self._bucket().upload(
                path,
                data,
                {"content-type": content_type, "upsert": "false"},
            )
        except Exception as e:
            raise StorageError(f"Failed to upload {path}: {e}") from e

    def remove(self, paths: Iterable[str]) -> None:
        paths = list(paths)
        if not paths:
            return
        try:
            self._bucket().remove(paths)
        except Exception as e:
            raise StorageError(f"Failed to remove {len(paths)} object(s): {e}") from e

    # ------------------------------------------------------------------
    # Attachment lifecycle
    # ------------------------------------------------------------------

    def store_attachment(
        self,
        user_id: str,
        file_name: str,
        mime_type: str,
        data: bytes,
    ) -> Dict[str, Any]:
        """Validate, upload and record an attachment; return its row.

        If recording the row fails the uploaded object is removed again.
        """
        validate_upload(mime_type, len(data))
        path = build_storage_path(user_id, file_name)
        self.upload(path, data, mime_type)

        try:
            attachment = crud.create_attachment(
                uploader_user_id=user_id,
                storage_path=path,
                file_name=file_name,
                mime_type=mime_type,
                file_size_bytes=len(data),
            )
        except Exception:
            logger.exception("Failed to record attachment %s; removing object", path)
            try:
                self.remove([path])
            except StorageError as cleanup_error:
                logger.warning("Cleanup of %s failed: %s", path, cleanup_error)
            raise

        logger.info("Stored attachment %s (%d bytes) for user %s", attachment["id"], len(data), user_id)
        return attachment

    def remove_in_batches(self, paths: List[str], batch_size: int = 100) -> int:
        """Remove *paths* in batches, logging failed batches. Returns objects removed."""
        removed = 0
        for start in range(0, len(paths), batch_size):
            batch = paths[start:start + batch_size]
            batch_no = start // batch_size + 1
            try:
                self.remove(batch)
            except StorageError as e:
                logger.error("Storage delete error (batch %d): %s", batch_no, e)
                continue
            removed += len(batch)
            logger.info("Deleted %d storage object(s) (batch %d)", len(batch), batch_no)
        return removed


@functools.lru_cache(maxsize=4)
def _storage_for(url: str, service_role_key: str, bucket: str) -> AttachmentStorage:
    settings = StorageSettings(url=url, service_role_key=service_role_key, bucket=bucket)
    return AttachmentStorage(get_supabase_client(settings), bucket)


def default_attachment_storage() -> Optional[AttachmentStorage]:
    """Storage for the Supabase project in the environment, or ``None``.

    One client is built per process and configuration; changing the env vars
    picks up a new client on the next call.
    """
    settings = StorageSettings.from_env()
    if not settings.is_configured():
        return None
    return _storage_for(settings.url, settings.service_role_key, settings.bucket)
