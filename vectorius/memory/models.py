import datetime
import uuid

from sqlalchemy import Column, Integer, String, Text, DateTime

from .db import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime.datetime:
    """Naive UTC timestamp, matching the timezone-less DateTime columns."""
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


class ChatAttachment(Base):
    """ORM model for an image uploaded into a chat.

    Attributes
    ----------
    id
        UUID string handed to the client as ``attachmentId``.
    uploader_user_id
        Auth user that uploaded the file; only they may fetch a signed URL.
    storage_path
        Object path inside the attachments bucket (``<user>/<uuid>.<ext>``).
    deleted_at
        Set by the retention cleanup once the stored object is removed.
        Extraction rows survive the soft delete.
    """

    __tablename__ = "chat_attachments"

    id = Column(String(36), primary_key=True, default=_new_id)
    uploader_user_id = Column(String(64), index=True, nullable=False)
    storage_path = Column(String(255), nullable=False)
    file_name = Column(String(255), nullable=False)
    mime_type = Column(String(64), nullable=False)
    file_size_bytes = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    deleted_at = Column(DateTime, nullable=True)


class ImageExtraction(Base):
    """Text extracted from an attachment by the vision deployment.

    One row per attachment (``attachment_id`` is unique). Rows are inserted
    after the first successful extraction and are never updated.
    """

    __tablename__ = "image_extractions"

    id = Column(Integer, primary_key=True, index=True)
    attachment_id = Column(String(36), unique=True, index=True, nullable=False)
    extracted_text = Column(Text, nullable=False)
    model_used = Column(String(128), nullable=True)
    tokens_used = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
