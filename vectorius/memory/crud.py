import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vectorius.utils.logger import get_logger

from .db import SessionLocal, init_db
from .models import ChatAttachment, ImageExtraction, utcnow

logger = get_logger(__name__)

# Ensure tables exist on first import.
init_db()


def _attachment_dict(row: ChatAttachment) -> Dict[str, Any]:
    return {
        "id": row.id,
        "uploader_user_id": row.uploader_user_id,
        "storage_path": row.storage_path,
        "file_name": row.file_name,
        "mime_type": row.mime_type,
        "file_size_bytes": row.file_size_bytes,
        "created_at": row.created_at,
        "deleted_at": row.deleted_at,
    }


# ---------------------------------------------------------------------------
# Image extractions
# ---------------------------------------------------------------------------

def get_extracted_text(attachment_id: str) -> Optional[str]:
    """Return the cached extraction text for ``attachment_id`` or ``None``."""
    if not attachment_id:
        return None
    db: Session = SessionLocal()
    try:
        row = (
            db.query(ImageExtraction)
            .filter(ImageExtraction.attachment_id == attachment_id)
            .first()
        )
        return row.extracted_text if row else None
    finally:
        db.close()


def save_extraction(
    attachment_id: str,
    extracted_text: str,
    model_used: Optional[str] = None,
    tokens_used: Optional[int] = None,
) -> bool:
    """Insert an extraction row. Returns ``False`` if one already existed.

    The unique constraint on ``attachment_id`` settles concurrent extractions
    of the same attachment: the first insert wins, later ones are rolled back.
    """
    db: Session = SessionLocal()
    try:
        db.add(
            ImageExtraction(
                attachment_id=attachment_id,
                extracted_text=extracted_text,
                model_used=model_used,
                tokens_used=tokens_used,
            )
        )
        db.commit()
        return True
    except IntegrityError:
        db.rollback()
        logger.info("Extraction for attachment %s already stored", attachment_id)
        return False
    finally:
        db.close()


# ---------------------------------------------------------------------------
# Attachments
# ---------------------------------------------------------------------------

def create_attachment(
    uploader_user_id: str,
    storage_path: str,
    file_name: str,
    mime_type: str,
    file_size_bytes: int,
) -> Dict[str, Any]:
    """Record an uploaded attachment and return it as a dict."""
    db: Session = SessionLocal()
    try:
        row = ChatAttachment(
            uploader_user_id=uploader_user_id,
            storage_path=storage_path,
            file_name=file_name,
            mime_type=mime_type,
            file_size_bytes=file_size_bytes,
        )
        db.add(row)
        db.commit()
        db.refresh(row)
        return _attachment_dict(row)
    finally:
        db.close()


def get_attachment(attachment_id: str) -> Optional[Dict[str, Any]]:
    if not attachment_id:
        return None
    db: Session = SessionLocal()
    try:
        row = db.get(ChatAttachment, attachment_id)
        return _attachment_dict(row) if row else None
    finally:
        db.close()


def list_expired_attachments(cutoff: datetime.datetime) -> List[Dict[str, Any]]:
    """Return attachments created before ``cutoff`` that are not yet deleted."""
    db: Session = SessionLocal()
    try:
        rows = (
            db.query(ChatAttachment)
            .filter(ChatAttachment.created_at < cutoff)
            .filter(ChatAttachment.deleted_at.is_(None))
            .order_by(ChatAttachment.created_at)
            .all()
        )
        return [_attachment_dict(r) for r in rows]
    finally:
        db.close()


def mark_attachments_deleted(attachment_ids: List[str]) -> int:
    """Soft-delete the given attachments. Returns the number of rows updated."""
    if not attachment_ids:
        return 0
    db: Session = SessionLocal()
    try:
        count = (
            db.query(ChatAttachment)
            .filter(ChatAttachment.id.in_(attachment_ids))
            .update({ChatAttachment.deleted_at: utcnow()}, synchronize_session=False)
        )
        db.commit()
        return count
    finally:
        db.close()
