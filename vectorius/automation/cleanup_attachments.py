from __future__ import annotations

"""Delete chat attachments older than the retention window.

Stored objects are removed from the bucket in batches, then the attachment
rows are soft-deleted (``deleted_at`` set). Image extraction rows are kept.

Usage: python -m vectorius.automation.cleanup_attachments [--dry-run] [--days N]
"""
import argparse
import datetime
import sys
from typing import List, Optional

from vectorius.config import ATTACHMENT_RETENTION_DAYS
from vectorius.memory import crud
from vectorius.memory.models import utcnow
from vectorius.storage.attachments import AttachmentStorage, default_attachment_storage
from vectorius.utils.logger import get_logger

logger = get_logger(__name__)

BATCH_SIZE = 100


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Delete chat attachments older than the retention window.")
    parser.add_argument("--dry-run", action="store_true", help="Show what would be deleted without deleting")
    parser.add_argument("--days", type=int, default=ATTACHMENT_RETENTION_DAYS, help="Retention period in days")
    return parser.parse_args(argv)


def cleanup(storage: AttachmentStorage, days: int, dry_run: bool = False) -> int:
    """Run one cleanup pass. Returns the number of attachments soft-deleted."""
    cutoff = utcnow() - datetime.timedelta(days=days)
    logger.info(f"Cleanup: deleting attachments older than {days} days (before {cutoff.isoformat()})")
    if dry_run:
        logger.info("DRY RUN -- no deletions will occur")

    old_attachments = crud.list_expired_attachments(cutoff)
    if not old_attachments:
        logger.info("No attachments to clean up.")
        return 0

    logger.info(f"Found {len(old_attachments)} attachment(s) to delete")

    if dry_run:
        for att in old_attachments:
            logger.info(
                f"  [DRY RUN] Would delete: {att['file_name']} (path: {att['storage_path']}, "
                f"id: {att['id']}, created: {att['created_at']})"
            )
        return 0

    storage.remove_in_batches([a["storage_path"] for a in old_attachments], batch_size=BATCH_SIZE)

    count = crud.mark_attachments_deleted([a["id"] for a in old_attachments])
    logger.info(f"Soft-deleted {count} attachment record(s) (extraction data preserved)")
    return count


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    storage = default_attachment_storage()
    if storage is None:
        logger.error("Missing environment variables: SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY")
        return 1

    cleanup(storage, days=args.days, dry_run=args.dry_run)
    logger.info("Cleanup complete.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
