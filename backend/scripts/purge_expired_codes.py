"""Delete expired and already-used one-time codes.

Code requests already sweep expired rows as they go; run this from cron to
also clear verified codes and keep the table small on quiet days.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy.orm import Session as DBSession

from notekeeper.services.repositories import OtpRepository

logger = logging.getLogger(__name__)


def purge_expired_codes(db: DBSession, include_verified: bool = True) -> int:
    """
    Remove stale one-time codes.

    Args:
        db: Database session
        include_verified: Also remove codes that were already used

    Returns:
        Number of rows deleted
    """
    deleted = OtpRepository(db).purge_expired(datetime.now(UTC), include_verified=include_verified)
    db.commit()
    logger.info(f"Purged {deleted} one-time codes")
    return deleted


if __name__ == "__main__":
    """Run as standalone script."""
    import sys

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    from notekeeper.database import SessionLocal

    db = SessionLocal()
    try:
        purge_expired_codes(db, include_verified="--expired-only" not in sys.argv[1:])
    finally:
        db.close()
