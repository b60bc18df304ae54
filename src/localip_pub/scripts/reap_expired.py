# src/localip_pub/scripts/reap_expired.py
"""
Cron job deleting address records whose lifetime has run out.

Expiry is already enforced lazily on every access; this job only reclaims
storage for expired addresses nobody touches any more. In-memory state of a
running server is not affected: once a record is gone its tokens stop
authenticating anyway.
"""

import argparse
import logging
import sys

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from localip_pub.core.logging_config import setup_logging
from localip_pub.core.settings import settings
from localip_pub.db.session import SessionLocal
from localip_pub.db.time import now_ms
from localip_pub.repositories.address_repo import AddressRepository

logger = logging.getLogger(__name__)


def reap_expired(db: Session, now: int | None = None, *, dry_run: bool = False) -> list[str]:
    """Delete every expired record and return the ids that were (or would be) removed.

    Args:
        db: Database session
        now: Reference time in ms, defaults to the current time
        dry_run: Only report the expired ids
    """
    repo = AddressRepository(db)
    reference = now_ms() if now is None else now
    expired = repo.list_expired(reference)
    if dry_run:
        return expired

    removed = [
        address_id for address_id in expired if repo.delete_if_expired(address_id, reference)
    ]
    for address_id in removed:
        logger.info("Reaped expired address %s", address_id)
    return removed


def main() -> None:
    parser = argparse.ArgumentParser(description="Delete expired address records")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List expired ids without deleting them.",
    )
    args = parser.parse_args()

    setup_logging(settings.log_level, settings.to_stdout)
    db = SessionLocal()
    try:
        ids = reap_expired(db, dry_run=args.dry_run)
    except SQLAlchemyError:
        logger.exception("Reaping expired addresses failed")
        sys.exit(1)
    finally:
        db.close()

    verb = "expired" if args.dry_run else "removed"
    print(f"{len(ids)} address(es) {verb}")
    for address_id in ids:
        print(f"  {address_id}")


if __name__ == "__main__":
    main()
