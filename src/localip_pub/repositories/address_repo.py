"""Data access helpers for working with address records."""
from __future__ import annotations

from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from localip_pub.models.address import NEVER, AddressRecord

__all__ = ["AddressRepository"]

_UPDATABLE_FIELDS = frozenset({"ip_address", "last_update", "expiry"})


class AddressRepository:
    """Thin wrapper around database access for address records.

    Absence is reported as ``None``/``False``; every other database failure
    propagates as :class:`sqlalchemy.exc.SQLAlchemyError`.
    """

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get(self, address_id: str) -> AddressRecord | None:
        """Return the record stored under ``address_id``."""
        return self.session.get(AddressRecord, address_id, populate_existing=True)

    def insert(self, record: AddressRecord) -> bool:
        """Persist a new record; return False if the id is already taken."""
        self.session.add(record)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            return False
        return True

    def update(self, address_id: str, **fields: Any) -> bool:
        """Apply ``fields`` to the record; return False if it does not exist."""
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"cannot update fields: {', '.join(sorted(unknown))}")
        result = self.session.execute(
            update(AddressRecord)
            .where(AddressRecord.id == address_id)
            .values(**fields)
            .execution_options(synchronize_session="fetch")
        )
        self.session.commit()
        return result.rowcount > 0

    def delete(self, address_id: str) -> bool:
        """Remove the record; return False if nothing was deleted."""
        result = self.session.execute(
            delete(AddressRecord)
            .where(AddressRecord.id == address_id)
            .execution_options(synchronize_session="fetch")
        )
        self.session.commit()
        return result.rowcount > 0

    def delete_if_expired(self, address_id: str, now: int) -> bool:
        """Remove the record only if it is still expired at ``now``.

        A record recreated after it was listed as expired is left alone.
        """
        result = self.session.execute(
            delete(AddressRecord)
            .where(
                AddressRecord.id == address_id,
                AddressRecord.expiry != NEVER,
                AddressRecord.expiry < now,
            )
            .execution_options(synchronize_session="fetch")
        )
        self.session.commit()
        return result.rowcount > 0

    def list_expired(self, now: int) -> list[str]:
        """Return ids of records whose finite expiry lies before ``now``."""
        result = self.session.execute(
            select(AddressRecord.id).where(
                AddressRecord.expiry != NEVER,
                AddressRecord.expiry < now,
            )
        )
        return list(result.scalars())
