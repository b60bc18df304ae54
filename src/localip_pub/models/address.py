# src/localip_pub/models/address.py
"""SQLAlchemy model for published address records."""

from __future__ import annotations

from sqlalchemy import BigInteger, Index, Text
from sqlalchemy.orm import Mapped, mapped_column

from localip_pub.db.session import Base

# Sentinel stored in ``last_update`` and ``expiry`` meaning "never".
NEVER = -1


class AddressRecord(Base):
    """One published endpoint guarded by an access and a master password.

    Timestamps are milliseconds since the UNIX epoch.
    """

    __tablename__ = "addresses"
    __table_args__ = (Index("ix_addresses_expiry", "expiry"),)

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    access_password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    master_password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    ip_address: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_on: Mapped[int] = mapped_column(BigInteger, nullable=False)
    last_update: Mapped[int] = mapped_column(BigInteger, nullable=False, default=NEVER)
    expiry: Mapped[int] = mapped_column(BigInteger, nullable=False, default=NEVER)

    @property
    def endpoint(self) -> str:
        """Return the last published endpoint ("" before the first update)."""
        return self.ip_address

    @property
    def lifetime_reference(self) -> int:
        """Return the timestamp the remaining lifetime is measured from."""
        return self.created_on if self.last_update == NEVER else self.last_update

    def __repr__(self) -> str:
        return f"AddressRecord(id={self.id!r}, created_on={self.created_on}, expiry={self.expiry})"
