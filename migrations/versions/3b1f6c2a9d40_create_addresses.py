"""create addresses

Revision ID: 3b1f6c2a9d40
Revises:
Create Date: 2026-10-18 15:40:12.418207

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3b1f6c2a9d40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the address record table."""
    op.create_table(
        "addresses",
        sa.Column("id", sa.Text(), nullable=False),
        sa.Column("access_password_hash", sa.Text(), nullable=False),
        sa.Column("master_password_hash", sa.Text(), nullable=False),
        sa.Column("ip_address", sa.Text(), nullable=False),
        sa.Column("created_on", sa.BigInteger(), nullable=False),
        sa.Column("last_update", sa.BigInteger(), nullable=False),
        sa.Column("expiry", sa.BigInteger(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_addresses_expiry", "addresses", ["expiry"])


def downgrade() -> None:
    """Drop the address record table."""
    op.drop_index("ix_addresses_expiry", table_name="addresses")
    op.drop_table("addresses")
