"""create stores, tables and bookings

Revision ID: 202610010900
Revises:
Create Date: 2026-10-01 09:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "202610010900"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "stores",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("owner_id", sa.String(length=50), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_stores_owner_id", "stores", ["owner_id"], unique=False)

    op.create_table(
        "tables",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("store_id", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("location", sa.String(length=3), nullable=False),
        sa.Column("smoking_allowed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("capacity > 0", name="ck_tables_capacity_positive"),
        sa.CheckConstraint("location IN ('in', 'out')", name="ck_tables_location"),
        sa.CheckConstraint(
            "status IN ('available', 'reserved', 'occupied')",
            name="ck_tables_status",
        ),
        sa.ForeignKeyConstraint(["store_id"], ["stores.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_tables_store_id", "tables", ["store_id"], unique=False)

    op.create_table(
        "bookings",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("store_id", sa.String(length=50), nullable=False),
        sa.Column("table_id", sa.String(length=50), nullable=True),
        sa.Column("user_id", sa.String(length=50), nullable=True),
        sa.Column("customer_name", sa.String(length=255), nullable=False),
        sa.Column("customer_email", sa.String(length=255), nullable=True),
        sa.Column("customer_phone", sa.String(length=50), nullable=True),
        sa.Column("party_size", sa.Integer(), nullable=False),
        sa.Column("booked_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("ends_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("special_requests", sa.String(length=1000), nullable=True),
        sa.Column("accept_code", sa.String(length=16), nullable=True),
        sa.Column("decline_reason", sa.String(length=1000), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("party_size BETWEEN 1 AND 20", name="ck_bookings_party_size"),
        sa.CheckConstraint(
            "duration_minutes BETWEEN 1 AND 1440", name="ck_bookings_duration_range"
        ),
        sa.CheckConstraint("ends_at > booked_at", name="ck_bookings_window"),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'declined', 'cancelled')",
            name="ck_bookings_status",
        ),
        sa.ForeignKeyConstraint(["store_id"], ["stores.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["table_id"], ["tables.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"], unique=False)
    op.create_index(
        "ix_bookings_table_booked_at",
        "bookings",
        ["table_id", "booked_at"],
        unique=False,
    )
    op.create_index(
        "ix_bookings_store_status_created_at",
        "bookings",
        ["store_id", "status", "created_at"],
        unique=False,
    )

    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")
    op.execute(
        """
        ALTER TABLE bookings
        ADD CONSTRAINT ex_bookings_no_overlap
        EXCLUDE USING gist (
            table_id WITH =,
            tstzrange(booked_at, ends_at, '[)') WITH &&
        )
        WHERE (status IN ('pending', 'approved') AND table_id IS NOT NULL)
        """
    )


def downgrade() -> None:
    op.execute("ALTER TABLE bookings DROP CONSTRAINT IF EXISTS ex_bookings_no_overlap")
    op.drop_index("ix_bookings_store_status_created_at", table_name="bookings")
    op.drop_index("ix_bookings_table_booked_at", table_name="bookings")
    op.drop_index("ix_bookings_user_id", table_name="bookings")
    op.drop_table("bookings")
    op.drop_index("ix_tables_store_id", table_name="tables")
    op.drop_table("tables")
    op.drop_index("ix_stores_owner_id", table_name="stores")
    op.drop_table("stores")
