from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from rrs.infrastructure.db.models.base import Base


class BookingModel(Base):
    __tablename__ = "bookings"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    store_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("stores.id", ondelete="CASCADE"),
        nullable=False,
    )
    table_id: Mapped[str | None] = mapped_column(
        String(50),
        ForeignKey("tables.id", ondelete="RESTRICT"),
        nullable=True,
    )
    user_id: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    customer_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    party_size: Mapped[int] = mapped_column(Integer, nullable=False)
    booked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    # stored so the overlap exclusion constraint can index tstzrange(booked_at, ends_at)
    ends_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    special_requests: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    accept_code: Mapped[str | None] = mapped_column(String(16), nullable=True)
    decline_reason: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint("party_size BETWEEN 1 AND 20", name="ck_bookings_party_size"),
        CheckConstraint(
            "duration_minutes BETWEEN 1 AND 1440", name="ck_bookings_duration_range"
        ),
        CheckConstraint("ends_at > booked_at", name="ck_bookings_window"),
        CheckConstraint(
            "status IN ('pending', 'approved', 'declined', 'cancelled')",
            name="ck_bookings_status",
        ),
        Index("ix_bookings_table_booked_at", "table_id", "booked_at"),
        Index("ix_bookings_store_status_created_at", "store_id", "status", "created_at"),
    )
