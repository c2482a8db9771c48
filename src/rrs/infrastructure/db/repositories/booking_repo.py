from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Engine, String, delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rrs.application.ports.repositories import (
    BookingOverlapError,
    BookingRepository,
    StaleBookingStatusError,
)
from rrs.domain.booking.entities import ACTIVE_STATUSES, Booking, BookingStatus, CustomerInfo
from rrs.domain.common.ids import BookingId, StoreId, TableId, UserId
from rrs.domain.common.window import TimeWindow
from rrs.infrastructure.db.models.booking import BookingModel
from rrs.infrastructure.db.models.table import TableModel
from rrs.infrastructure.db.session import get_engine, storage_errors

_ACTIVE_VALUES = [status.value for status in ACTIVE_STATUSES]
_EXCLUSION_VIOLATION = "23P01"


def _is_overlap_violation(exc: IntegrityError) -> bool:
    sqlstate = getattr(exc.orig, "sqlstate", None) or getattr(exc.orig, "pgcode", None)
    return sqlstate == _EXCLUSION_VIOLATION


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SqlAlchemyBookingRepository(BookingRepository):
    """PostgreSQL booking store.

    Writes that bind a booking to a table lock the table row first and
    re-scan for overlaps inside the same transaction; the
    ``ex_bookings_no_overlap`` exclusion constraint is the final arbiter.
    """

    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def add(self, booking: Booking) -> None:
        model = self._to_model(booking)
        with storage_errors("booking insert"), Session(self._engine) as session:
            with session.begin():
                if booking.table_id is not None:
                    self._claim_window(session, booking.table_id, booking.window)
                session.add(model)
                try:
                    session.flush()
                except IntegrityError as exc:
                    if _is_overlap_violation(exc):
                        raise BookingOverlapError(
                            f"table {booking.table_id} already booked for {booking.window}"
                        ) from exc
                    raise

    def get(self, booking_id: BookingId) -> Booking | None:
        statement = select(BookingModel).where(BookingModel.id == str(booking_id)).limit(1)
        with storage_errors("booking lookup"), Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()

        if model is None:
            return None
        return self._to_domain(model)

    def list_active_overlapping(
        self,
        table_id: TableId,
        window: TimeWindow,
        timeout_seconds: float,
    ) -> list[Booking]:
        return self.list_active_for_tables([table_id], window, timeout_seconds)

    def list_active_for_tables(
        self,
        table_ids: list[TableId],
        window: TimeWindow,
        timeout_seconds: float,
    ) -> list[Booking]:
        statement = select(BookingModel).where(
            BookingModel.table_id.in_([str(table_id) for table_id in table_ids]),
            BookingModel.status.in_(_ACTIVE_VALUES),
            BookingModel.booked_at < window.end,
            BookingModel.ends_at > window.start,
        )
        with storage_errors("availability lookup"), Session(self._engine) as session:
            with session.begin():
                session.execute(
                    select(
                        func.set_config(
                            "statement_timeout",
                            str(max(1, int(timeout_seconds * 1000))),
                            True,
                        )
                    )
                )
                models = list(session.execute(statement).scalars().all())
        return [self._to_domain(model) for model in models]

    def list_for_table(self, table_id: TableId, status: BookingStatus | None = None) -> list[Booking]:
        statement = select(BookingModel).where(BookingModel.table_id == str(table_id))
        return self._list(statement, status)

    def list_for_store(self, store_id: StoreId, status: BookingStatus | None = None) -> list[Booking]:
        statement = select(BookingModel).where(BookingModel.store_id == str(store_id))
        return self._list(statement, status)

    def list_for_user(self, user_id: UserId) -> list[Booking]:
        statement = select(BookingModel).where(BookingModel.user_id == str(user_id))
        return self._list(statement, None)

    def update_status(
        self,
        booking_id: BookingId,
        new_status: BookingStatus,
        expected_statuses: frozenset[BookingStatus],
        now: datetime,
        *,
        accept_code: str | None = None,
        decline_reason: str | None = None,
    ) -> Booking:
        values: dict[str, object] = {"status": new_status.value, "updated_at": now}
        if accept_code is not None:
            values["accept_code"] = accept_code
        if decline_reason is not None:
            values["decline_reason"] = decline_reason

        statement = (
            update(BookingModel)
            .where(
                BookingModel.id == str(booking_id),
                BookingModel.status.in_([status.value for status in expected_statuses]),
            )
            .values(**values)
        )
        with storage_errors("booking status update"), Session(self._engine) as session:
            result = session.execute(statement)
            if result.rowcount != 1:
                session.rollback()
                raise StaleBookingStatusError(f"booking {booking_id} status changed concurrently")
            session.commit()

        updated = self.get(booking_id)
        if updated is None:
            raise RuntimeError(f"booking {booking_id} not found after status update")
        return updated

    def approve_pending(
        self,
        *,
        store_id: StoreId | None,
        table_id: TableId | None,
        now: datetime,
    ) -> list[Booking]:
        statement = update(BookingModel).where(BookingModel.status == BookingStatus.PENDING.value)
        if store_id is not None:
            statement = statement.where(BookingModel.store_id == str(store_id))
        if table_id is not None:
            statement = statement.where(BookingModel.table_id == str(table_id))
        statement = (
            statement.values(
                status=BookingStatus.APPROVED.value,
                updated_at=now,
                accept_code=func.upper(
                    func.substr(func.md5(func.random().cast(String) + BookingModel.id), 1, 6)
                ),
            )
            .returning(BookingModel.id)
            .execution_options(synchronize_session=False)
        )

        with storage_errors("bulk approval"), Session(self._engine) as session:
            approved_ids = list(session.execute(statement).scalars().all())
            session.commit()
            if not approved_ids:
                return []
            models = list(
                session.execute(
                    select(BookingModel)
                    .where(BookingModel.id.in_(approved_ids))
                    .order_by(BookingModel.booked_at, BookingModel.id)
                )
                .scalars()
                .all()
            )
        return [self._to_domain(model) for model in models]

    def assign_table(
        self,
        booking_id: BookingId,
        table_id: TableId,
        expected_statuses: frozenset[BookingStatus],
        now: datetime,
    ) -> Booking:
        with storage_errors("table assignment"), Session(self._engine) as session:
            with session.begin():
                current = session.execute(
                    select(BookingModel).where(BookingModel.id == str(booking_id))
                ).scalar_one_or_none()
                if current is None:
                    raise StaleBookingStatusError(f"booking {booking_id} disappeared")
                window = TimeWindow(
                    start=_aware(current.booked_at),
                    duration_minutes=current.duration_minutes,
                )
                self._claim_window(session, table_id, window)
                result = session.execute(
                    update(BookingModel)
                    .where(
                        BookingModel.id == str(booking_id),
                        BookingModel.table_id.is_(None),
                        BookingModel.status.in_([status.value for status in expected_statuses]),
                    )
                    .values(table_id=str(table_id), updated_at=now)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != 1:
                    raise StaleBookingStatusError(f"booking {booking_id} changed concurrently")
                try:
                    session.flush()
                except IntegrityError as exc:
                    if _is_overlap_violation(exc):
                        raise BookingOverlapError(
                            f"table {table_id} already booked for {window}"
                        ) from exc
                    raise

        updated = self.get(booking_id)
        if updated is None:
            raise RuntimeError(f"booking {booking_id} not found after table assignment")
        return updated

    def delete(self, booking_id: BookingId) -> None:
        with storage_errors("booking delete"), Session(self._engine) as session:
            session.execute(delete(BookingModel).where(BookingModel.id == str(booking_id)))
            session.commit()

    def delete_for_table(self, table_id: TableId) -> int:
        with storage_errors("booking delete"), Session(self._engine) as session:
            result = session.execute(
                delete(BookingModel).where(BookingModel.table_id == str(table_id))
            )
            session.commit()
        return int(result.rowcount or 0)

    def _claim_window(self, session: Session, table_id: TableId, window: TimeWindow) -> None:
        """Serialize writers per table, then refuse overlapping windows."""
        session.execute(
            select(TableModel.id).where(TableModel.id == str(table_id)).with_for_update()
        )
        overlapping = session.execute(
            select(BookingModel.id)
            .where(
                BookingModel.table_id == str(table_id),
                BookingModel.status.in_(_ACTIVE_VALUES),
                BookingModel.booked_at < window.end,
                BookingModel.ends_at > window.start,
            )
            .limit(1)
        ).scalar_one_or_none()
        if overlapping is not None:
            raise BookingOverlapError(
                f"table {table_id} already booked by {overlapping} for an overlapping window"
            )

    def _list(self, statement, status: BookingStatus | None) -> list[Booking]:
        if status is not None:
            statement = statement.where(BookingModel.status == status.value)
        statement = statement.order_by(BookingModel.booked_at, BookingModel.id)
        with storage_errors("booking listing"), Session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
        return [self._to_domain(model) for model in models]

    def _to_model(self, booking: Booking) -> BookingModel:
        return BookingModel(
            id=str(booking.booking_id),
            store_id=str(booking.store_id),
            table_id=str(booking.table_id) if booking.table_id is not None else None,
            user_id=str(booking.user_id) if booking.user_id is not None else None,
            customer_name=booking.customer.name,
            customer_email=booking.customer.email,
            customer_phone=booking.customer.phone,
            party_size=booking.party_size,
            booked_at=booking.window.start,
            duration_minutes=booking.window.duration_minutes,
            ends_at=booking.window.end,
            status=booking.status.value,
            special_requests=booking.special_requests,
            accept_code=booking.accept_code,
            decline_reason=booking.decline_reason,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
        )

    def _to_domain(self, model: BookingModel) -> Booking:
        return Booking(
            booking_id=BookingId(model.id),
            store_id=StoreId(model.store_id),
            table_id=TableId(model.table_id) if model.table_id is not None else None,
            user_id=UserId(model.user_id) if model.user_id is not None else None,
            customer=CustomerInfo(
                name=model.customer_name,
                email=model.customer_email,
                phone=model.customer_phone,
            ),
            party_size=model.party_size,
            window=TimeWindow(
                start=_aware(model.booked_at),
                duration_minutes=model.duration_minutes,
            ),
            status=BookingStatus(model.status),
            created_at=_aware(model.created_at),
            special_requests=model.special_requests,
            accept_code=model.accept_code,
            decline_reason=model.decline_reason,
            updated_at=_aware(model.updated_at) if model.updated_at is not None else None,
        )
