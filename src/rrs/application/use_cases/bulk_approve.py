from __future__ import annotations

import logging
from datetime import datetime, timezone

from rrs.application.auth import AuthContext
from rrs.application.dto.responses import BulkApproveResponse
from rrs.application.errors import ValidationError
from rrs.application.metrics.booking_lifecycle import record_bulk_approved, record_transition
from rrs.application.ports.publisher import EventPublisher
from rrs.application.ports.repositories import BookingRepository, StoreRepository, TableRepository
from rrs.application.use_cases.booking_events import publish_booking_event
from rrs.application.use_cases.context import TraceContext
from rrs.application.use_cases.ownership import OwnershipGate
from rrs.domain.booking.entities import BookingStatus, Violation
from rrs.domain.booking.events import BookingStatusChanged
from rrs.domain.common.ids import StoreId, TableId

logger = logging.getLogger(__name__)


class BulkApprove:
    """Approve every pending booking of a store or of one table.

    A single ``status = 'pending'`` conditional update decides the winners,
    so only the rows this call actually moved are reported.
    """

    def __init__(
        self,
        store_repository: StoreRepository,
        table_repository: TableRepository,
        booking_repository: BookingRepository,
        publisher: EventPublisher,
    ) -> None:
        self._booking_repository = booking_repository
        self._publisher = publisher
        self._gate = OwnershipGate(store_repository, table_repository)

    def execute(
        self,
        actor: AuthContext,
        trace_ctx: TraceContext,
        *,
        store_id: StoreId | None = None,
        table_id: TableId | None = None,
    ) -> BulkApproveResponse:
        if (store_id is None) == (table_id is None):
            raise ValidationError([Violation("scope", "exactly one of storeId or tableId is required")])

        if table_id is not None:
            scope_store_id = self._gate.ensure_can_manage_table(actor, table_id).store_id
        else:
            scope_store_id = self._gate.ensure_can_manage_store(actor, StoreId(str(store_id))).store_id

        now = datetime.now(timezone.utc)
        approved = self._booking_repository.approve_pending(
            store_id=store_id,
            table_id=table_id,
            now=now,
        )

        for booking in approved:
            record_transition(from_status=BookingStatus.PENDING, to_status=BookingStatus.APPROVED)
            publish_booking_event(
                self._publisher,
                BookingStatusChanged(
                    booking_id=booking.booking_id,
                    store_id=booking.store_id,
                    table_id=booking.table_id,
                    from_status=BookingStatus.PENDING,
                    to_status=BookingStatus.APPROVED,
                    actor_id=actor.user_id,
                    occurred_at=now,
                ),
                booking,
                trace_ctx,
            )
        record_bulk_approved(store_id=str(scope_store_id), count=len(approved))
        logger.info(
            "bookings_bulk_approved",
            extra={
                "store_id": str(scope_store_id),
                "table_id": str(table_id) if table_id else None,
                "count": len(approved),
            },
        )
        return BulkApproveResponse(
            approvedCount=len(approved),
            approvedIds=[str(booking.booking_id) for booking in approved],
        )
