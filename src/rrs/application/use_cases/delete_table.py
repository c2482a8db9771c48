from __future__ import annotations

import logging

from rrs.application.auth import AuthContext
from rrs.application.dto.responses import TableDeletionResponse
from rrs.application.errors import InfrastructureError, TableDeletionIncompleteError
from rrs.application.ports.repositories import BookingRepository, StoreRepository, TableRepository
from rrs.application.use_cases.ownership import OwnershipGate
from rrs.domain.common.ids import TableId

logger = logging.getLogger(__name__)


class DeleteTable:
    """Remove a table and its bookings. Destructive and irreversible.

    Steps run in order (bookings, then the table row). A failure after the
    bookings are gone is reported as a partial deletion rather than hidden.
    """

    def __init__(
        self,
        store_repository: StoreRepository,
        table_repository: TableRepository,
        booking_repository: BookingRepository,
    ) -> None:
        self._table_repository = table_repository
        self._booking_repository = booking_repository
        self._gate = OwnershipGate(store_repository, table_repository)

    def execute(self, table_id: TableId, actor: AuthContext) -> TableDeletionResponse:
        self._gate.ensure_can_manage_table(actor, table_id)

        bookings_deleted = self._booking_repository.delete_for_table(table_id)
        try:
            self._table_repository.delete(table_id)
        except InfrastructureError as exc:
            logger.error(
                "table_deletion_incomplete",
                extra={"table_id": str(table_id), "count": bookings_deleted},
            )
            raise TableDeletionIncompleteError(
                f"bookings of table {table_id} were deleted but the table was not",
                details={
                    "tableId": str(table_id),
                    "bookingsDeleted": bookings_deleted,
                    "tableDeleted": False,
                },
            ) from exc

        logger.info(
            "table_deleted",
            extra={"table_id": str(table_id), "count": bookings_deleted},
        )
        return TableDeletionResponse(tableId=str(table_id), bookingsDeleted=bookings_deleted)
