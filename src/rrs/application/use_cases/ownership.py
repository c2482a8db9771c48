from __future__ import annotations

from rrs.application.auth import AuthContext
from rrs.application.errors import ForbiddenError, StoreNotFoundError, TableNotFoundError
from rrs.application.ports.repositories import StoreRepository, TableRepository
from rrs.domain.booking.entities import Booking
from rrs.domain.common.ids import StoreId, TableId
from rrs.domain.store.entities import Store
from rrs.domain.table.entities import Table


def can_manage(actor: AuthContext, store: Store) -> bool:
    if actor.is_admin:
        return True
    return store.owner_id is not None and actor.user_id == store.owner_id


def is_requester(actor: AuthContext, booking: Booking) -> bool:
    return booking.user_id is not None and actor.user_id == booking.user_id


class OwnershipGate:
    """Decides who may manage a store's tables and bookings."""

    def __init__(
        self,
        store_repository: StoreRepository,
        table_repository: TableRepository,
    ) -> None:
        self._store_repository = store_repository
        self._table_repository = table_repository

    def store(self, store_id: StoreId) -> Store:
        store = self._store_repository.get(store_id)
        if store is None:
            raise StoreNotFoundError(f"store {store_id} not found")
        return store

    def table(self, table_id: TableId) -> Table:
        table = self._table_repository.get(table_id)
        if table is None:
            raise TableNotFoundError(f"table {table_id} not found")
        return table

    def can_manage_store(self, actor: AuthContext, store_id: StoreId) -> bool:
        return can_manage(actor, self.store(store_id))

    def can_manage_table(self, actor: AuthContext, table_id: TableId) -> bool:
        return can_manage(actor, self.store(self.table(table_id).store_id))

    def ensure_can_manage_store(self, actor: AuthContext, store_id: StoreId) -> Store:
        store = self.store(store_id)
        if not can_manage(actor, store):
            raise ForbiddenError(f"user {actor.user_id} cannot manage store {store_id}")
        return store

    def ensure_can_manage_table(self, actor: AuthContext, table_id: TableId) -> Table:
        table = self.table(table_id)
        self.ensure_can_manage_store(actor, table.store_id)
        return table

    def ensure_can_manage_booking(self, actor: AuthContext, booking: Booking) -> Store:
        store = self.store(booking.store_id)
        if not can_manage(actor, store):
            raise ForbiddenError(
                f"user {actor.user_id} cannot manage booking {booking.booking_id}"
            )
        return store

    def ensure_can_view_booking(self, actor: AuthContext, booking: Booking) -> None:
        if is_requester(actor, booking):
            return
        self.ensure_can_manage_booking(actor, booking)
