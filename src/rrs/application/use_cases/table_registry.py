from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import uuid4

from rrs.application.auth import AuthContext
from rrs.application.dto.requests import CreateTableRequest, UpdateTableRequest
from rrs.application.dto.responses import TableListResponse, TableResponse
from rrs.application.errors import ForbiddenError, InvalidTableStatusError, ValidationError
from rrs.application.mappers.table_mapper import to_table_list_response, to_table_response
from rrs.application.metrics.booking_lifecycle import record_table_status_change
from rrs.application.ports.publisher import EventPublisher
from rrs.application.ports.repositories import StoreRepository, TableRepository
from rrs.application.use_cases.booking_events import publish_table_status
from rrs.application.use_cases.context import TraceContext
from rrs.application.use_cases.ownership import OwnershipGate
from rrs.domain.booking.entities import Violation
from rrs.domain.common.ids import StoreId, TableId
from rrs.domain.table.entities import (
    DEFAULT_CAPACITY,
    InvalidTableStatusValueError,
    Table,
    TableLocation,
    TableStatus,
    parse_table_status,
)

logger = logging.getLogger(__name__)


def _table_attributes(
    request_dto: CreateTableRequest | UpdateTableRequest,
) -> tuple[str, int, TableLocation]:
    violations: list[Violation] = []
    name = request_dto.name.strip()
    if not name:
        violations.append(Violation("name", "name is required"))
    capacity = request_dto.capacity if request_dto.capacity is not None else DEFAULT_CAPACITY
    if capacity < 1:
        violations.append(Violation("capacity", "capacity must be a positive integer"))
    location = TableLocation.INDOOR
    if request_dto.location is not None:
        try:
            location = TableLocation(request_dto.location)
        except ValueError:
            violations.append(Violation("location", "location must be 'in' or 'out'"))
    if violations:
        raise ValidationError(violations)
    return name, capacity, location


class CreateTable:
    def __init__(self, store_repository: StoreRepository, table_repository: TableRepository) -> None:
        self._table_repository = table_repository
        self._gate = OwnershipGate(store_repository, table_repository)

    def execute(
        self,
        store_id: StoreId,
        request_dto: CreateTableRequest,
        actor: AuthContext,
    ) -> TableResponse:
        self._gate.ensure_can_manage_store(actor, store_id)
        name, capacity, location = _table_attributes(request_dto)
        table = Table(
            table_id=TableId(f"tbl_{uuid4().hex[:12]}"),
            store_id=store_id,
            name=name,
            capacity=capacity,
            location=location,
            smoking_allowed=request_dto.smoking_allowed,
            status=TableStatus.AVAILABLE,
            is_active=True,
            created_at=datetime.now(timezone.utc),
        )
        self._table_repository.add(table)
        logger.info(
            "table_created",
            extra={"table_id": str(table.table_id), "store_id": str(store_id)},
        )
        return to_table_response(table)


class GetTable:
    def __init__(self, store_repository: StoreRepository, table_repository: TableRepository) -> None:
        self._gate = OwnershipGate(store_repository, table_repository)

    def execute(self, table_id: TableId) -> TableResponse:
        return to_table_response(self._gate.table(table_id))


class ListTables:
    def __init__(self, store_repository: StoreRepository, table_repository: TableRepository) -> None:
        self._table_repository = table_repository
        self._gate = OwnershipGate(store_repository, table_repository)

    def execute(
        self,
        store_id: StoreId,
        actor: AuthContext | None = None,
        *,
        include_inactive: bool = False,
    ) -> TableListResponse:
        if include_inactive:
            if actor is None:
                raise ForbiddenError("inactive tables are visible to store managers only")
            self._gate.ensure_can_manage_store(actor, store_id)
        else:
            self._gate.store(store_id)
        tables = self._table_repository.list_for_store(store_id, include_inactive=include_inactive)
        return to_table_list_response(tables)


class UpdateTable:
    def __init__(self, store_repository: StoreRepository, table_repository: TableRepository) -> None:
        self._table_repository = table_repository
        self._gate = OwnershipGate(store_repository, table_repository)

    def execute(
        self,
        table_id: TableId,
        request_dto: UpdateTableRequest,
        actor: AuthContext,
    ) -> TableResponse:
        table = self._gate.ensure_can_manage_table(actor, table_id)
        name, capacity, location = _table_attributes(request_dto)
        updated = Table(
            table_id=table.table_id,
            store_id=table.store_id,
            name=name,
            capacity=capacity,
            location=location,
            smoking_allowed=request_dto.smoking_allowed,
            status=table.status,
            is_active=request_dto.is_active if request_dto.is_active is not None else table.is_active,
            created_at=table.created_at,
            updated_at=datetime.now(timezone.utc),
        )
        self._table_repository.update(updated)
        return to_table_response(updated)


class SetTableStatus:
    def __init__(
        self,
        store_repository: StoreRepository,
        table_repository: TableRepository,
        publisher: EventPublisher,
    ) -> None:
        self._table_repository = table_repository
        self._publisher = publisher
        self._gate = OwnershipGate(store_repository, table_repository)

    def execute(
        self,
        table_id: TableId,
        status: str,
        actor: AuthContext,
        trace_ctx: TraceContext,
    ) -> TableResponse:
        try:
            new_status = parse_table_status(status)
        except InvalidTableStatusValueError as exc:
            raise InvalidTableStatusError([Violation("status", str(exc))]) from exc

        table = self._gate.ensure_can_manage_table(actor, table_id)
        now = datetime.now(timezone.utc)
        updated = table.with_status(new_status, now)
        if updated is table:
            return to_table_response(table)

        self._table_repository.set_status(table_id, new_status, now)
        record_table_status_change(new_status)
        publish_table_status(self._publisher, updated, now, trace_ctx)
        return to_table_response(updated)
