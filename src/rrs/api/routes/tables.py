from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query, status

from rrs.api.auth import optional_actor, require_actor
from rrs.api.dependencies import (
    create_table_use_case,
    delete_table_use_case,
    get_table_use_case,
    list_available_tables_use_case,
    list_tables_use_case,
    set_table_status_use_case,
    trace_context,
    update_table_use_case,
)
from rrs.application.auth import AuthContext
from rrs.application.dto.requests import (
    CreateTableRequest,
    SetTableStatusRequest,
    UpdateTableRequest,
)
from rrs.application.dto.responses import (
    TableDeletionResponse,
    TableListResponse,
    TableResponse,
)
from rrs.application.use_cases.availability import ListAvailableTables
from rrs.application.use_cases.context import TraceContext
from rrs.application.use_cases.delete_table import DeleteTable
from rrs.application.use_cases.table_registry import (
    CreateTable,
    GetTable,
    ListTables,
    SetTableStatus,
    UpdateTable,
)
from rrs.domain.common.ids import StoreId, TableId

router = APIRouter()


@router.post(
    "/v1/stores/{store_id}/tables",
    response_model=TableResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_table(
    store_id: str,
    request_dto: CreateTableRequest,
    actor: AuthContext = Depends(require_actor),
    use_case: CreateTable = Depends(create_table_use_case),
) -> TableResponse:
    return use_case.execute(store_id=StoreId(store_id), request_dto=request_dto, actor=actor)


@router.get("/v1/stores/{store_id}/tables", response_model=TableListResponse)
def list_tables(
    store_id: str,
    include_inactive: bool = Query(default=False, alias="includeInactive"),
    actor: AuthContext | None = Depends(optional_actor),
    use_case: ListTables = Depends(list_tables_use_case),
) -> TableListResponse:
    return use_case.execute(StoreId(store_id), actor, include_inactive=include_inactive)


@router.get("/v1/stores/{store_id}/tables/available", response_model=TableListResponse)
def list_available_tables(
    store_id: str,
    at: datetime = Query(),
    duration_minutes: int | None = Query(default=None, alias="durationMinutes"),
    party_size: int | None = Query(default=None, alias="partySize"),
    use_case: ListAvailableTables = Depends(list_available_tables_use_case),
) -> TableListResponse:
    return use_case.execute(
        store_id=StoreId(store_id),
        at=at,
        duration_minutes=duration_minutes,
        party_size=party_size,
    )


@router.get("/v1/tables/{table_id}", response_model=TableResponse)
def get_table(
    table_id: str,
    use_case: GetTable = Depends(get_table_use_case),
) -> TableResponse:
    return use_case.execute(table_id=TableId(table_id))


@router.put("/v1/tables/{table_id}", response_model=TableResponse)
def update_table(
    table_id: str,
    request_dto: UpdateTableRequest,
    actor: AuthContext = Depends(require_actor),
    use_case: UpdateTable = Depends(update_table_use_case),
) -> TableResponse:
    return use_case.execute(table_id=TableId(table_id), request_dto=request_dto, actor=actor)


@router.put("/v1/tables/{table_id}/status", response_model=TableResponse)
def set_table_status(
    table_id: str,
    request_dto: SetTableStatusRequest,
    actor: AuthContext = Depends(require_actor),
    use_case: SetTableStatus = Depends(set_table_status_use_case),
    trace_ctx: TraceContext = Depends(trace_context),
) -> TableResponse:
    return use_case.execute(
        table_id=TableId(table_id),
        status=request_dto.status,
        actor=actor,
        trace_ctx=trace_ctx,
    )


@router.delete("/v1/tables/{table_id}", response_model=TableDeletionResponse)
def delete_table(
    table_id: str,
    actor: AuthContext = Depends(require_actor),
    use_case: DeleteTable = Depends(delete_table_use_case),
) -> TableDeletionResponse:
    return use_case.execute(table_id=TableId(table_id), actor=actor)
