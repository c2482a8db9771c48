from __future__ import annotations

from rrs.application.dto.responses import TableListResponse, TableResponse
from rrs.domain.table.entities import Table


def to_table_response(table: Table) -> TableResponse:
    return TableResponse(
        tableId=str(table.table_id),
        storeId=str(table.store_id),
        name=table.name,
        capacity=table.capacity,
        location=table.location.value,
        smokingAllowed=table.smoking_allowed,
        status=table.status.value,
        isActive=table.is_active,
        createdAt=table.created_at,
        updatedAt=table.updated_at,
    )


def to_table_list_response(tables: list[Table]) -> TableListResponse:
    return TableListResponse(tables=[to_table_response(table) for table in tables])
