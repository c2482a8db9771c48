from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from fakes import (
    OWNER_ID,
    STORE_ID,
    STRANGER_ID,
    TRACE,
    FakePublisher,
    FakeStoreRepository,
    FakeTableRepository,
    make_table,
)
from rrs.application.auth import AuthContext, TrustedTestPrincipal
from rrs.application.dto.requests import CreateTableRequest, UpdateTableRequest
from rrs.application.errors import (
    ForbiddenError,
    InvalidTableStatusError,
    StoreNotFoundError,
    TableNotFoundError,
    ValidationError,
)
from rrs.application.use_cases.table_registry import (
    CreateTable,
    GetTable,
    ListTables,
    SetTableStatus,
    UpdateTable,
)
from rrs.domain.common.ids import StoreId, TableId
from rrs.domain.table.entities import TableStatus

OWNER = AuthContext(user_id=OWNER_ID)
STRANGER = AuthContext(user_id=STRANGER_ID)


def test_create_applies_defaults() -> None:
    tables = FakeTableRepository()

    response = CreateTable(FakeStoreRepository(), tables).execute(
        STORE_ID,
        CreateTableRequest(name="  Patio  "),
        OWNER,
    )

    assert response.name == "Patio"
    assert response.capacity == 4
    assert response.location == "in"
    assert response.status == "available"
    assert response.isActive is True
    assert TableId(response.tableId) in tables.tables


def test_create_reports_all_invalid_fields() -> None:
    with pytest.raises(ValidationError) as exc_info:
        CreateTable(FakeStoreRepository(), FakeTableRepository()).execute(
            STORE_ID,
            CreateTableRequest(name=" ", capacity=0, location="roof"),
            OWNER,
        )

    assert [v.field for v in exc_info.value.violations] == ["name", "capacity", "location"]


def test_create_requires_manager() -> None:
    with pytest.raises(ForbiddenError):
        CreateTable(FakeStoreRepository(), FakeTableRepository()).execute(
            STORE_ID, CreateTableRequest(name="Patio"), STRANGER
        )
    with pytest.raises(StoreNotFoundError):
        CreateTable(FakeStoreRepository(), FakeTableRepository()).execute(
            StoreId("str_missing"), CreateTableRequest(name="Patio"), OWNER
        )


def test_get_and_list_tables() -> None:
    tables = FakeTableRepository(
        [
            make_table("tbl_b", name="Booth"),
            make_table("tbl_a", name="Alcove"),
            make_table("tbl_c", name="Cellar", is_active=False),
        ]
    )
    stores = FakeStoreRepository()

    assert GetTable(stores, tables).execute(TableId("tbl_a")).name == "Alcove"
    with pytest.raises(TableNotFoundError):
        GetTable(stores, tables).execute(TableId("tbl_missing"))

    public = ListTables(stores, tables).execute(STORE_ID)
    assert [table.name for table in public.tables] == ["Alcove", "Booth"]

    everything = ListTables(stores, tables).execute(STORE_ID, OWNER, include_inactive=True)
    assert [table.name for table in everything.tables] == ["Alcove", "Booth", "Cellar"]

    with pytest.raises(ForbiddenError):
        ListTables(stores, tables).execute(STORE_ID, None, include_inactive=True)


def test_update_keeps_status_and_can_deactivate() -> None:
    tables = FakeTableRepository([make_table("tbl_001", status=TableStatus.RESERVED)])

    response = UpdateTable(FakeStoreRepository(), tables).execute(
        TableId("tbl_001"),
        UpdateTableRequest(name="Window", capacity=6, location="out", isActive=False),
        OWNER,
    )

    assert response.status == "reserved"
    assert response.capacity == 6
    assert response.location == "out"
    assert response.isActive is False
    assert response.updatedAt is not None


def test_set_status_publishes_change() -> None:
    tables = FakeTableRepository([make_table("tbl_001")])
    publisher = FakePublisher()
    use_case = SetTableStatus(FakeStoreRepository(), tables, publisher)

    response = use_case.execute(TableId("tbl_001"), "occupied", TrustedTestPrincipal(), TRACE)

    assert response.status == "occupied"
    assert tables.get(TableId("tbl_001")).status == TableStatus.OCCUPIED
    assert json.loads(publisher.messages[0][1])["payload"]["status"] == "occupied"

    use_case.execute(TableId("tbl_001"), "occupied", OWNER, TRACE)
    assert len(publisher.messages) == 1


def test_set_status_rejects_unknown_value() -> None:
    tables = FakeTableRepository([make_table("tbl_001")])

    with pytest.raises(InvalidTableStatusError) as exc_info:
        SetTableStatus(FakeStoreRepository(), tables, FakePublisher()).execute(
            TableId("tbl_001"), "dirty", OWNER, TRACE
        )

    assert exc_info.value.code == "INVALID_TABLE_STATUS"
    assert tables.status_calls == []
