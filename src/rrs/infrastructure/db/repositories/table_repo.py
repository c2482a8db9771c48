from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Engine, delete, select, update
from sqlalchemy.orm import Session

from rrs.application.errors import TableNotFoundError
from rrs.application.ports.repositories import TableRepository
from rrs.domain.common.ids import StoreId, TableId
from rrs.domain.table.entities import Table, TableLocation, TableStatus
from rrs.infrastructure.db.models.table import TableModel
from rrs.infrastructure.db.session import get_engine, storage_errors


def _aware(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SqlAlchemyTableRepository(TableRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def add(self, table: Table) -> None:
        with storage_errors("table insert"), Session(self._engine) as session:
            session.add(self._to_model(table))
            session.commit()

    def get(self, table_id: TableId) -> Table | None:
        statement = select(TableModel).where(TableModel.id == str(table_id))
        with storage_errors("table lookup"), Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()

        if model is None:
            return None
        return self._to_domain(model)

    def list_for_store(self, store_id: StoreId, include_inactive: bool = False) -> list[Table]:
        statement = select(TableModel).where(TableModel.store_id == str(store_id))
        if not include_inactive:
            statement = statement.where(TableModel.is_active.is_(True))
        statement = statement.order_by(TableModel.name, TableModel.id)

        with storage_errors("table listing"), Session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
        return [self._to_domain(model) for model in models]

    def update(self, table: Table) -> None:
        statement = (
            update(TableModel)
            .where(TableModel.id == str(table.table_id))
            .values(
                name=table.name,
                capacity=table.capacity,
                location=table.location.value,
                smoking_allowed=table.smoking_allowed,
                is_active=table.is_active,
                updated_at=table.updated_at,
            )
        )
        self._execute_for_one(statement, table.table_id, "table update")

    def set_status(self, table_id: TableId, status: TableStatus, now: datetime) -> None:
        statement = (
            update(TableModel)
            .where(TableModel.id == str(table_id))
            .values(status=status.value, updated_at=now)
        )
        self._execute_for_one(statement, table_id, "table status update")

    def delete(self, table_id: TableId) -> None:
        statement = delete(TableModel).where(TableModel.id == str(table_id))
        self._execute_for_one(statement, table_id, "table delete")

    def _execute_for_one(self, statement, table_id: TableId, operation: str) -> None:
        with storage_errors(operation), Session(self._engine) as session:
            result = session.execute(statement)
            if result.rowcount != 1:
                session.rollback()
                raise TableNotFoundError(f"table {table_id} not found")
            session.commit()

    def _to_model(self, table: Table) -> TableModel:
        return TableModel(
            id=str(table.table_id),
            store_id=str(table.store_id),
            name=table.name,
            capacity=table.capacity,
            location=table.location.value,
            smoking_allowed=table.smoking_allowed,
            status=table.status.value,
            is_active=table.is_active,
            created_at=table.created_at,
            updated_at=table.updated_at,
        )

    def _to_domain(self, model: TableModel) -> Table:
        return Table(
            table_id=TableId(model.id),
            store_id=StoreId(model.store_id),
            name=model.name,
            capacity=model.capacity,
            location=TableLocation(model.location),
            smoking_allowed=model.smoking_allowed,
            status=TableStatus(model.status),
            is_active=model.is_active,
            created_at=_aware(model.created_at) or datetime.now(timezone.utc),
            updated_at=_aware(model.updated_at),
        )
