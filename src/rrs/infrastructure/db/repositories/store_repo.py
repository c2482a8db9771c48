from __future__ import annotations

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from rrs.application.ports.repositories import StoreRepository
from rrs.domain.common.ids import StoreId, UserId
from rrs.domain.store.entities import Store
from rrs.infrastructure.db.models.base import StoreModel
from rrs.infrastructure.db.session import get_engine, storage_errors


class SqlAlchemyStoreRepository(StoreRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def get(self, store_id: StoreId) -> Store | None:
        statement = select(StoreModel).where(StoreModel.id == str(store_id)).limit(1)
        with storage_errors("store lookup"), Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()

        if model is None:
            return None
        return Store(
            store_id=StoreId(model.id),
            owner_id=UserId(model.owner_id) if model.owner_id is not None else None,
            name=model.name,
            is_active=model.is_active,
        )
