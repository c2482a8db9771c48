from __future__ import annotations

from sqlalchemy import inspect
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from rrs.infrastructure.db.models.base import StoreModel
from rrs.infrastructure.db.models.table import TableModel
from rrs.infrastructure.db.session import get_engine

DEMO_STORE_ID = "str_001"
DEMO_OWNER_ID = "usr_owner_001"

DEMO_TABLES = [
    {"id": "tbl_001", "name": "Window 1", "capacity": 2, "location": "in", "smoking_allowed": False},
    {"id": "tbl_002", "name": "Window 2", "capacity": 4, "location": "in", "smoking_allowed": False},
    {"id": "tbl_003", "name": "Booth", "capacity": 6, "location": "in", "smoking_allowed": False},
    {"id": "tbl_004", "name": "Terrace", "capacity": 4, "location": "out", "smoking_allowed": True},
]


def main() -> None:
    engine = get_engine(timeout_seconds=2.0)
    inspector = inspect(engine)
    required_tables = {"stores", "tables", "bookings"}
    if not required_tables.issubset(set(inspector.get_table_names(schema="public"))):
        print("no schema yet")
        return

    with Session(engine) as session:
        session.execute(
            insert(StoreModel)
            .values(id=DEMO_STORE_ID, owner_id=DEMO_OWNER_ID, name="Harbour Bistro", is_active=True)
            .on_conflict_do_update(
                index_elements=[StoreModel.id],
                set_={"owner_id": DEMO_OWNER_ID, "name": "Harbour Bistro", "is_active": True},
            )
        )

        for table in DEMO_TABLES:
            values = {**table, "store_id": DEMO_STORE_ID, "status": "available", "is_active": True}
            session.execute(
                insert(TableModel)
                .values(**values)
                .on_conflict_do_update(
                    index_elements=[TableModel.id],
                    set_={key: value for key, value in values.items() if key != "id"},
                )
            )

        session.commit()
        print("seed complete")


if __name__ == "__main__":
    main()
