from __future__ import annotations

from dataclasses import dataclass

from rrs.domain.common.ids import StoreId, UserId


@dataclass(frozen=True)
class Store:
    store_id: StoreId
    owner_id: UserId | None
    name: str
    is_active: bool = True
