from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


def _to_camel(value: str) -> str:
    parts = value.split("_")
    return parts[0] + "".join(part.capitalize() for part in parts[1:])


class CamelBaseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,
    )


class CustomerRequest(CamelBaseModel):
    name: str = ""
    email: str | None = None
    phone: str | None = None


class RequestBookingRequest(CamelBaseModel):
    table_id: str | None = None
    store_id: str | None = None
    booked_at: datetime
    duration_minutes: int | None = None
    customer: CustomerRequest
    party_size: int
    special_requests: str | None = None


class DeclineBookingRequest(CamelBaseModel):
    reason: str | None = None


class AssignTableRequest(CamelBaseModel):
    table_id: str


class CreateTableRequest(CamelBaseModel):
    name: str
    capacity: int | None = None
    location: str | None = None
    smoking_allowed: bool = False


class UpdateTableRequest(CamelBaseModel):
    name: str
    capacity: int | None = None
    location: str | None = None
    smoking_allowed: bool = False
    is_active: bool | None = None


class SetTableStatusRequest(CamelBaseModel):
    status: str
