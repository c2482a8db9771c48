from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class CustomerResponse(BaseModel):
    name: str
    email: str | None = None
    phone: str | None = None


class BookingResponse(BaseModel):
    bookingId: str
    storeId: str
    tableId: str | None = None
    userId: str | None = None
    customer: CustomerResponse
    partySize: int
    bookedAt: datetime
    endsAt: datetime
    durationMinutes: int
    status: str
    approved: bool
    specialRequests: str | None = None
    acceptCode: str | None = None
    declineReason: str | None = None
    createdAt: datetime
    updatedAt: datetime | None = None


class BookingListResponse(BaseModel):
    bookings: list[BookingResponse] = Field(default_factory=list)


class BulkApproveResponse(BaseModel):
    approvedCount: int
    approvedIds: list[str] = Field(default_factory=list)


class TableResponse(BaseModel):
    tableId: str
    storeId: str
    name: str
    capacity: int
    location: str
    smokingAllowed: bool
    status: str
    isActive: bool
    createdAt: datetime
    updatedAt: datetime | None = None


class TableListResponse(BaseModel):
    tables: list[TableResponse] = Field(default_factory=list)


class TableDeletionResponse(BaseModel):
    tableId: str
    bookingsDeleted: int
