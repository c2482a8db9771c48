from __future__ import annotations

from fastapi import APIRouter, Body, Depends, Query, Response, status

from rrs.api.auth import optional_actor, require_actor
from rrs.api.dependencies import (
    approve_booking_use_case,
    assign_table_use_case,
    bulk_approve_use_case,
    cancel_booking_use_case,
    decline_booking_use_case,
    delete_booking_use_case,
    get_booking_use_case,
    list_bookings_use_case,
    list_my_bookings_use_case,
    list_pending_bookings_use_case,
    request_booking_use_case,
    trace_context,
)
from rrs.application.auth import AuthContext
from rrs.application.dto.requests import (
    AssignTableRequest,
    DeclineBookingRequest,
    RequestBookingRequest,
)
from rrs.application.dto.responses import (
    BookingListResponse,
    BookingResponse,
    BulkApproveResponse,
)
from rrs.application.use_cases.approve_booking import ApproveBooking
from rrs.application.use_cases.assign_table import AssignTable
from rrs.application.use_cases.booking_queries import (
    GetBooking,
    ListBookings,
    ListMyBookings,
    ListPendingBookings,
)
from rrs.application.use_cases.bulk_approve import BulkApprove
from rrs.application.use_cases.cancel_booking import CancelBooking
from rrs.application.use_cases.context import TraceContext
from rrs.application.use_cases.decline_booking import DeclineBooking
from rrs.application.use_cases.delete_booking import DeleteBooking
from rrs.application.use_cases.request_booking import RequestBooking
from rrs.domain.common.ids import BookingId, StoreId, TableId

router = APIRouter()


@router.post("/v1/bookings", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def request_booking(
    request_dto: RequestBookingRequest,
    actor: AuthContext | None = Depends(optional_actor),
    use_case: RequestBooking = Depends(request_booking_use_case),
    trace_ctx: TraceContext = Depends(trace_context),
) -> BookingResponse:
    return use_case.execute(request_dto=request_dto, actor=actor, trace_ctx=trace_ctx)


@router.get("/v1/bookings", response_model=BookingListResponse)
def list_my_bookings(
    actor: AuthContext = Depends(require_actor),
    use_case: ListMyBookings = Depends(list_my_bookings_use_case),
) -> BookingListResponse:
    return use_case.execute(actor=actor)


@router.get("/v1/bookings/{booking_id}", response_model=BookingResponse)
def get_booking(
    booking_id: str,
    actor: AuthContext = Depends(require_actor),
    use_case: GetBooking = Depends(get_booking_use_case),
) -> BookingResponse:
    return use_case.execute(booking_id=BookingId(booking_id), actor=actor)


@router.delete("/v1/bookings/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_booking(
    booking_id: str,
    actor: AuthContext = Depends(require_actor),
    use_case: DeleteBooking = Depends(delete_booking_use_case),
) -> Response:
    use_case.execute(booking_id=BookingId(booking_id), actor=actor)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/v1/bookings/{booking_id}/approve", response_model=BookingResponse)
def approve_booking(
    booking_id: str,
    actor: AuthContext = Depends(require_actor),
    use_case: ApproveBooking = Depends(approve_booking_use_case),
    trace_ctx: TraceContext = Depends(trace_context),
) -> BookingResponse:
    return use_case.execute(booking_id=BookingId(booking_id), actor=actor, trace_ctx=trace_ctx)


@router.post("/v1/bookings/{booking_id}/decline", response_model=BookingResponse)
def decline_booking(
    booking_id: str,
    request_dto: DeclineBookingRequest | None = Body(default=None),
    actor: AuthContext = Depends(require_actor),
    use_case: DeclineBooking = Depends(decline_booking_use_case),
    trace_ctx: TraceContext = Depends(trace_context),
) -> BookingResponse:
    return use_case.execute(
        booking_id=BookingId(booking_id),
        actor=actor,
        trace_ctx=trace_ctx,
        reason=request_dto.reason if request_dto is not None else None,
    )


@router.post("/v1/bookings/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(
    booking_id: str,
    actor: AuthContext = Depends(require_actor),
    use_case: CancelBooking = Depends(cancel_booking_use_case),
    trace_ctx: TraceContext = Depends(trace_context),
) -> BookingResponse:
    return use_case.execute(booking_id=BookingId(booking_id), actor=actor, trace_ctx=trace_ctx)


@router.post("/v1/bookings/{booking_id}/assign-table", response_model=BookingResponse)
def assign_table(
    booking_id: str,
    request_dto: AssignTableRequest,
    actor: AuthContext = Depends(require_actor),
    use_case: AssignTable = Depends(assign_table_use_case),
    trace_ctx: TraceContext = Depends(trace_context),
) -> BookingResponse:
    return use_case.execute(
        booking_id=BookingId(booking_id),
        table_id=TableId(request_dto.table_id),
        actor=actor,
        trace_ctx=trace_ctx,
    )


@router.post(
    "/v1/stores/{store_id}/bookings/approve-pending",
    response_model=BulkApproveResponse,
)
def approve_pending_for_store(
    store_id: str,
    actor: AuthContext = Depends(require_actor),
    use_case: BulkApprove = Depends(bulk_approve_use_case),
    trace_ctx: TraceContext = Depends(trace_context),
) -> BulkApproveResponse:
    return use_case.execute(actor, trace_ctx, store_id=StoreId(store_id))


@router.post(
    "/v1/tables/{table_id}/bookings/approve-pending",
    response_model=BulkApproveResponse,
)
def approve_pending_for_table(
    table_id: str,
    actor: AuthContext = Depends(require_actor),
    use_case: BulkApprove = Depends(bulk_approve_use_case),
    trace_ctx: TraceContext = Depends(trace_context),
) -> BulkApproveResponse:
    return use_case.execute(actor, trace_ctx, table_id=TableId(table_id))


@router.get("/v1/stores/{store_id}/bookings/pending", response_model=BookingListResponse)
def list_pending_for_store(
    store_id: str,
    actor: AuthContext = Depends(require_actor),
    use_case: ListPendingBookings = Depends(list_pending_bookings_use_case),
) -> BookingListResponse:
    return use_case.execute(actor, store_id=StoreId(store_id))


@router.get("/v1/tables/{table_id}/bookings/pending", response_model=BookingListResponse)
def list_pending_for_table(
    table_id: str,
    actor: AuthContext = Depends(require_actor),
    use_case: ListPendingBookings = Depends(list_pending_bookings_use_case),
) -> BookingListResponse:
    return use_case.execute(actor, table_id=TableId(table_id))


@router.get("/v1/stores/{store_id}/bookings", response_model=BookingListResponse)
def list_store_bookings(
    store_id: str,
    status_filter: str = Query(default="ALL", alias="status"),
    actor: AuthContext = Depends(require_actor),
    use_case: ListBookings = Depends(list_bookings_use_case),
) -> BookingListResponse:
    return use_case.execute(actor, store_id=StoreId(store_id), status=status_filter)


@router.get("/v1/tables/{table_id}/bookings", response_model=BookingListResponse)
def list_table_bookings(
    table_id: str,
    status_filter: str = Query(default="ALL", alias="status"),
    actor: AuthContext = Depends(require_actor),
    use_case: ListBookings = Depends(list_bookings_use_case),
) -> BookingListResponse:
    return use_case.execute(actor, table_id=TableId(table_id), status=status_filter)
