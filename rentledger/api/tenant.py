"""Public and tenant endpoints: PIN login, current period, own bill, evidence upload."""

import logging

from fastapi import APIRouter, Depends, File, UploadFile

from rentledger.api.dependencies import (
    get_repository,
    get_state,
    require_tenant,
    valid_period,
)
from rentledger.api.errors import reading_not_found, to_http_exception
from rentledger.api.schemas import (
    AuthResponse,
    BillResponse,
    MeterValueRequest,
    PeriodResponse,
    PinRequest,
    TenantBillResponse,
)
from rentledger.schemas.ledger import Room
from rentledger.services.auth_service import verify_admin_pin, verify_room_pin
from rentledger.services.errors import LedgerError
from rentledger.services.evidence_service import upload_to_data_uri
from rentledger.services.period_service import current_period, next_period, previous_period
from rentledger.services.reading_service import Meter
from rentledger.services.state_service import LedgerState, StateRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["tenant"])


def _tenant_bill(state: LedgerState, room: Room, period: str) -> TenantBillResponse:
    return TenantBillResponse(
        period=period,
        bill=BillResponse.build(room, state.ledger.get(room.id, period), state.settings.rates),
        payment_qr_code=state.settings.payment_qr_code,
        payment_description=state.settings.payment_description,
    )


@router.get("/periods/current", response_model=PeriodResponse)
async def get_current_period() -> PeriodResponse:
    period = current_period()
    return PeriodResponse(period=period, previous=previous_period(period), next=next_period(period))


@router.post("/auth/admin", response_model=AuthResponse)
async def login_admin(body: PinRequest, state: LedgerState = Depends(get_state)) -> AuthResponse:  # noqa: B008
    """Check the admin PIN. A mismatch is a rejected attempt (401), nothing more."""
    try:
        verify_admin_pin(state.settings, body.pin)
    except LedgerError as e:
        raise to_http_exception(e) from e
    return AuthResponse()


@router.post("/auth/rooms/{room_id}", response_model=AuthResponse)
async def login_room(
    room_id: str,
    body: PinRequest,
    state: LedgerState = Depends(get_state),  # noqa: B008
) -> AuthResponse:
    try:
        room = verify_room_pin(state.rooms, room_id, body.pin)
    except LedgerError as e:
        raise to_http_exception(e) from e
    return AuthResponse(room_id=room.id, room_name=room.name)


@router.get("/tenant/{room_id}/periods/{period}", response_model=TenantBillResponse)
async def get_tenant_bill(
    period: str = Depends(valid_period),  # noqa: B008
    room: Room = Depends(require_tenant),  # noqa: B008
    state: LedgerState = Depends(get_state),  # noqa: B008
    repository: StateRepository = Depends(get_repository),  # noqa: B008
) -> TenantBillResponse:
    """The tenant's bill for a period, opening the period if needed."""
    if state.activate_period(period):
        await repository.save(state)
    return _tenant_bill(state, room, period)


@router.put("/tenant/{room_id}/periods/{period}/meters/{meter}", response_model=TenantBillResponse)
async def set_tenant_meter(
    meter: Meter,
    body: MeterValueRequest,
    period: str = Depends(valid_period),  # noqa: B008
    room: Room = Depends(require_tenant),  # noqa: B008
    state: LedgerState = Depends(get_state),  # noqa: B008
    repository: StateRepository = Depends(get_repository),  # noqa: B008
) -> TenantBillResponse:
    """Tenant self-reports an ending meter value."""
    try:
        state.activate_period(period)
        reading = state.reading_service.set_meter_reading(room.id, period, meter, body.value)
    except LedgerError as e:
        raise to_http_exception(e) from e
    if reading is None:
        raise reading_not_found(room.id, period)
    await repository.save(state)
    return _tenant_bill(state, room, period)


@router.post("/tenant/{room_id}/periods/{period}/receipt", response_model=TenantBillResponse)
async def upload_receipt(
    file: UploadFile = File(...),  # noqa: B008
    period: str = Depends(valid_period),  # noqa: B008
    room: Room = Depends(require_tenant),  # noqa: B008
    state: LedgerState = Depends(get_state),  # noqa: B008
    repository: StateRepository = Depends(get_repository),  # noqa: B008
) -> TenantBillResponse:
    """Attach a proof-of-payment image to the tenant's reading."""
    try:
        data_uri = await upload_to_data_uri(file)
        state.activate_period(period)
        reading = state.reading_service.set_receipt_evidence(room.id, period, data_uri)
    except LedgerError as e:
        raise to_http_exception(e) from e
    if reading is None:
        raise reading_not_found(room.id, period)
    await repository.save(state)
    logger.info("Receipt uploaded: room=%s period=%s", room.id, period)
    return _tenant_bill(state, room, period)


@router.delete("/tenant/{room_id}/periods/{period}/receipt", response_model=TenantBillResponse)
async def clear_receipt(
    period: str = Depends(valid_period),  # noqa: B008
    room: Room = Depends(require_tenant),  # noqa: B008
    state: LedgerState = Depends(get_state),  # noqa: B008
    repository: StateRepository = Depends(get_repository),  # noqa: B008
) -> TenantBillResponse:
    """Withdraw uploaded evidence."""
    state.activate_period(period)
    reading = state.reading_service.clear_receipt_evidence(room.id, period)
    if reading is None:
        raise reading_not_found(room.id, period)
    await repository.save(state)
    return _tenant_bill(state, room, period)


__all__ = ["router"]
