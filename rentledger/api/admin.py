"""Admin endpoints: bills, meter entry, payments, export, analysis, settings."""

import logging
import time

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import Response

from rentledger.api.dependencies import (
    get_analysis_service,
    get_repository,
    require_admin,
    valid_period,
)
from rentledger.api.errors import reading_not_found, to_http_exception
from rentledger.api.schemas import (
    AmountRequest,
    AnalysisResponse,
    BillResponse,
    BillsResponse,
    MeterValueRequest,
    PaidRequest,
    RoomResponse,
    RoomUpdateRequest,
    SettingsResponse,
    SettingsUpdateRequest,
    SummaryResponse,
)
from rentledger.schemas.ledger import Reading, Room
from rentledger.services.analysis_service import AnalysisResult, AnalysisService
from rentledger.services.errors import LedgerError
from rentledger.services.evidence_service import upload_to_data_uri
from rentledger.services.export_service import export_filename, export_period_csv
from rentledger.services.reading_service import Meter
from rentledger.services.settings_service import SettingsService
from rentledger.services.state_service import LedgerState, StateRepository
from rentledger.services.summary_service import summarize_period

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["admin"])


def _bill_for(state: LedgerState, room_id: str, period: str) -> BillResponse:
    room = state.get_room(room_id)
    return BillResponse.build(room, state.ledger.get(room_id, period), state.settings.rates)


@router.get("/periods/{period}/bills", response_model=BillsResponse)
async def get_bills(
    period: str = Depends(valid_period),  # noqa: B008
    state: LedgerState = Depends(require_admin),  # noqa: B008
    repository: StateRepository = Depends(get_repository),  # noqa: B008
) -> BillsResponse:
    """Select ``period`` as active, opening it for every room, and list its bills."""
    start_time = time.time()
    created = state.activate_period(period)
    if created:
        await repository.save(state)

    readings = state.ledger.readings_for_period(period)
    rates = state.settings.rates
    bills = [BillResponse.build(room, state.ledger.get(room.id, period), rates) for room in state.rooms]
    summary = summarize_period(state.rooms, readings, rates)

    logger.debug(
        "admin.bills: period=%s rooms=%d created=%d duration_ms=%d",
        period,
        len(bills),
        len(created),
        int((time.time() - start_time) * 1000),
    )
    return BillsResponse(
        period=period,
        bills=bills,
        summary=SummaryResponse.from_summary(period, summary),
    )


@router.get("/periods/{period}/summary", response_model=SummaryResponse)
async def get_summary(
    period: str = Depends(valid_period),  # noqa: B008
    state: LedgerState = Depends(require_admin),  # noqa: B008
) -> SummaryResponse:
    """Expected vs collected revenue; rooms without a reading count as zero."""
    summary = summarize_period(
        state.rooms,
        state.ledger.readings_for_period(period),
        state.settings.rates,
    )
    return SummaryResponse.from_summary(period, summary)


@router.get("/periods/{period}/export")
async def export_bills(
    period: str = Depends(valid_period),  # noqa: B008
    state: LedgerState = Depends(require_admin),  # noqa: B008
) -> Response:
    """Download the period's bills as CSV (UTF-8 with BOM)."""
    content = export_period_csv(
        state.rooms,
        state.ledger.readings_for_period(period),
        state.settings.rates,
    )
    return Response(
        content=content.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(period)}"'},
    )


@router.post("/periods/{period}/analysis", response_model=AnalysisResponse)
async def run_analysis(
    period: str = Depends(valid_period),  # noqa: B008
    state: LedgerState = Depends(require_admin),  # noqa: B008
    analysis_service: AnalysisService = Depends(get_analysis_service),  # noqa: B008
) -> AnalysisResponse:
    """Run AI analysis for a period. Never fails because of the model call."""
    rooms = list(state.rooms)
    readings = state.ledger.readings_for_period(period)
    text = await analysis_service.summarize(rooms, readings, period)
    # Last writer wins; the ledger itself is never touched here
    state.analysis = AnalysisResult(period=period, text=text)
    return AnalysisResponse(period=period, text=text)


@router.get("/analysis", response_model=AnalysisResponse)
async def get_analysis(state: LedgerState = Depends(require_admin)) -> AnalysisResponse:  # noqa: B008
    if state.analysis is None:
        return AnalysisResponse(period=None, text=None)
    return AnalysisResponse(period=state.analysis.period, text=state.analysis.text)


@router.delete("/analysis", response_model=AnalysisResponse)
async def clear_analysis(state: LedgerState = Depends(require_admin)) -> AnalysisResponse:  # noqa: B008
    state.analysis = None
    return AnalysisResponse(period=None, text=None)


@router.put("/periods/{period}/rooms/{room_id}/meters/{meter}", response_model=BillResponse)
async def set_meter(
    room_id: str,
    meter: Meter,
    body: MeterValueRequest,
    period: str = Depends(valid_period),  # noqa: B008
    state: LedgerState = Depends(require_admin),  # noqa: B008
    repository: StateRepository = Depends(get_repository),  # noqa: B008
) -> BillResponse:
    """Enter an ending meter value; it becomes next period's starting value if opened."""
    try:
        state.get_room(room_id)
        state.activate_period(period)
        reading = state.reading_service.set_meter_reading(room_id, period, meter, body.value)
    except LedgerError as e:
        raise to_http_exception(e) from e
    if reading is None:
        raise reading_not_found(room_id, period)
    await repository.save(state)
    return _bill_for(state, room_id, period)


@router.put("/periods/{period}/rooms/{room_id}/other-fees", response_model=BillResponse)
async def set_other_fees(
    room_id: str,
    body: AmountRequest,
    period: str = Depends(valid_period),  # noqa: B008
    state: LedgerState = Depends(require_admin),  # noqa: B008
    repository: StateRepository = Depends(get_repository),  # noqa: B008
) -> BillResponse:
    try:
        state.get_room(room_id)
        state.activate_period(period)
        reading = state.reading_service.set_other_fees(room_id, period, body.amount)
    except LedgerError as e:
        raise to_http_exception(e) from e
    if reading is None:
        raise reading_not_found(room_id, period)
    await repository.save(state)
    return _bill_for(state, room_id, period)


@router.put("/periods/{period}/rooms/{room_id}/paid", response_model=BillResponse)
async def set_paid(
    room_id: str,
    body: PaidRequest,
    period: str = Depends(valid_period),  # noqa: B008
    state: LedgerState = Depends(require_admin),  # noqa: B008
    repository: StateRepository = Depends(get_repository),  # noqa: B008
) -> BillResponse:
    """Confirm (or revoke) payment for a room's bill."""
    try:
        state.get_room(room_id)
        state.activate_period(period)
        reading = state.reading_service.set_paid(room_id, period, body.paid)
    except LedgerError as e:
        raise to_http_exception(e) from e
    if reading is None:
        raise reading_not_found(room_id, period)
    await repository.save(state)
    return _bill_for(state, room_id, period)


@router.get("/periods/{period}/receipts", response_model=list[Reading])
async def list_receipts(
    period: str = Depends(valid_period),  # noqa: B008
    state: LedgerState = Depends(require_admin),  # noqa: B008
) -> list[Reading]:
    """Readings of the period that carry uploaded payment evidence."""
    return [r for r in state.ledger.readings_for_period(period) if r.receipt_image]


@router.get("/settings", response_model=SettingsResponse)
async def get_settings(state: LedgerState = Depends(require_admin)) -> SettingsResponse:  # noqa: B008
    settings = state.settings
    return SettingsResponse(
        rates=settings.rates,
        payment_qr_code=settings.payment_qr_code,
        payment_description=settings.payment_description,
        cloud_api_url=settings.cloud_api_url,
    )


@router.put("/settings", response_model=SettingsResponse)
async def update_settings(
    body: SettingsUpdateRequest,
    state: LedgerState = Depends(require_admin),  # noqa: B008
    repository: StateRepository = Depends(get_repository),  # noqa: B008
) -> SettingsResponse:
    service = SettingsService(state)
    try:
        rate_changes = body.rate_changes()
        if rate_changes:
            service.update_rates(**rate_changes)
        if body.admin_pin is not None:
            service.set_admin_pin(body.admin_pin)
        if body.payment_description is not None or body.cloud_api_url is not None:
            service.set_payment_details(
                description=body.payment_description,
                cloud_api_url=body.cloud_api_url,
            )
    except LedgerError as e:
        raise to_http_exception(e) from e
    await repository.save(state)
    return await get_settings(state)


@router.post("/settings/qr-code", response_model=SettingsResponse)
async def upload_qr_code(
    file: UploadFile = File(...),  # noqa: B008
    state: LedgerState = Depends(require_admin),  # noqa: B008
    repository: StateRepository = Depends(get_repository),  # noqa: B008
) -> SettingsResponse:
    """Store the payment QR code image shown to tenants."""
    try:
        data_uri = await upload_to_data_uri(file)
    except LedgerError as e:
        raise to_http_exception(e) from e
    SettingsService(state).set_payment_details(qr_code=data_uri)
    await repository.save(state)
    return await get_settings(state)


@router.get("/rooms", response_model=list[RoomResponse])
async def list_rooms(state: LedgerState = Depends(require_admin)) -> list[RoomResponse]:  # noqa: B008
    return [RoomResponse.from_room(room) for room in state.rooms]


@router.post("/rooms", response_model=RoomResponse, status_code=201)
async def add_room(
    body: Room,
    state: LedgerState = Depends(require_admin),  # noqa: B008
    repository: StateRepository = Depends(get_repository),  # noqa: B008
) -> RoomResponse:
    """Add a room; the active period is opened for it immediately."""
    try:
        SettingsService(state).add_room(body)
    except LedgerError as e:
        raise to_http_exception(e) from e
    await repository.save(state)
    return RoomResponse.from_room(body)


@router.put("/rooms/{room_id}", response_model=RoomResponse)
async def update_room(
    room_id: str,
    body: RoomUpdateRequest,
    state: LedgerState = Depends(require_admin),  # noqa: B008
    repository: StateRepository = Depends(get_repository),  # noqa: B008
) -> RoomResponse:
    try:
        room = SettingsService(state).update_room(
            room_id,
            name=body.name,
            base_rent=body.base_rent,
            pin=body.pin,
        )
    except LedgerError as e:
        raise to_http_exception(e) from e
    await repository.save(state)
    return RoomResponse.from_room(room)


__all__ = ["router"]
