"""FastAPI dependencies: shared state, PIN checks and path validation."""

from fastapi import Depends, Header, HTTPException, Path, Request, status

from rentledger.api.errors import to_http_exception
from rentledger.schemas.ledger import Room
from rentledger.services.analysis_service import AnalysisService
from rentledger.services.auth_service import verify_admin_pin, verify_room_pin
from rentledger.services.errors import LedgerError
from rentledger.services.localizer import t
from rentledger.services.period_service import is_valid_period
from rentledger.services.state_service import LedgerState, StateRepository


def get_state(request: Request) -> LedgerState:
    return request.app.state.ledger_state


def get_repository(request: Request) -> StateRepository:
    return request.app.state.repository


def get_analysis_service(request: Request) -> AnalysisService:
    return request.app.state.analysis_service


def valid_period(period: str = Path(..., description="Billing month, YYYY-MM")) -> str:
    if not is_valid_period(period):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=t("errors.invalid_period", period=period),
        )
    return period


def require_admin(
    state: LedgerState = Depends(get_state),  # noqa: B008
    x_admin_pin: str | None = Header(None),  # noqa: B008
) -> LedgerState:
    """Allow the request only with the admin PIN in ``X-Admin-Pin``."""
    try:
        verify_admin_pin(state.settings, x_admin_pin)
    except LedgerError as e:
        raise to_http_exception(e) from e
    return state


def require_tenant(
    room_id: str,
    state: LedgerState = Depends(get_state),  # noqa: B008
    x_room_pin: str | None = Header(None),  # noqa: B008
) -> Room:
    """Allow the request only with the room's PIN in ``X-Room-Pin``."""
    try:
        return verify_room_pin(state.rooms, room_id, x_room_pin)
    except LedgerError as e:
        raise to_http_exception(e) from e


__all__ = [
    "get_state",
    "get_repository",
    "get_analysis_service",
    "valid_period",
    "require_admin",
    "require_tenant",
]
