"""PIN checks for the admin and tenant views.

A PIN is compared for equality only; there is no lockout or retry limit.
"""

import hmac
import logging

from rentledger.schemas.ledger import AppSettings, Room
from rentledger.services.errors import AuthenticationError, UnknownRoomError
from rentledger.services.localizer import t

logger = logging.getLogger(__name__)


def pin_matches(expected: str, candidate: str | None) -> bool:
    """Constant-time PIN comparison."""
    if candidate is None:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), candidate.encode("utf-8"))


def verify_admin_pin(settings: AppSettings, pin: str | None) -> None:
    """Raise AuthenticationError unless ``pin`` is the admin PIN."""
    if not pin_matches(settings.admin_pin, pin):
        logger.info("Rejected admin PIN attempt")
        raise AuthenticationError(t("errors.admin_pin_invalid"))


def verify_room_pin(rooms: list[Room], room_id: str, pin: str | None) -> Room:
    """Return the room if ``pin`` matches its PIN.

    Raises:
        UnknownRoomError: If no room has this id
        AuthenticationError: If the PIN does not match
    """
    room = next((r for r in rooms if r.id == room_id), None)
    if room is None:
        raise UnknownRoomError(room_id)
    if not pin_matches(room.pin, pin):
        logger.info("Rejected PIN attempt for room %s", room_id)
        raise AuthenticationError(t("errors.room_pin_invalid"))
    return room


__all__ = ["pin_matches", "verify_admin_pin", "verify_room_pin"]
