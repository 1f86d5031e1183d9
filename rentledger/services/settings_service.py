"""Admin settings: tariff rates, PINs, payment details and the room set."""

import logging

from rentledger.schemas.ledger import GlobalRates, Reading, Room
from rentledger.services.errors import InvalidReadingError
from rentledger.services.localizer import t
from rentledger.services.state_service import LedgerState

logger = logging.getLogger(__name__)


class SettingsService:
    """Mutations of process-wide configuration held in ``LedgerState``.

    Rates are not versioned: a change applies to every period the next
    time totals are computed.
    """

    def __init__(self, state: LedgerState):
        self.state = state

    def update_rates(self, **changes: int) -> GlobalRates:
        """Replace any of the four global rates.

        Args:
            **changes: electricity_rate, water_rate, service_fee, other_fee

        Raises:
            InvalidReadingError: On an unknown rate name or negative amount
        """
        unknown = set(changes) - set(GlobalRates.model_fields)
        if unknown:
            raise InvalidReadingError(f"Unknown rate(s): {', '.join(sorted(unknown))}")
        negative = [name for name, value in changes.items() if value < 0]
        if negative:
            raise InvalidReadingError(f"Rate(s) must not be negative: {', '.join(sorted(negative))}")

        rates = self.state.settings.rates.model_copy(update=changes)
        self.state.settings.rates = rates
        self.state.settings_dirty = True
        logger.info("Updated global rates: %s", changes)
        return rates

    def set_admin_pin(self, pin: str) -> None:
        if not pin:
            raise InvalidReadingError("Admin PIN must not be empty")
        self.state.settings.admin_pin = pin
        self.state.settings_dirty = True
        logger.info("Admin PIN changed")

    def set_payment_details(
        self,
        description: str | None = None,
        qr_code: str | None = None,
        cloud_api_url: str | None = None,
    ) -> None:
        """Update payment instructions shown to tenants and the sync URL."""
        settings = self.state.settings
        if description is not None:
            settings.payment_description = description
        if qr_code is not None:
            settings.payment_qr_code = qr_code
        if cloud_api_url is not None:
            settings.cloud_api_url = cloud_api_url
        self.state.settings_dirty = True

    def update_room(
        self,
        room_id: str,
        name: str | None = None,
        base_rent: int | None = None,
        pin: str | None = None,
    ) -> Room:
        """Edit a room's name, base rent or PIN.

        Raises:
            UnknownRoomError: If the room does not exist
            InvalidReadingError: If base rent is negative
        """
        room = self.state.get_room(room_id)
        if base_rent is not None and base_rent < 0:
            raise InvalidReadingError(f"Base rent must not be negative: {base_rent}")
        if name is not None:
            room.name = name
        if base_rent is not None:
            room.base_rent = base_rent
        if pin is not None:
            room.pin = pin
        logger.info("Updated room %s", room_id)
        return room

    def add_room(self, room: Room) -> list[Reading]:
        """Add a room and open the active period for it.

        Returns:
            Readings created by the rollover triggered by the new room set
        """
        if any(existing.id == room.id for existing in self.state.rooms):
            raise InvalidReadingError(t("errors.room_exists", room_id=room.id))
        self.state.rooms.append(room)
        logger.info("Added room %s (%s)", room.id, room.name)
        return self.state.rollover.open_period(self.state.rooms, self.state.active_period)


__all__ = ["SettingsService"]
