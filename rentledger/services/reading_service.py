"""Typed mutations of readings, including meter correction propagation."""

import logging
from enum import Enum

from rentledger.schemas.ledger import Reading
from rentledger.services.errors import InvalidReadingError
from rentledger.services.ledger import BillingLedger, ReadingField
from rentledger.services.period_service import next_period

logger = logging.getLogger(__name__)


class Meter(str, Enum):
    """Metered utilities tracked on every reading."""

    ELECTRICITY = "electricity"
    WATER = "water"

    @property
    def current_field(self) -> ReadingField:
        if self is Meter.ELECTRICITY:
            return ReadingField.CURR_ELECTRICITY
        return ReadingField.CURR_WATER

    @property
    def previous_field(self) -> ReadingField:
        if self is Meter.ELECTRICITY:
            return ReadingField.PREV_ELECTRICITY
        return ReadingField.PREV_WATER


class ReadingService:
    """Field-level updates on the ledger.

    Each mutation targets one existing reading; a missing reading makes the
    call a no-op and the method returns None. Only meter values propagate
    to the following period.
    """

    def __init__(self, ledger: BillingLedger):
        self.ledger = ledger

    def set_meter_reading(self, room_id: str, period: str, meter: Meter, value: int) -> Reading | None:
        """Record the ending meter value and carry it into the next period.

        Args:
            room_id: Room ID
            period: Period being edited
            meter: Electricity or water
            value: New ending meter value

        Returns:
            Updated reading, or None if the room has no reading for the period

        Raises:
            InvalidReadingError: If value is negative
        """
        meter = Meter(meter)
        if value < 0:
            raise InvalidReadingError(f"Meter value must not be negative: {value}")

        if not self.ledger.update_field(room_id, period, meter.current_field, value):
            logger.warning("No reading to update: room=%s period=%s", room_id, period)
            return None

        self.propagate_forward(room_id, period, meter, value)
        return self.ledger.get(room_id, period)

    def propagate_forward(self, room_id: str, period: str, meter: Meter, value: int) -> bool:
        """Copy an ending meter value into the next period's starting value.

        Exactly one hop: the next period's own ending value is not touched,
        so nothing cascades further. If the next period has not been opened
        yet nothing happens; rollover will seed from the current value later.

        Returns:
            True if a next-period reading was updated
        """
        meter = Meter(meter)
        following = next_period(period)
        updated = self.ledger.update_field(room_id, following, meter.previous_field, value)
        if updated:
            logger.debug(
                "Propagated %s=%d from %s to %s for room %s",
                meter.value,
                value,
                period,
                following,
                room_id,
            )
        return updated

    def set_other_fees(self, room_id: str, period: str, amount: int) -> Reading | None:
        """Set the per-reading extra fee amount."""
        if amount < 0:
            raise InvalidReadingError(f"Fee amount must not be negative: {amount}")
        return self._update(room_id, period, ReadingField.OTHER_FEES, amount)

    def set_paid(self, room_id: str, period: str, paid: bool) -> Reading | None:
        """Mark the reading as paid or unpaid."""
        return self._update(room_id, period, ReadingField.PAID, bool(paid))

    def set_receipt_evidence(self, room_id: str, period: str, data_uri: str) -> Reading | None:
        """Attach proof of payment as a ``data:`` URI."""
        if not data_uri.startswith("data:"):
            raise InvalidReadingError("Receipt evidence must be a data URI")
        return self._update(room_id, period, ReadingField.RECEIPT_IMAGE, data_uri)

    def clear_receipt_evidence(self, room_id: str, period: str) -> Reading | None:
        return self._update(room_id, period, ReadingField.RECEIPT_IMAGE, None)

    def _update(self, room_id: str, period: str, field: ReadingField, value) -> Reading | None:
        if not self.ledger.update_field(room_id, period, field, value):
            logger.warning("No reading to update: room=%s period=%s field=%s", room_id, period, field.value)
            return None
        return self.ledger.get(room_id, period)


__all__ = ["Meter", "ReadingService"]
