"""Billing ledger: the current reading for each (room, period) pair."""

import logging
from collections.abc import Iterable, Iterator
from enum import Enum
from typing import Any

from rentledger.schemas.ledger import Reading
from rentledger.services.errors import DuplicateReadingError

logger = logging.getLogger(__name__)


class ReadingField(str, Enum):
    """Mutable fields of a reading. Keys (room, month) are never updated."""

    PREV_ELECTRICITY = "prev_electricity"
    CURR_ELECTRICITY = "curr_electricity"
    PREV_WATER = "prev_water"
    CURR_WATER = "curr_water"
    OTHER_FEES = "other_fees"
    PAID = "paid"
    RECEIPT_IMAGE = "receipt_image"


class BillingLedger:
    """In-memory store of readings keyed by ``(room_id, period)``.

    Every mutation sets ``dirty`` so the caller knows the readings blob
    must be written back to persistent storage.
    """

    def __init__(self, readings: Iterable[Reading] = ()):
        self._readings: dict[tuple[str, str], Reading] = {}
        self.dirty = False
        for reading in readings:
            if reading.key in self._readings:
                # First record wins, matching lookup order of the stored sequence
                logger.warning(
                    "Dropping duplicate stored reading: room=%s period=%s",
                    reading.room_id,
                    reading.month,
                )
                continue
            self._readings[reading.key] = reading

    def __len__(self) -> int:
        return len(self._readings)

    def __iter__(self) -> Iterator[Reading]:
        return iter(self._readings.values())

    def __contains__(self, key: object) -> bool:
        return key in self._readings

    def get(self, room_id: str, period: str) -> Reading | None:
        """Return the reading for the key, or None if absent."""
        return self._readings.get((room_id, period))

    def insert(self, reading: Reading) -> Reading:
        """Add a new reading.

        Raises:
            DuplicateReadingError: If a reading already exists for the key
        """
        if reading.key in self._readings:
            raise DuplicateReadingError(reading.room_id, reading.month)
        self._readings[reading.key] = reading
        self.dirty = True
        return reading

    def update_field(self, room_id: str, period: str, field: ReadingField, value: Any) -> bool:
        """Replace one field on the matching reading.

        Returns:
            True if the reading existed and was updated, False otherwise (no-op)
        """
        reading = self._readings.get((room_id, period))
        if reading is None:
            return False
        setattr(reading, ReadingField(field).value, value)
        self.dirty = True
        return True

    def readings_for_period(self, period: str) -> list[Reading]:
        """Readings of one period, in insertion order."""
        return [r for r in self._readings.values() if r.month == period]

    def readings(self) -> list[Reading]:
        """All readings, in insertion order (the persisted sequence order)."""
        return list(self._readings.values())

    def mark_clean(self) -> None:
        self.dirty = False


__all__ = ["BillingLedger", "ReadingField"]
