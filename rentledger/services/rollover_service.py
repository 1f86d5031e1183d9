"""Period rollover: open a billing period for every room."""

import logging
from collections.abc import Iterable

from rentledger.schemas.ledger import Reading, Room
from rentledger.services.ledger import BillingLedger
from rentledger.services.period_service import previous_period

logger = logging.getLogger(__name__)


class RolloverService:
    """Creates missing readings for a period, seeded from the prior period.

    Safe to call on every change of the active period or of the room set:
    rooms that already have a reading are left untouched.
    """

    def __init__(self, ledger: BillingLedger):
        self.ledger = ledger

    def seed_reading(self, room_id: str, period: str) -> Reading:
        """Build (without inserting) the opening reading for a room.

        Both previous and current meter values start at the prior period's
        ending values, so usage is zero until a new value is entered. A room
        without a prior-period reading starts from zero.
        """
        prior = self.ledger.get(room_id, previous_period(period))
        electricity = prior.curr_electricity if prior else 0
        water = prior.curr_water if prior else 0
        return Reading(
            room_id=room_id,
            month=period,
            prev_electricity=electricity,
            curr_electricity=electricity,
            prev_water=water,
            curr_water=water,
            other_fees=0,
            paid=False,
            receipt_image=None,
        )

    def open_period(self, rooms: Iterable[Room], period: str) -> list[Reading]:
        """Ensure every room has a reading for ``period``.

        Args:
            rooms: Current room set
            period: Active period key (``YYYY-MM``)

        Returns:
            Readings created by this call (empty when nothing was missing)
        """
        created: list[Reading] = []
        for room in rooms:
            if self.ledger.get(room.id, period) is not None:
                continue
            created.append(self.ledger.insert(self.seed_reading(room.id, period)))

        if created:
            logger.info(
                "Opened period %s: created %d reading(s) for rooms %s",
                period,
                len(created),
                ", ".join(r.room_id for r in created),
            )
        return created


__all__ = ["RolloverService"]
