"""Revenue summary for one billing period."""

from collections.abc import Iterable
from dataclasses import asdict, dataclass

from rentledger.schemas.ledger import GlobalRates, Money, Reading, Room
from rentledger.services.tariff import calculate_charge


@dataclass(frozen=True)
class PeriodSummary:
    """Expected vs collected revenue across rooms with a reading."""

    expected: Money = 0
    collected: Money = 0
    paid_count: int = 0
    unpaid_count: int = 0
    total_electricity: int = 0
    total_water: int = 0

    @property
    def unpaid(self) -> Money:
        return self.expected - self.collected

    def to_dict(self) -> dict:
        data = asdict(self)
        data["unpaid"] = self.unpaid
        return data


def summarize_period(
    rooms: Iterable[Room],
    readings: Iterable[Reading],
    rates: GlobalRates,
) -> PeriodSummary:
    """Sum charges over the given readings.

    Rooms without a reading contribute nothing. Readings whose room is not in
    ``rooms`` are skipped. The result is recomputed on every call; callers
    pass the readings of a single period.
    """
    rooms_by_id = {room.id: room for room in rooms}
    expected = collected = 0
    paid_count = unpaid_count = 0
    total_electricity = total_water = 0

    for reading in readings:
        room = rooms_by_id.get(reading.room_id)
        if room is None:
            continue
        charge = calculate_charge(room, reading, rates)
        expected += charge.total
        total_electricity += charge.electricity_usage
        total_water += charge.water_usage
        if reading.paid:
            collected += charge.total
            paid_count += 1
        else:
            unpaid_count += 1

    return PeriodSummary(
        expected=expected,
        collected=collected,
        paid_count=paid_count,
        unpaid_count=unpaid_count,
        total_electricity=total_electricity,
        total_water=total_water,
    )


__all__ = ["PeriodSummary", "summarize_period"]
