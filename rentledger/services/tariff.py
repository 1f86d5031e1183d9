"""Room charge calculation.

All arithmetic is integer: rates, usages and fees are whole currency units,
so totals are exact and need no rounding policy.
"""

from dataclasses import dataclass

from rentledger.schemas.ledger import GlobalRates, Money, Reading, Room


@dataclass(frozen=True)
class RoomCharge:
    """Itemised charge for one room in one period."""

    base_rent: Money
    electricity_usage: int
    electricity_amount: Money
    water_usage: int
    water_amount: Money
    service_fee: Money
    other_fee: Money
    other_fees: Money

    @property
    def total(self) -> Money:
        return (
            self.base_rent
            + self.electricity_amount
            + self.water_amount
            + self.service_fee
            + self.other_fee
            + self.other_fees
        )


def usage(previous: int, current: int) -> int:
    """Consumption between two meter values, floored at zero.

    A meter rollback or mistyped value never produces a negative charge.
    """
    return max(0, current - previous)


def calculate_charge(room: Room, reading: Reading | None, rates: GlobalRates) -> RoomCharge:
    """Itemise a room's charge.

    Without a reading only the fixed parts apply (rent, service fee and the
    global other fee); this projects a room whose period is not open yet.
    """
    if reading is None:
        return RoomCharge(
            base_rent=room.base_rent,
            electricity_usage=0,
            electricity_amount=0,
            water_usage=0,
            water_amount=0,
            service_fee=rates.service_fee,
            other_fee=rates.other_fee,
            other_fees=0,
        )

    electricity_usage = usage(reading.prev_electricity, reading.curr_electricity)
    water_usage = usage(reading.prev_water, reading.curr_water)
    return RoomCharge(
        base_rent=room.base_rent,
        electricity_usage=electricity_usage,
        electricity_amount=electricity_usage * rates.electricity_rate,
        water_usage=water_usage,
        water_amount=water_usage * rates.water_rate,
        service_fee=rates.service_fee,
        other_fee=rates.other_fee,
        other_fees=reading.other_fees or 0,
    )


def calculate_room_total(room: Room, reading: Reading | None, rates: GlobalRates) -> Money:
    """Total amount due for a room in a period."""
    return calculate_charge(room, reading, rates).total


__all__ = ["RoomCharge", "usage", "calculate_charge", "calculate_room_total"]
