"""CSV export of one period's bills."""

import csv
import io
from collections.abc import Iterable

from rentledger.schemas.ledger import GlobalRates, Reading, Room
from rentledger.services.localizer import payment_status_label, t
from rentledger.services.tariff import calculate_room_total

# Byte-order mark so spreadsheet apps detect UTF-8
BOM = "\ufeff"

EXPORT_COLUMNS = (
    "room",
    "prev_electricity",
    "curr_electricity",
    "electricity_usage",
    "prev_water",
    "curr_water",
    "water_usage",
    "base_rent",
    "total",
    "status",
)


def export_filename(period: str) -> str:
    return t("export.filename", period=period)


def export_period_csv(
    rooms: Iterable[Room],
    readings: Iterable[Reading],
    rates: GlobalRates,
) -> str:
    """Render a period's bills as CSV text, starting with a BOM.

    One row per room, in room order. Rooms without a reading in ``readings``
    are left out. Usage columns show the raw meter difference; the total
    column is the billed amount.
    """
    by_room = {reading.room_id: reading for reading in readings}

    buffer = io.StringIO()
    buffer.write(BOM)
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow([t(f"export.headers.{column}") for column in EXPORT_COLUMNS])

    for room in rooms:
        reading = by_room.get(room.id)
        if reading is None:
            continue
        writer.writerow(
            [
                room.name,
                reading.prev_electricity,
                reading.curr_electricity,
                reading.curr_electricity - reading.prev_electricity,
                reading.prev_water,
                reading.curr_water,
                reading.curr_water - reading.prev_water,
                room.base_rent,
                calculate_room_total(room, reading, rates),
                payment_status_label(reading.paid),
            ]
        )

    return buffer.getvalue()


__all__ = ["BOM", "EXPORT_COLUMNS", "export_filename", "export_period_csv"]
