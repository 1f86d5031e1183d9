"""Ledger records: rooms, per-period readings and process-wide settings.

Records serialize with camelCase keys (``roomId``, ``baseRent``,
``prevElectricity``...) so stored blobs keep the same shape across releases.
Monetary values are integers in the smallest currency unit.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Alias for readability: amounts are whole currency units (VND has no minor unit)
Money = int


class LedgerRecord(BaseModel):
    """Base record with camelCase wire aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )

    def to_wire(self) -> dict:
        """Dump to a camelCase dict, omitting absent optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Room(LedgerRecord):
    """A rentable room. Created at provisioning, never deleted."""

    id: str = Field(min_length=1)
    name: str
    base_rent: Money = Field(ge=0)
    pin: str


class Reading(LedgerRecord):
    """Billing record for one room in one period.

    At most one exists per ``(room_id, month)``; the ledger enforces this.
    """

    room_id: str
    month: str = Field(pattern=r"^\d{4}-(0[1-9]|1[0-2])$")
    prev_electricity: int = 0
    curr_electricity: int = Field(default=0, ge=0)
    prev_water: int = 0
    curr_water: int = Field(default=0, ge=0)
    other_fees: Money = 0
    paid: bool = False
    receipt_image: str | None = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.room_id, self.month)


class GlobalRates(LedgerRecord):
    """Tariff rates applied to every room and every period."""

    electricity_rate: Money = Field(default=3500, ge=0)
    water_rate: Money = Field(default=25000, ge=0)
    service_fee: Money = Field(default=150000, ge=0)
    other_fee: Money = Field(default=0, ge=0)


DEFAULT_PAYMENT_DESCRIPTION = "Chuyển khoản: [Ngân hàng] - [Số tài khoản] - [Tên chủ tài khoản]"


class AppSettings(LedgerRecord):
    """Admin-editable configuration persisted next to the ledger."""

    admin_pin: str = "1234"
    rates: GlobalRates = Field(default_factory=GlobalRates)
    payment_qr_code: str = ""
    payment_description: str = DEFAULT_PAYMENT_DESCRIPTION
    cloud_api_url: str = ""


def default_rooms(count: int = 8) -> list[Room]:
    """Seed room set used when nothing has been persisted yet."""
    return [
        Room(id=f"room-{i}", name=f"Phòng {i}", base_rent=3_500_000, pin="1234")
        for i in range(1, count + 1)
    ]


__all__ = [
    "Money",
    "LedgerRecord",
    "Room",
    "Reading",
    "GlobalRates",
    "AppSettings",
    "DEFAULT_PAYMENT_DESCRIPTION",
    "default_rooms",
]
