"""Request and response schemas for the ledger API."""

from pydantic import BaseModel, ConfigDict, Field

from rentledger.schemas.ledger import GlobalRates, Reading, Room
from rentledger.services.locale_service import format_amount
from rentledger.services.summary_service import PeriodSummary
from rentledger.services.tariff import RoomCharge, calculate_charge


class PinRequest(BaseModel):
    pin: str


class AuthResponse(BaseModel):
    ok: bool = True
    room_id: str | None = None
    room_name: str | None = None


class PeriodResponse(BaseModel):
    period: str
    previous: str
    next: str


class MeterValueRequest(BaseModel):
    value: int = Field(ge=0)


class AmountRequest(BaseModel):
    amount: int = Field(ge=0)


class PaidRequest(BaseModel):
    paid: bool


class ChargeResponse(BaseModel):
    """Itemised charge with the computed total."""

    base_rent: int
    electricity_usage: int
    electricity_amount: int
    water_usage: int
    water_amount: int
    service_fee: int
    other_fee: int
    other_fees: int
    total: int
    total_formatted: str

    @classmethod
    def from_charge(cls, charge: RoomCharge) -> "ChargeResponse":
        return cls(
            base_rent=charge.base_rent,
            electricity_usage=charge.electricity_usage,
            electricity_amount=charge.electricity_amount,
            water_usage=charge.water_usage,
            water_amount=charge.water_amount,
            service_fee=charge.service_fee,
            other_fee=charge.other_fee,
            other_fees=charge.other_fees,
            total=charge.total,
            total_formatted=format_amount(charge.total),
        )


class BillResponse(BaseModel):
    """One room's bill for a period."""

    room_id: str
    room_name: str
    reading: Reading | None
    charge: ChargeResponse

    @classmethod
    def build(cls, room: Room, reading: Reading | None, rates: GlobalRates) -> "BillResponse":
        return cls(
            room_id=room.id,
            room_name=room.name,
            reading=reading,
            charge=ChargeResponse.from_charge(calculate_charge(room, reading, rates)),
        )


class SummaryResponse(BaseModel):
    period: str
    expected: int
    collected: int
    unpaid: int
    paid_count: int
    unpaid_count: int
    total_electricity: int
    total_water: int
    expected_formatted: str
    collected_formatted: str
    unpaid_formatted: str

    @classmethod
    def from_summary(cls, period: str, summary: PeriodSummary) -> "SummaryResponse":
        return cls(
            period=period,
            **summary.to_dict(),
            expected_formatted=format_amount(summary.expected),
            collected_formatted=format_amount(summary.collected),
            unpaid_formatted=format_amount(summary.unpaid),
        )


class BillsResponse(BaseModel):
    period: str
    bills: list[BillResponse]
    summary: SummaryResponse


class AnalysisResponse(BaseModel):
    period: str | None
    text: str | None


class SettingsResponse(BaseModel):
    """Settings as shown to the admin (PIN omitted)."""

    rates: GlobalRates
    payment_qr_code: str
    payment_description: str
    cloud_api_url: str


class SettingsUpdateRequest(BaseModel):
    electricity_rate: int | None = Field(default=None, ge=0)
    water_rate: int | None = Field(default=None, ge=0)
    service_fee: int | None = Field(default=None, ge=0)
    other_fee: int | None = Field(default=None, ge=0)
    admin_pin: str | None = Field(default=None, min_length=1)
    payment_description: str | None = None
    cloud_api_url: str | None = None

    def rate_changes(self) -> dict[str, int]:
        return {
            name: value
            for name, value in self.model_dump(include=set(GlobalRates.model_fields)).items()
            if value is not None
        }


class RoomResponse(BaseModel):
    """Room without its PIN."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    base_rent: int

    @classmethod
    def from_room(cls, room: Room) -> "RoomResponse":
        return cls(id=room.id, name=room.name, base_rent=room.base_rent)


class RoomUpdateRequest(BaseModel):
    name: str | None = None
    base_rent: int | None = Field(default=None, ge=0)
    pin: str | None = Field(default=None, min_length=1)


class TenantBillResponse(BaseModel):
    """A tenant's own bill plus how to pay it."""

    period: str
    bill: BillResponse
    payment_qr_code: str
    payment_description: str


__all__ = [
    "PinRequest",
    "AuthResponse",
    "PeriodResponse",
    "MeterValueRequest",
    "AmountRequest",
    "PaidRequest",
    "ChargeResponse",
    "BillResponse",
    "SummaryResponse",
    "BillsResponse",
    "AnalysisResponse",
    "SettingsResponse",
    "SettingsUpdateRequest",
    "RoomResponse",
    "RoomUpdateRequest",
    "TenantBillResponse",
]
