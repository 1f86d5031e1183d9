"""Load/save boundary between the in-memory ledger and the key-value store.

State is read once at process start and written back after mutations.
Logical keys and their encodings:

    rooms               JSON list of camelCase Room records
    readings            JSON list of camelCase Reading records
    adminPin            plain string
    globalElecRate      decimal number as text (also the other three rates)
    globalWaterRate
    globalServiceFee
    globalOtherFee
    paymentQrCode       data URI or empty
    paymentDescription  plain string
    cloudApiUrl         plain string (remote sync endpoint, unused by the ledger)
"""

import json
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from pydantic import TypeAdapter, ValidationError

from rentledger.schemas.ledger import AppSettings, GlobalRates, Reading, Room, default_rooms
from rentledger.services.analysis_service import AnalysisResult
from rentledger.services.errors import UnknownRoomError
from rentledger.services.ledger import BillingLedger
from rentledger.services.period_service import current_period
from rentledger.services.reading_service import ReadingService
from rentledger.services.rollover_service import RolloverService
from rentledger.services.store import KeyValueStore

logger = logging.getLogger(__name__)

ROOMS_KEY = "rooms"
READINGS_KEY = "readings"
ADMIN_PIN_KEY = "adminPin"
PAYMENT_QR_KEY = "paymentQrCode"
PAYMENT_DESCRIPTION_KEY = "paymentDescription"
CLOUD_API_URL_KEY = "cloudApiUrl"

# Stored key -> GlobalRates field
RATE_KEYS = {
    "globalElecRate": "electricity_rate",
    "globalWaterRate": "water_rate",
    "globalServiceFee": "service_fee",
    "globalOtherFee": "other_fee",
}

_room_adapter = TypeAdapter(Room)
_reading_adapter = TypeAdapter(Reading)


@dataclass
class LedgerState:
    """Everything one session works on: rooms, readings and settings."""

    rooms: list[Room]
    ledger: BillingLedger
    settings: AppSettings
    active_period: str = field(default_factory=current_period)
    analysis: AnalysisResult | None = None
    settings_dirty: bool = False

    @property
    def rollover(self) -> RolloverService:
        return RolloverService(self.ledger)

    @property
    def reading_service(self) -> ReadingService:
        return ReadingService(self.ledger)

    def get_room(self, room_id: str) -> Room:
        """Return a room by id.

        Raises:
            UnknownRoomError: If no room has this id
        """
        for room in self.rooms:
            if room.id == room_id:
                return room
        raise UnknownRoomError(room_id)

    def activate_period(self, period: str) -> list[Reading]:
        """Make ``period`` active and open it for every room."""
        self.active_period = period
        return self.rollover.open_period(self.rooms, period)


def _parse_money(raw: str | None, default: int) -> int:
    """Parse a stored decimal number; missing or malformed text yields the default."""
    if raw is None or not raw.strip():
        return default
    try:
        value = Decimal(raw.strip())
    except InvalidOperation:
        value = None
    if value is None or not value.is_finite():
        logger.warning("Ignoring malformed stored amount %r, using %d", raw, default)
        return default
    amount = int(value)
    if amount < 0:
        logger.warning("Ignoring negative stored amount %r, using %d", raw, default)
        return default
    return amount


def _format_money(amount: int) -> str:
    return str(amount)


def _load_records(raw: str | None, adapter: TypeAdapter, key: str) -> list:
    """Decode a stored JSON list, keeping every record that validates.

    Invalid records are logged and skipped so one bad entry never costs the
    rest of the stored history. An unreadable blob yields an empty list.
    """
    if not raw:
        return []
    try:
        items = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.error("Stored %s is not valid JSON: %s", key, e)
        return []
    if not isinstance(items, list):
        logger.error("Stored %s is not a list, ignoring it", key)
        return []

    records = []
    for index, item in enumerate(items):
        try:
            records.append(adapter.validate_python(item))
        except ValidationError as e:
            logger.warning("Skipping invalid stored %s record #%d: %s", key, index, e)
    if len(records) < len(items):
        logger.error("Loaded %d of %d stored %s record(s)", len(records), len(items), key)
    return records


class StateRepository:
    """Reads and writes ``LedgerState`` through a key-value store."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    async def load(self, active_period: str | None = None) -> LedgerState:
        """Load persisted state, filling gaps with defaults.

        The active period (current month unless given) is opened before
        returning, so every room has a reading for it.
        """
        rooms = await self._load_rooms()
        readings = await self._load_readings()
        settings = await self._load_settings()

        state = LedgerState(
            rooms=rooms,
            ledger=BillingLedger(readings),
            settings=settings,
        )
        state.activate_period(active_period or current_period())
        logger.info(
            "Loaded state: %d room(s), %d reading(s), active period %s",
            len(state.rooms),
            len(state.ledger),
            state.active_period,
        )
        return state

    async def save(self, state: LedgerState, force: bool = False) -> list[str]:
        """Write state back. Readings are only written when the ledger is dirty.

        Returns:
            Keys written
        """
        values: dict[str, str] = {
            ROOMS_KEY: json.dumps([room.to_wire() for room in state.rooms], ensure_ascii=False),
        }
        if force or state.ledger.dirty:
            values[READINGS_KEY] = json.dumps(
                [reading.to_wire() for reading in state.ledger.readings()],
                ensure_ascii=False,
            )
        if force or state.settings_dirty:
            values.update(self._settings_values(state.settings))

        await self.store.set_many(values)
        state.ledger.mark_clean()
        state.settings_dirty = False
        return list(values)

    @staticmethod
    def _settings_values(settings: AppSettings) -> dict[str, str]:
        values = {
            ADMIN_PIN_KEY: settings.admin_pin,
            PAYMENT_QR_KEY: settings.payment_qr_code,
            PAYMENT_DESCRIPTION_KEY: settings.payment_description,
            CLOUD_API_URL_KEY: settings.cloud_api_url,
        }
        for key, attr in RATE_KEYS.items():
            values[key] = _format_money(getattr(settings.rates, attr))
        return values

    async def _load_rooms(self) -> list[Room]:
        rooms = _load_records(await self.store.get(ROOMS_KEY), _room_adapter, ROOMS_KEY)
        if not rooms:
            return default_rooms()
        return rooms

    async def _load_readings(self) -> list[Reading]:
        return _load_records(await self.store.get(READINGS_KEY), _reading_adapter, READINGS_KEY)

    async def _load_settings(self) -> AppSettings:
        defaults = AppSettings()
        rates = {
            attr: _parse_money(await self.store.get(key), getattr(defaults.rates, attr))
            for key, attr in RATE_KEYS.items()
        }
        admin_pin = await self.store.get(ADMIN_PIN_KEY)
        description = await self.store.get(PAYMENT_DESCRIPTION_KEY)
        return AppSettings(
            admin_pin=admin_pin or defaults.admin_pin,
            rates=GlobalRates(**rates),
            payment_qr_code=await self.store.get(PAYMENT_QR_KEY) or "",
            payment_description=description or defaults.payment_description,
            cloud_api_url=await self.store.get(CLOUD_API_URL_KEY) or "",
        )


__all__ = ["LedgerState", "StateRepository", "RATE_KEYS"]
