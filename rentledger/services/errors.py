"""Domain exceptions for ledger operations."""


class LedgerError(Exception):
    """Base exception for ledger errors."""

    pass


class DuplicateReadingError(LedgerError):
    """A reading already exists for the (room, period) key."""

    def __init__(self, room_id: str, period: str):
        super().__init__(f"Reading already exists for room {room_id} in {period}")
        self.room_id = room_id
        self.period = period


class InvalidReadingError(LedgerError, ValueError):
    """Rejected field value (negative meter value, negative fee, bad evidence)."""

    pass


class UnknownRoomError(LedgerError, LookupError):
    """Room id not present in the room set."""

    def __init__(self, room_id: str):
        super().__init__(f"Unknown room: {room_id}")
        self.room_id = room_id


class AuthenticationError(LedgerError):
    """PIN did not match."""

    pass


__all__ = [
    "LedgerError",
    "DuplicateReadingError",
    "InvalidReadingError",
    "UnknownRoomError",
    "AuthenticationError",
]
