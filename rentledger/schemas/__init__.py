"""Pydantic records shared by services and the HTTP API."""

from rentledger.schemas.ledger import (
    AppSettings,
    GlobalRates,
    Money,
    Reading,
    Room,
    default_rooms,
)

__all__ = ["AppSettings", "GlobalRates", "Money", "Reading", "Room", "default_rooms"]
