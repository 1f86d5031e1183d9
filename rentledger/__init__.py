"""Rental billing ledger: monthly meter readings, totals and payment evidence."""

__version__ = "0.1.0"
