"""Ledger services: period keys, ledger mutations, tariffs and persistence."""
