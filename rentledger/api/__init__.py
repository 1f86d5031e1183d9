"""HTTP API for the rental ledger."""
