"""Persistence adapters for the ledger core."""
