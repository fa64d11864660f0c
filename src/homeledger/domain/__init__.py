"""Domain-layer contracts consumed by the ledger services."""
