"""Task store, event ledger, duration, timer engine and queries."""
