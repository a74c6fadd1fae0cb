"""Personal task tracking with a ledger-backed work timer."""

__version__ = "0.1.0"
