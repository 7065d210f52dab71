"""Broker trade ledger to PLN-converted spreadsheet summary."""

__version__ = "0.1.0"
