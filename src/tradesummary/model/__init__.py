from .ledger import (
    Ledger,
    LedgerCsvParser,
    LedgerRow,
    ParseIssue,
    ParseReport,
)
from .trade import Trade

__all__ = [
    "Ledger",
    "LedgerCsvParser",
    "LedgerRow",
    "ParseIssue",
    "ParseReport",
    "Trade",
]
