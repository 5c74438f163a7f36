"""In-memory collaborators for simulation and tests."""

from .in_memory import (
    FixedTickOracle,
    InMemoryLedger,
    InMemoryMarketMaker,
    InsufficientAllowance,
    InsufficientBalance,
    LedgerError,
    OracleSwapDelegate,
    VenueRejection,
)

__all__ = [
    "FixedTickOracle",
    "InMemoryLedger",
    "InMemoryMarketMaker",
    "OracleSwapDelegate",
    "LedgerError",
    "InsufficientBalance",
    "InsufficientAllowance",
    "VenueRejection",
]
