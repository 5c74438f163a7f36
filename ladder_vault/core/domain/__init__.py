"""
Domain models and value objects.

Contains vault state, ladder distribution, events and the error taxonomy.
"""

from ladder_vault.core.domain.distribution import (
    Distribution,
    DistributionOffer,
    OfferSide,
)
from ladder_vault.core.domain.errors import (
    CannotWithdrawPoolAsset,
    CapacityError,
    ConsistencyError,
    DepositExceedsMaxTotal,
    FeeTooHigh,
    InitialMintSharesMismatch,
    InputValidationError,
    InsufficientFunds,
    InsufficientShares,
    InvalidAmount,
    InvalidLadderParams,
    QuoteAmountOverflow,
    ReentrantCall,
    SlippageExceeded,
    Unauthorized,
    UnauthorizedSwapDelegate,
    VaultError,
    ZeroAddress,
    ZeroAmount,
)
from ladder_vault.core.domain.events import (
    AccrueFeesEvent,
    BurnEvent,
    MintEvent,
    PositionUpdateEvent,
    SetFeeDataEvent,
    SetLadderPositionEvent,
    SetMaxValueInQuoteEvent,
    SetSwapDelegateEvent,
    SwapEvent,
    UpdateLastValueInQuoteEvent,
    VaultEvent,
)
from ladder_vault.core.domain.vault_state import (
    FEE_PRECISION,
    MAX_MANAGEMENT_FEE,
    MAX_PERFORMANCE_FEE,
    MINIMUM_LIQUIDITY,
    SECONDS_PER_YEAR,
    VALUE_PER_SHARE_PRECISION,
    FeeData,
    FundsState,
    LadderParams,
    VaultState,
)

__all__ = [
    # Vault state
    "FEE_PRECISION",
    "MAX_MANAGEMENT_FEE",
    "MAX_PERFORMANCE_FEE",
    "MINIMUM_LIQUIDITY",
    "SECONDS_PER_YEAR",
    "VALUE_PER_SHARE_PRECISION",
    "FeeData",
    "FundsState",
    "LadderParams",
    "VaultState",
    # Distribution
    "Distribution",
    "DistributionOffer",
    "OfferSide",
    # Events
    "VaultEvent",
    "MintEvent",
    "BurnEvent",
    "AccrueFeesEvent",
    "UpdateLastValueInQuoteEvent",
    "SetLadderPositionEvent",
    "PositionUpdateEvent",
    "SwapEvent",
    "SetFeeDataEvent",
    "SetMaxValueInQuoteEvent",
    "SetSwapDelegateEvent",
    # Errors
    "VaultError",
    "InputValidationError",
    "ConsistencyError",
    "CapacityError",
    "ReentrantCall",
    "ZeroAmount",
    "InvalidAmount",
    "InsufficientFunds",
    "ZeroAddress",
    "FeeTooHigh",
    "Unauthorized",
    "UnauthorizedSwapDelegate",
    "InvalidLadderParams",
    "InsufficientShares",
    "CannotWithdrawPoolAsset",
    "SlippageExceeded",
    "InitialMintSharesMismatch",
    "DepositExceedsMaxTotal",
    "QuoteAmountOverflow",
]
