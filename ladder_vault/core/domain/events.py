"""
Vault Events — append-only записи аудита

Immutable Pydantic модели событий. Сериализованная форма
(model_dump(mode="json")) соответствует схеме
contracts/schema/vault_event.json.

События не являются управляющими входами: они только фиксируют,
что произошло.
"""

from typing import Literal

from pydantic import BaseModel, Field

from ladder_vault.core.domain.vault_state import FundsState


# =============================================================================
# BASE
# =============================================================================


class VaultEvent(BaseModel):
    """Базовое событие vault."""

    event_type: str = Field(..., description="Тип события")
    ts: int = Field(..., ge=0, description="Время события (unix, сек)")

    model_config = {"frozen": True}


# =============================================================================
# SHARE ACCOUNTING
# =============================================================================


class MintEvent(VaultEvent):
    event_type: Literal["Mint"] = "Mint"
    user: str
    shares: int = Field(..., ge=0)
    base_amount: int = Field(..., ge=0)
    quote_amount: int = Field(..., ge=0)
    tick: int


class BurnEvent(VaultEvent):
    event_type: Literal["Burn"] = "Burn"
    user: str
    shares: int = Field(..., ge=0)
    base_amount: int = Field(..., ge=0)
    quote_amount: int = Field(..., ge=0)
    tick: int


class AccrueFeesEvent(VaultEvent):
    event_type: Literal["AccrueFees"] = "AccrueFees"
    fee_recipient: str
    fee_shares: int = Field(..., ge=0)
    value_in_quote: int = Field(..., ge=0)


class UpdateLastValueInQuoteEvent(VaultEvent):
    event_type: Literal["UpdateLastValueInQuote"] = "UpdateLastValueInQuote"
    value_in_quote: int = Field(..., ge=0)


# =============================================================================
# POSITION
# =============================================================================


class SetLadderPositionEvent(VaultEvent):
    event_type: Literal["SetLadderPosition"] = "SetLadderPosition"
    tick_index0: int
    tick_offset: int = Field(..., ge=1)
    step_size: int = Field(..., ge=1)
    price_points: int = Field(..., ge=0)
    gas_hint: int = Field(..., ge=0)
    gas_price_hint: int = Field(..., ge=0)
    funds_state: FundsState


class PositionUpdateEvent(VaultEvent):
    """Какая ветка funds state machine выполнилась и чем закончилась."""

    event_type: Literal["PositionUpdate"] = "PositionUpdate"
    funds_state: FundsState
    posted: bool
    reason: str
    bid_gives: int = Field(default=0, ge=0)
    ask_gives: int = Field(default=0, ge=0)


class SwapEvent(VaultEvent):
    event_type: Literal["Swap"] = "Swap"
    delegate: str
    base_change: int
    quote_change: int
    sell: bool


# =============================================================================
# CONFIGURATION
# =============================================================================


class SetFeeDataEvent(VaultEvent):
    event_type: Literal["SetFeeData"] = "SetFeeData"
    performance_fee: int = Field(..., ge=0)
    management_fee: int = Field(..., ge=0)
    fee_recipient: str


class SetMaxValueInQuoteEvent(VaultEvent):
    event_type: Literal["SetMaxValueInQuote"] = "SetMaxValueInQuote"
    max_value_in_quote: int = Field(..., ge=0)


class SetSwapDelegateEvent(VaultEvent):
    event_type: Literal["SetSwapDelegate"] = "SetSwapDelegate"
    delegate: str
    allowed: bool
