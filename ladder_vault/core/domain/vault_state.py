"""
VaultState — Модель состояния vault

Immutable Pydantic модель, представляющая снапшот состояния vault:
- Учёт долей и чекпоинт стоимости (high-water mark)
- Параметры комиссий (FeeData)
- Параметры геометрического ладдера (LadderParams)
- Состояние размещения средств (FundsState)

Каждая операция строит новый экземпляр через model_copy и коммитит его
только в конце успешного выполнения (all-or-nothing).
"""

from enum import Enum
from typing import Final

from pydantic import BaseModel, Field, field_validator, model_validator

from ladder_vault.core.math.tick_math import MAX_TICK, MIN_TICK


# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Знаменатель ставок комиссий (100_000 = 100%)
FEE_PRECISION: Final[int] = 100_000

# Максимальная performance fee (50%)
MAX_PERFORMANCE_FEE: Final[int] = 50_000

# Максимальная management fee (5% в год)
MAX_MANAGEMENT_FEE: Final[int] = 5_000

# Management fee задана за год
SECONDS_PER_YEAR: Final[int] = 365 * 24 * 60 * 60

# Количество долей, навсегда заблокированных на адресе vault при первом mint
MINIMUM_LIQUIDITY: Final[int] = 1_000

# Точность value-per-share для peak high-water mark
VALUE_PER_SHARE_PRECISION: Final[int] = 10**18


# =============================================================================
# ENUMS
# =============================================================================


class FundsState(str, Enum):
    """
    Где находятся средства и выставлен ли ладдер.

    - VAULT: все средства на балансе vault, экспозиции нет
    - PASSIVE: средства в резерве market maker, ордеров нет
    - ACTIVE: средства в резерве, ладдер выставлен
    """

    VAULT = "VAULT"
    PASSIVE = "PASSIVE"
    ACTIVE = "ACTIVE"


# =============================================================================
# NESTED MODELS
# =============================================================================


class FeeData(BaseModel):
    """
    Параметры комиссий.

    Ставки — целые доли FEE_PRECISION. Management fee задана за год и
    начисляется пропорционально прошедшему времени.
    """

    performance_fee: int = Field(
        default=0, ge=0, le=MAX_PERFORMANCE_FEE, description="Performance fee (/FEE_PRECISION)"
    )
    management_fee: int = Field(
        default=0, ge=0, le=MAX_MANAGEMENT_FEE, description="Management fee в год (/FEE_PRECISION)"
    )
    fee_recipient: str = Field(..., min_length=1, description="Получатель fee-долей")
    use_peak_high_water_mark: bool = Field(
        default=False,
        description="Считать performance fee от пикового value-per-share, а не от последнего чекпоинта",
    )

    model_config = {"frozen": True}

    @field_validator("fee_recipient")
    @classmethod
    def validate_recipient_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("fee_recipient must not be blank")
        return v


class LadderParams(BaseModel):
    """
    Параметры геометрического ладдера.

    Ступень i имеет тик tick_index0 + i * tick_offset (цена base в quote).
    gas_hint и gas_price_hint передаются площадке без интерпретации.
    """

    tick_index0: int = Field(default=0, ge=MIN_TICK, le=MAX_TICK, description="Тик ступени 0")
    tick_offset: int = Field(default=1, ge=1, description="Геометрический шаг между ступенями (в тиках)")
    step_size: int = Field(default=1, ge=1, description="Сдвиг dual-оффера (в ступенях)")
    price_points: int = Field(default=0, ge=0, description="Длина ладдера")
    gas_hint: int = Field(default=0, ge=0, description="gasreq оффера на площадке")
    gas_price_hint: int = Field(default=0, ge=0, description="gasprice оффера на площадке")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_tick_range(self) -> "LadderParams":
        """Последняя ступень ладдера должна оставаться в допустимом диапазоне тиков."""
        if self.price_points > 0:
            last_tick = self.tick_index0 + self.tick_offset * (self.price_points - 1)
            if last_tick > MAX_TICK:
                raise ValueError(
                    f"last rung tick {last_tick} exceeds MAX_TICK {MAX_TICK}"
                )
        return self


# =============================================================================
# VAULT STATE MODEL
# =============================================================================


class VaultState(BaseModel):
    """
    Снапшот состояния vault.

    Immutable модель (frozen=True). Изменяется только операциями
    LadderVault через model_copy(update=...).
    """

    # Идентификация активов
    base_asset: str = Field(..., min_length=1, description="Base актив")
    quote_asset: str = Field(..., min_length=1, description="Quote актив")
    share_asset: str = Field(..., min_length=1, description="Токен долей vault")
    quote_scale: int = Field(
        ..., ge=1, description="Множитель выравнивания точности долей и quote"
    )

    # Учёт долей
    total_shares: int = Field(default=0, ge=0, description="Сумма всех балансов долей")

    # Чекпоинт стоимости
    last_value_in_quote: int = Field(default=0, ge=0, description="Стоимость пула на чекпоинте")
    last_checkpoint_time: int = Field(default=0, ge=0, description="Время чекпоинта (unix, сек)")
    peak_value_per_share: int = Field(
        default=0, ge=0, description="Пиковая стоимость доли (x VALUE_PER_SHARE_PRECISION)"
    )

    # Конфигурация
    fee_data: FeeData = Field(..., description="Параметры комиссий")
    max_value_in_quote: int = Field(default=0, ge=0, description="Лимит стоимости пула (quote)")
    funds_state: FundsState = Field(default=FundsState.VAULT, description="Размещение средств")
    ladder: LadderParams = Field(default_factory=LadderParams, description="Параметры ладдера")
    allowed_swap_delegates: frozenset[str] = Field(
        default_factory=frozenset, description="Делегаты, которым разрешён swap"
    )

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_assets_distinct(self) -> "VaultState":
        """Base, quote и токен долей — разные активы."""
        assets = {self.base_asset, self.quote_asset, self.share_asset}
        if len(assets) != 3:
            raise ValueError(
                f"base, quote and share assets must be distinct, got "
                f"{self.base_asset!r}, {self.quote_asset!r}, {self.share_asset!r}"
            )
        return self
