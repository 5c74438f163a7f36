"""FeeAccrual — начисление management и performance fee разбавлением долей.

Формулы:
    value_in_quote = quote_total + quote_from_base(tick, base_total, round_up=True)
    growth = max(0, value_in_quote - baseline)
    elapsed = max(0, now - last_checkpoint_time)

    fee_value = (growth * performance_fee * YEAR + value_in_quote * management_fee * elapsed)
                // (FEE_PRECISION * YEAR)
    fee_shares = fee_value * total_shares // (value_in_quote - fee_value)

После mint fee_shares доля получателя равна fee_value / value_in_quote
стоимости пула до комиссии.

Двухшаговый протокол: accrue() только вычисляет; фиксация долей и
чекпоинта — отдельные явные шаги (with_fee_shares, checkpoint), чтобы
вызывающий код мог использовать value_in_quote до коммита.
"""

import logging
from dataclasses import dataclass

from ladder_vault.core.domain.vault_state import (
    FEE_PRECISION,
    SECONDS_PER_YEAR,
    VALUE_PER_SHARE_PRECISION,
    VaultState,
)
from ladder_vault.core.math.fixed_point import mul_div, safe_sub
from ladder_vault.core.math.tick_math import quote_from_base

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeeAccrualResult:
    """Результат начисления комиссий."""

    fee_shares: int
    value_in_quote: int
    tick: int

    # Диагностика
    fee_value: int
    growth: int
    elapsed: int


def value_in_quote(base_amount: int, quote_amount: int, tick: int) -> int:
    """Стоимость пула в quote; base конвертируется с округлением вверх."""
    return quote_amount + quote_from_base(tick, base_amount, round_up=True)


class FeeAccrual:
    """Расчёт fee-долей для текущего состояния vault.

    Никогда не бросает исключений на вырожденных входах: нулевой supply
    или нулевая стоимость дают fee_shares == 0.
    """

    def accrue(
        self,
        state: VaultState,
        base_total: int,
        quote_total: int,
        tick: int,
        now: int,
    ) -> FeeAccrualResult:
        """Вычисление fee-долей без изменения состояния.

        Args:
            state: текущее состояние vault
            base_total: base в custody vault + в резерве
            quote_total: quote в custody vault + в резерве
            tick: текущий тик оракула
            now: текущее время (unix, сек)

        Returns:
            FeeAccrualResult
        """
        current_value = value_in_quote(base_total, quote_total, tick)
        growth = safe_sub(current_value, self._baseline(state))
        elapsed = safe_sub(now, state.last_checkpoint_time)

        fee_data = state.fee_data
        has_performance = growth > 0 and fee_data.performance_fee > 0
        has_management = (
            current_value > 0 and fee_data.management_fee > 0 and elapsed > 0
        )

        fee_value = 0
        if has_performance or has_management:
            fee_value = (
                growth * fee_data.performance_fee * SECONDS_PER_YEAR
                + current_value * fee_data.management_fee * elapsed
            ) // (FEE_PRECISION * SECONDS_PER_YEAR)

        fee_shares = 0
        if fee_value > 0 and state.total_shares > 0 and current_value > fee_value:
            fee_shares = mul_div(fee_value, state.total_shares, current_value - fee_value)

        return FeeAccrualResult(
            fee_shares=fee_shares,
            value_in_quote=current_value,
            tick=tick,
            fee_value=fee_value,
            growth=growth,
            elapsed=elapsed,
        )

    def _baseline(self, state: VaultState) -> int:
        """База для performance fee.

        По умолчанию — последний чекпоинт. В режиме peak high-water mark
        дополнительно не ниже пиковой стоимости доли на текущем supply.
        """
        if not state.fee_data.use_peak_high_water_mark:
            return state.last_value_in_quote

        peak_value = mul_div(
            state.peak_value_per_share, state.total_shares, VALUE_PER_SHARE_PRECISION
        )
        return max(state.last_value_in_quote, peak_value)


def with_fee_shares(state: VaultState, result: FeeAccrualResult) -> VaultState:
    """Состояние после mint fee-долей получателю."""
    if result.fee_shares == 0:
        return state

    logger.info(
        "Accrued %d fee shares to %s (fee_value=%d, value_in_quote=%d)",
        result.fee_shares,
        state.fee_data.fee_recipient,
        result.fee_value,
        result.value_in_quote,
    )
    return state.model_copy(update={"total_shares": state.total_shares + result.fee_shares})


def checkpoint(state: VaultState, value: int, now: int) -> VaultState:
    """Фиксация чекпоинта стоимости и обновление пика value-per-share."""
    peak = state.peak_value_per_share
    if state.total_shares > 0:
        peak = max(peak, mul_div(value, VALUE_PER_SHARE_PRECISION, state.total_shares))

    return state.model_copy(
        update={
            "last_value_in_quote": value,
            "last_checkpoint_time": now,
            "peak_value_per_share": peak,
        }
    )
