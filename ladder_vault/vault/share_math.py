"""Share Math — расчёт сумм mint/burn с защитным округлением.

Правила округления:
- mint: суммы, которые вносит минтер, округляются ВВЕРХ
  (существующие держатели не разбавляются недоплатой)
- burn: выплаты округляются ВНИЗ
  (оставшиеся держатели не платят за выходящего)

Первый mint (пустой пул) оценивает вклад по тику оракула и навсегда
блокирует MINIMUM_LIQUIDITY долей на адресе vault.
"""

from dataclasses import dataclass

from ladder_vault.core.domain.vault_state import MINIMUM_LIQUIDITY
from ladder_vault.core.math.fixed_point import checked_add, checked_mul, mul_div, mul_div_up, safe_sub
from ladder_vault.core.math.tick_math import base_from_quote, quote_from_base


@dataclass(frozen=True)
class MintAmounts:
    """Суммы для mint."""

    base_amount: int
    quote_amount: int
    shares: int


@dataclass(frozen=True)
class BurnAmounts:
    """Выплаты для burn."""

    base_amount: int
    quote_amount: int


def initial_mint_amounts(
    tick: int, max_base: int, max_quote: int, quote_scale: int
) -> MintAmounts:
    """Суммы и доли первого mint в пустой пул.

    Связывающим ограничением становится тот актив, которого меньше по
    стоимости: сначала весь max_quote и эквивалентный base; если base не
    хватает — весь max_base и эквивалентный quote (округление вверх).

    shares = (quote_from_base(base) + quote) * quote_scale - MINIMUM_LIQUIDITY,
    с насыщением в 0.

    Raises:
        ArithmeticOverflow: Если стоимость вклада выходит за uint256
    """
    base_amount = base_from_quote(tick, max_quote)
    quote_amount = max_quote

    if base_amount > max_base:
        base_amount = max_base
        quote_amount = quote_from_base(tick, max_base, round_up=True)

    value = checked_add(quote_from_base(tick, base_amount), quote_amount)
    shares = safe_sub(checked_mul(value, quote_scale), MINIMUM_LIQUIDITY)

    return MintAmounts(base_amount=base_amount, quote_amount=quote_amount, shares=shares)


def mint_amounts_for_shares(
    shares: int, base_total: int, quote_total: int, total_shares: int
) -> tuple[int, int]:
    """Суммы, необходимые для mint shares в непустой пул (ceil).

    Returns:
        (base_in, quote_in)
    """
    return (
        mul_div_up(shares, base_total, total_shares),
        mul_div_up(shares, quote_total, total_shares),
    )


def shares_for_max_amounts(
    max_base: int, max_quote: int, base_total: int, quote_total: int, total_shares: int
) -> int:
    """Максимум долей, который покрывают max_base и max_quote (floor).

    Сторона с нулевым балансом пула не ограничивает количество долей.
    Если пул пуст по обеим сторонам при ненулевом supply — 0.
    """
    candidates = []
    if base_total > 0:
        candidates.append(mul_div(max_base, total_shares, base_total))
    if quote_total > 0:
        candidates.append(mul_div(max_quote, total_shares, quote_total))

    if not candidates:
        return 0
    return min(candidates)


def burn_amounts(
    shares: int, base_total: int, quote_total: int, total_shares: int
) -> BurnAmounts:
    """Выплаты за burn shares (floor)."""
    if total_shares == 0:
        return BurnAmounts(base_amount=0, quote_amount=0)

    return BurnAmounts(
        base_amount=mul_div(shares, base_total, total_shares),
        quote_amount=mul_div(shares, quote_total, total_shares),
    )
