"""
Tick Math — точная конверсия сумм между base и quote по ценовому тику

Цена кодируется целым тиком: price = 1.0001 ** tick (quote за единицу base).

Модуль обеспечивает:
- Точное детерминированное вычисление ratio(tick) в Q128.128
- Конверсию base → quote и quote → base с явным направлением округления
- Валидацию диапазона тиков

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. ratio_at_tick(0) == Q128 ровно (конверсия при тике 0 без потерь)
2. ratio_at_tick монотонно растёт по tick
3. Округление вверх используется для оценки стоимости (fee valuation),
   округление вниз — для выплат
4. Float не участвует в денежных расчётах
"""

from functools import lru_cache
from typing import Final

from ladder_vault.core.math.fixed_point import Q128, mul_div, mul_div_up

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Допустимый диапазон тиков (1.0001 ** 887272 ~ 2 ** 128)
MIN_TICK: Final[int] = -887272
MAX_TICK: Final[int] = 887272

# Внутренняя точность возведения в степень (Q256)
_EXP_PRECISION_BITS: Final[int] = 256
_ONE_X256: Final[int] = 1 << _EXP_PRECISION_BITS
_TICK_BASE_X256: Final[int] = (10001 << _EXP_PRECISION_BITS) // 10000


# =============================================================================
# ВАЛИДАЦИЯ
# =============================================================================


def validate_tick(tick: int) -> None:
    """
    Проверка, что тик — целое в [MIN_TICK, MAX_TICK].

    Raises:
        TypeError: Если tick не int
        ValueError: Если tick вне диапазона
    """
    if isinstance(tick, bool) or not isinstance(tick, int):
        raise TypeError(f"tick must be an int, got {type(tick).__name__}")

    if tick < MIN_TICK or tick > MAX_TICK:
        raise ValueError(f"tick {tick} out of range [{MIN_TICK}, {MAX_TICK}]")


# =============================================================================
# RATIO
# =============================================================================


@lru_cache(maxsize=4096)
def ratio_at_tick(tick: int) -> int:
    """
    Цена 1.0001 ** tick в формате Q128.128.

    Возведение в степень бинарным методом в Q256 с финальным сдвигом
    до Q128. Для отрицательных тиков берётся обратное значение.

    Args:
        tick: Ценовой тик в [MIN_TICK, MAX_TICK]

    Returns:
        floor(1.0001 ** tick * 2 ** 128) с точностью до ошибки округления Q256

    Examples:
        >>> ratio_at_tick(0) == 1 << 128
        True
    """
    validate_tick(tick)

    result = _ONE_X256
    power = _TICK_BASE_X256
    remaining = abs(tick)

    while remaining:
        if remaining & 1:
            result = (result * power) >> _EXP_PRECISION_BITS
        power = (power * power) >> _EXP_PRECISION_BITS
        remaining >>= 1

    if tick >= 0:
        return result >> (_EXP_PRECISION_BITS - 128)

    # 1 / x в Q128: 2**128 / (result / 2**256)
    return (1 << (_EXP_PRECISION_BITS + 128)) // result


# =============================================================================
# КОНВЕРСИЯ СУММ
# =============================================================================


def quote_from_base(tick: int, base_amount: int, round_up: bool = False) -> int:
    """
    Конверсия base → quote по цене тика: base_amount * 1.0001 ** tick.

    Args:
        tick: Ценовой тик
        base_amount: Сумма в base
        round_up: Округлять вверх (для оценки стоимости) или вниз

    Returns:
        Эквивалент в quote
    """
    ratio = ratio_at_tick(tick)
    if round_up:
        return mul_div_up(base_amount, ratio, Q128)
    return mul_div(base_amount, ratio, Q128)


def base_from_quote(tick: int, quote_amount: int, round_up: bool = False) -> int:
    """
    Конверсия quote → base по цене тика: quote_amount / 1.0001 ** tick.

    Args:
        tick: Ценовой тик
        quote_amount: Сумма в quote
        round_up: Округлять вверх или вниз

    Returns:
        Эквивалент в base
    """
    ratio = ratio_at_tick(tick)
    if round_up:
        return mul_div_up(quote_amount, Q128, ratio)
    return mul_div(quote_amount, Q128, ratio)
