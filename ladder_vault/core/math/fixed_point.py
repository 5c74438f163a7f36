"""
Fixed-Point Safeguards — целочисленная арифметика в домене uint256

Все суммы (активы, доли, стоимость в quote) — неотрицательные целые в
диапазоне [0, 2**256 - 1]. Модуль даёт безопасные примитивы:
- Деление с явным направлением округления (floor / ceil)
- Saturating вычитание (никогда не уходит в минус)
- Checked сложение/умножение с детекцией переполнения uint256
- Валидация входных сумм

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Направление округления всегда задаётся явно вызывающим кодом
2. Деление на ноль никогда не происходит молча (ZeroDivisionError)
3. Результат никогда не выходит за пределы uint256 без исключения
4. Все операции детерминированы (только int, без float)
"""

from typing import Final

# =============================================================================
# ГРАНИЦЫ ДОМЕНА
# =============================================================================

# Максимальное значение uint256
UINT256_MAX: Final[int] = 2**256 - 1

# Q128: единица фиксированной точки для ratio тиков
Q128: Final[int] = 1 << 128


class ArithmeticOverflow(OverflowError):
    """Результат операции вышел за пределы uint256."""
    pass


# =============================================================================
# ВАЛИДАЦИЯ
# =============================================================================


def validate_uint(value: int, name: str) -> None:
    """
    Проверка, что значение — целое в домене uint256.

    Args:
        value: Проверяемое значение
        name: Имя параметра для сообщения об ошибке

    Raises:
        TypeError: Если значение не int (bool тоже отвергается)
        ValueError: Если значение отрицательное или больше UINT256_MAX
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")

    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")

    if value > UINT256_MAX:
        raise ValueError(f"{name} exceeds uint256 range, got {value}")


# =============================================================================
# ДЕЛЕНИЕ С ЯВНЫМ ОКРУГЛЕНИЕМ
# =============================================================================


def ceil_div(numerator: int, denominator: int) -> int:
    """
    Целочисленное деление с округлением вверх.

    Args:
        numerator: Числитель (>= 0)
        denominator: Знаменатель (> 0)

    Returns:
        ceil(numerator / denominator)

    Raises:
        ZeroDivisionError: Если denominator == 0

    Examples:
        >>> ceil_div(10, 3)
        4
        >>> ceil_div(9, 3)
        3
        >>> ceil_div(0, 7)
        0
    """
    if denominator == 0:
        raise ZeroDivisionError("ceil_div by zero")
    return -(-numerator // denominator)


def mul_div(a: int, b: int, denominator: int) -> int:
    """
    floor(a * b / denominator) без промежуточной потери точности.

    Python int не ограничен, поэтому промежуточное произведение точное;
    ограничение uint256 проверяется только для результата.

    Raises:
        ZeroDivisionError: Если denominator == 0
        ArithmeticOverflow: Если результат > UINT256_MAX
    """
    if denominator == 0:
        raise ZeroDivisionError("mul_div by zero")
    return _check_range(a * b // denominator)


def mul_div_up(a: int, b: int, denominator: int) -> int:
    """
    ceil(a * b / denominator).

    Используется везде, где округление должно защищать пул
    (например, суммы, которые вносит минтер).

    Raises:
        ZeroDivisionError: Если denominator == 0
        ArithmeticOverflow: Если результат > UINT256_MAX
    """
    return _check_range(ceil_div(a * b, denominator))


# =============================================================================
# SATURATING / CHECKED ОПЕРАЦИИ
# =============================================================================


def safe_sub(a: int, b: int) -> int:
    """
    Saturating вычитание: max(a - b, 0).

    Examples:
        >>> safe_sub(10, 3)
        7
        >>> safe_sub(3, 10)
        0
    """
    return a - b if a > b else 0


def checked_add(*values: int) -> int:
    """
    Сложение с детекцией переполнения uint256.

    Raises:
        ArithmeticOverflow: Если сумма > UINT256_MAX
    """
    return _check_range(sum(values))


def checked_mul(a: int, b: int) -> int:
    """
    Умножение с детекцией переполнения uint256.

    Raises:
        ArithmeticOverflow: Если произведение > UINT256_MAX
    """
    return _check_range(a * b)


def _check_range(value: int) -> int:
    if value > UINT256_MAX:
        raise ArithmeticOverflow(f"value {value} exceeds uint256 range")
    return value
