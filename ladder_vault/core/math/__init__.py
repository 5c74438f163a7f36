"""
Core math modules для ladder_vault

Целочисленные примитивы фиксированной точки и тиковая математика.
"""

# Fixed-point safeguards
from ladder_vault.core.math.fixed_point import (
    # Domain bounds
    Q128,
    UINT256_MAX,
    # Exceptions
    ArithmeticOverflow,
    # Division
    ceil_div,
    mul_div,
    mul_div_up,
    # Saturating / checked
    checked_add,
    checked_mul,
    safe_sub,
    # Validation
    validate_uint,
)

# Tick math
from ladder_vault.core.math.tick_math import (
    MAX_TICK,
    MIN_TICK,
    base_from_quote,
    quote_from_base,
    ratio_at_tick,
    validate_tick,
)

__all__ = [
    # Fixed-point: Domain bounds
    "Q128",
    "UINT256_MAX",
    # Fixed-point: Exceptions
    "ArithmeticOverflow",
    # Fixed-point: Division
    "ceil_div",
    "mul_div",
    "mul_div_up",
    # Fixed-point: Saturating / checked
    "checked_add",
    "checked_mul",
    "safe_sub",
    # Fixed-point: Validation
    "validate_uint",
    # Tick math: Constants
    "MAX_TICK",
    "MIN_TICK",
    # Tick math: Functions
    "base_from_quote",
    "quote_from_base",
    "ratio_at_tick",
    "validate_tick",
]
