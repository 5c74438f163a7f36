"""
Vault Errors — таксономия ошибок операций vault

Каждая ошибка — отдельный тип, чтобы вызывающий код мог программно
различать категории:
- InputValidationError: некорректный ввод, состояние не изменено
- ConsistencyError: slippage / несовпадение расчётов, до любых переводов
- CapacityError: лимит депозитов или переполнение, до любых переводов
- ReentrantCall: повторный вход во время выполняющейся операции

Ошибки площадки при выставлении ладдера сюда не входят: они
обрабатываются локально (fallback на снятие ордеров) и не пробрасываются.
"""


class VaultError(Exception):
    """Базовая ошибка операций vault."""
    pass


# =============================================================================
# КАТЕГОРИИ
# =============================================================================


class InputValidationError(VaultError):
    """Некорректные входные данные."""
    pass


class ConsistencyError(VaultError):
    """Рассчитанные суммы вне границ, заданных вызывающим."""
    pass


class CapacityError(VaultError):
    """Превышение лимита стоимости пула или переполнение."""
    pass


class ReentrantCall(VaultError):
    """Повторный вход в mint/burn/swap во время выполняющейся операции."""
    pass


# =============================================================================
# INPUT VALIDATION
# =============================================================================


class ZeroAmount(InputValidationError):
    pass


class InvalidAmount(InputValidationError):
    """Сумма вне домена uint256 (отрицательная, слишком большая или не int)."""
    pass


class InsufficientFunds(InputValidationError):
    """У вызывающего не хватает баланса или allowance для vault."""
    pass


class ZeroAddress(InputValidationError):
    pass


class FeeTooHigh(InputValidationError):
    pass


class Unauthorized(InputValidationError):
    """Операция доступна только manager."""
    pass


class UnauthorizedSwapDelegate(InputValidationError):
    pass


class InvalidLadderParams(InputValidationError):
    pass


class InsufficientShares(InputValidationError):
    pass


class CannotWithdrawPoolAsset(InputValidationError):
    pass


# =============================================================================
# SLIPPAGE / CONSISTENCY
# =============================================================================


class SlippageExceeded(ConsistencyError):
    pass


class InitialMintSharesMismatch(ConsistencyError):
    """Запрошенные доли первого mint не совпадают с рассчитанными."""

    def __init__(self, expected: int, requested: int):
        self.expected = expected
        self.requested = requested
        super().__init__(
            f"Initial mint shares mismatch: computed {expected}, requested {requested}"
        )


# =============================================================================
# CAPACITY
# =============================================================================


class DepositExceedsMaxTotal(CapacityError):
    def __init__(self, current_value: int, deposit_value: int, max_value: int):
        self.current_value = current_value
        self.deposit_value = deposit_value
        self.max_value = max_value
        super().__init__(
            f"Deposit of {deposit_value} on top of {current_value} exceeds "
            f"max value in quote {max_value}"
        )


class QuoteAmountOverflow(CapacityError):
    pass
