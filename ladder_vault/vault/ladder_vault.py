"""LadderVault — пул двух активов с долями, комиссиями и ладдером market making.

Поток операции депозита/вывода:
1. FeeAccrual: начисление fee-долей и чекпоинт стоимости
2. Share accounting: точные суммы, переводы, mint/burn долей
3. FundsStateMachine: пересчёт и перевыставление ладдера

Каждая операция вычисляет и валидирует всё до первого перевода, а новое
VaultState коммитится только после успешного выполнения. mint, burn и swap
защищены от повторного входа.
"""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from ladder_vault.core.config import VaultConfig
from ladder_vault.core.domain.errors import (
    CannotWithdrawPoolAsset,
    DepositExceedsMaxTotal,
    FeeTooHigh,
    InitialMintSharesMismatch,
    InsufficientFunds,
    InsufficientShares,
    InvalidAmount,
    InvalidLadderParams,
    QuoteAmountOverflow,
    ReentrantCall,
    SlippageExceeded,
    Unauthorized,
    UnauthorizedSwapDelegate,
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
)
from ladder_vault.core.domain.vault_state import (
    MAX_MANAGEMENT_FEE,
    MAX_PERFORMANCE_FEE,
    MINIMUM_LIQUIDITY,
    FeeData,
    FundsState,
    LadderParams,
    VaultState,
)
from ladder_vault.core.math.fixed_point import (
    ArithmeticOverflow,
    checked_add,
    safe_sub,
    validate_uint,
)
from ladder_vault.core.math.tick_math import quote_from_base
from ladder_vault.core.ports import AssetLedger, MarketMakingDelegate, PriceOracle, SwapDelegate
from ladder_vault.vault.event_log import EventLog
from ladder_vault.vault.fee_accrual import (
    FeeAccrual,
    FeeAccrualResult,
    checkpoint,
    value_in_quote,
    with_fee_shares,
)
from ladder_vault.vault.funds_state_machine import FundsStateMachine, PositionUpdateResult
from ladder_vault.vault.share_math import (
    MintAmounts,
    burn_amounts,
    initial_mint_amounts,
    mint_amounts_for_shares,
    shares_for_max_amounts,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MintResult:
    shares: int
    base_in: int
    quote_in: int


@dataclass(frozen=True)
class BurnResult:
    base_out: int
    quote_out: int


@dataclass(frozen=True)
class SwapResult:
    amount_out: int
    amount_in: int


def _validate_amounts(**amounts: int) -> None:
    """Все суммы операции — uint256.

    Raises:
        InvalidAmount: Если хотя бы одна сумма вне домена
    """
    for name, value in amounts.items():
        try:
            validate_uint(value, name)
        except (TypeError, ValueError) as e:
            raise InvalidAmount(str(e)) from e


@dataclass(frozen=True)
class _AccrualSnapshot:
    """Состояние после начисления комиссий и чекпоинта (ещё не закоммичено)."""

    accrual: FeeAccrualResult
    state: VaultState
    base_total: int
    quote_total: int


class LadderVault:
    """Vault двух активов с ладдером market making.

    Все суммы — целые в минимальных единицах активов. Время — unix секунды
    из clock.
    """

    def __init__(
        self,
        config: VaultConfig,
        ledger: AssetLedger,
        oracle: PriceOracle,
        delegate: MarketMakingDelegate,
        clock: Optional[Callable[[], int]] = None,
        event_log: Optional[EventLog] = None,
        fee_accrual: Optional[FeeAccrual] = None,
    ):
        """
        Args:
            config: конфигурация экземпляра
            ledger: леджер активов (включая токен долей)
            oracle: оракул тика
            delegate: market maker, держащий резерв
            clock: источник времени (по умолчанию time.time)
            event_log: журнал событий
            fee_accrual: калькулятор комиссий
        """
        self.config = config
        self.address = config.vault_address
        self.manager = config.manager
        self.ledger = ledger
        self.oracle = oracle
        self.delegate = delegate
        self.events = event_log or EventLog()
        self.fee_accrual = fee_accrual or FeeAccrual()
        self.funds = FundsStateMachine(
            vault_address=self.address, ledger=ledger, oracle=oracle, delegate=delegate
        )
        self._clock = clock or (lambda: int(time.time()))
        self._state = config.initial_state()
        self._entered = False

    # =========================================================================
    # QUERIES
    # =========================================================================

    @property
    def state(self) -> VaultState:
        return self._state

    def balance_of(self, holder: str) -> int:
        """Баланс долей держателя."""
        return self.ledger.balance_of(self._state.share_asset, holder)

    def get_vault_balances(self) -> tuple[int, int]:
        """Свободные (idle) base и quote в custody vault."""
        return (
            self.ledger.balance_of(self._state.base_asset, self.address),
            self.ledger.balance_of(self._state.quote_asset, self.address),
        )

    def get_reserve_balances(self) -> tuple[int, int]:
        """base и quote в резерве market maker."""
        return self.delegate.reserve_balances()

    def get_total_balances(self) -> tuple[int, int]:
        """Все средства пула: idle + резерв."""
        vault_base, vault_quote = self.get_vault_balances()
        reserve_base, reserve_quote = self.get_reserve_balances()
        return vault_base + reserve_base, vault_quote + reserve_quote

    def get_value_in_quote(self) -> tuple[int, int]:
        """Стоимость пула в quote и тик, по которому она посчитана."""
        tick = self.oracle.current_tick()
        base_total, quote_total = self.get_total_balances()
        return value_in_quote(base_total, quote_total, tick), tick

    def get_mint_amounts(self, max_base: int, max_quote: int) -> MintAmounts:
        """Предпросмотр mint: суммы и доли для max_base/max_quote.

        Учитывает ещё не начисленные комиссии, поэтому результат совпадает
        с тем, что mint потребует в том же блоке времени.
        """
        snapshot = self._accrue(self._clock())
        state = snapshot.state
        tick = snapshot.accrual.tick

        if state.total_shares == 0:
            return initial_mint_amounts(tick, max_base, max_quote, state.quote_scale)

        shares = shares_for_max_amounts(
            max_base, max_quote, snapshot.base_total, snapshot.quote_total, state.total_shares
        )
        base_in, quote_in = mint_amounts_for_shares(
            shares, snapshot.base_total, snapshot.quote_total, state.total_shares
        )
        return MintAmounts(base_amount=base_in, quote_amount=quote_in, shares=shares)

    def get_underlying_balances(self, shares: int) -> tuple[int, int]:
        """Предпросмотр burn: выплаты за shares с учётом начисленных комиссий."""
        snapshot = self._accrue(self._clock())
        amounts = burn_amounts(
            shares, snapshot.base_total, snapshot.quote_total, snapshot.state.total_shares
        )
        return amounts.base_amount, amounts.quote_amount

    # =========================================================================
    # SHARE ACCOUNTING
    # =========================================================================

    def mint(self, caller: str, shares: int, max_base: int, max_quote: int) -> MintResult:
        """Mint shares долей за base/quote вызывающего.

        Депозит забирается до начисления комиссий: если перевод не прошёл,
        ни комиссии, ни чекпоинт не фиксируются.

        Raises:
            InvalidAmount: сумма вне uint256
            ZeroAmount: shares == 0
            InitialMintSharesMismatch: первый mint с неверным числом долей
            SlippageExceeded: суммы больше max_base/max_quote
            QuoteAmountOverflow: переполнение при оценке стоимости
            DepositExceedsMaxTotal: стоимость пула превысит лимит
            InsufficientFunds: у вызывающего не хватает баланса или allowance
        """
        _validate_amounts(shares=shares, max_base=max_base, max_quote=max_quote)
        if shares == 0:
            raise ZeroAmount("Cannot mint zero shares")

        with self._non_reentrant():
            now = self._clock()
            snapshot = self._accrue(now)
            state = snapshot.state
            tick = snapshot.accrual.tick

            try:
                locked_shares = 0
                if state.total_shares == 0:
                    amounts = initial_mint_amounts(tick, max_base, max_quote, state.quote_scale)
                    if amounts.shares != shares:
                        raise InitialMintSharesMismatch(expected=amounts.shares, requested=shares)
                    base_in, quote_in = amounts.base_amount, amounts.quote_amount
                    locked_shares = MINIMUM_LIQUIDITY
                else:
                    base_in, quote_in = mint_amounts_for_shares(
                        shares, snapshot.base_total, snapshot.quote_total, state.total_shares
                    )

                if base_in > max_base or quote_in > max_quote:
                    raise SlippageExceeded(
                        f"Mint requires base={base_in} quote={quote_in}, "
                        f"max base={max_base} quote={max_quote}"
                    )

                deposit_value = checked_add(quote_in, quote_from_base(tick, base_in, round_up=True))
                new_value = checked_add(state.last_value_in_quote, deposit_value)
            except ArithmeticOverflow as e:
                raise QuoteAmountOverflow(str(e)) from e

            if new_value > state.max_value_in_quote:
                raise DepositExceedsMaxTotal(
                    current_value=state.last_value_in_quote,
                    deposit_value=deposit_value,
                    max_value=state.max_value_in_quote,
                )

            self._require_funds(caller, state.base_asset, base_in)
            self._require_funds(caller, state.quote_asset, quote_in)
            self._collect_deposit(caller, base_in, quote_in)

            # Депозит получен: эффекты
            self._mint_fee_shares(snapshot, now)
            self._state = state

            self.ledger.mint(state.share_asset, caller, shares)
            if locked_shares:
                self.ledger.mint(state.share_asset, self.address, locked_shares)

            self._state = state.model_copy(
                update={"total_shares": state.total_shares + shares + locked_shares}
            )
            self.events.emit(
                MintEvent(
                    ts=now,
                    user=caller,
                    shares=shares,
                    base_amount=base_in,
                    quote_amount=quote_in,
                    tick=tick,
                )
            )
            logger.info(
                "Mint: %s received %d shares for base=%d quote=%d (tick=%d)",
                caller, shares, base_in, quote_in, tick,
            )

            self._update_position(now)
            self._commit_checkpoint(new_value, now)

        return MintResult(shares=shares, base_in=base_in, quote_in=quote_in)

    def burn(self, caller: str, shares: int, min_base_out: int, min_quote_out: int) -> BurnResult:
        """Burn shares долей вызывающего в обмен на долю пула.

        Выплата переводится до сжигания долей: при ошибке перевода доли
        остаются у вызывающего.

        Raises:
            InvalidAmount: сумма вне uint256
            ZeroAmount: shares == 0
            InsufficientShares: у вызывающего меньше shares долей
            SlippageExceeded: выплаты меньше min_base_out/min_quote_out
        """
        _validate_amounts(shares=shares, min_base_out=min_base_out, min_quote_out=min_quote_out)
        if shares == 0:
            raise ZeroAmount("Cannot burn zero shares")

        with self._non_reentrant():
            balance = self.balance_of(caller)
            if balance < shares:
                raise InsufficientShares(f"{caller} holds {balance} shares, burning {shares}")

            now = self._clock()
            snapshot = self._accrue(now)
            state = snapshot.state
            tick = snapshot.accrual.tick

            amounts = burn_amounts(
                shares, snapshot.base_total, snapshot.quote_total, state.total_shares
            )
            base_out, quote_out = amounts.base_amount, amounts.quote_amount

            if base_out < min_base_out or quote_out < min_quote_out:
                raise SlippageExceeded(
                    f"Burn yields base={base_out} quote={quote_out}, "
                    f"min base={min_base_out} quote={min_quote_out}"
                )

            self._mint_fee_shares(snapshot, now)
            self._state = state

            self._withdraw_shortfall(base_out, quote_out)
            self.ledger.transfer(state.base_asset, self.address, caller, base_out)
            self.ledger.transfer(state.quote_asset, self.address, caller, quote_out)

            self.ledger.burn(state.share_asset, caller, shares)
            self._state = state.model_copy(update={"total_shares": state.total_shares - shares})

            self.events.emit(
                BurnEvent(
                    ts=now,
                    user=caller,
                    shares=shares,
                    base_amount=base_out,
                    quote_amount=quote_out,
                    tick=tick,
                )
            )
            logger.info(
                "Burn: %s redeemed %d shares for base=%d quote=%d (tick=%d)",
                caller, shares, base_out, quote_out, tick,
            )

            self._update_position(now)
            new_value, _ = self.get_value_in_quote()
            self._commit_checkpoint(new_value, now)

        return BurnResult(base_out=base_out, quote_out=quote_out)

    def accrue_fees(self) -> FeeAccrualResult:
        """Начисление комиссий и фиксация чекпоинта без mint/burn."""
        with self._non_reentrant():
            now = self._clock()
            snapshot = self._accrue(now)
            self._mint_fee_shares(snapshot, now)
            self._state = snapshot.state
            self.events.emit(
                UpdateLastValueInQuoteEvent(ts=now, value_in_quote=snapshot.state.last_value_in_quote)
            )
        return snapshot.accrual

    # =========================================================================
    # SWAP
    # =========================================================================

    def swap(
        self,
        caller: str,
        swap_delegate: SwapDelegate,
        amount_out: int,
        amount_in_min: int,
        sell: bool,
    ) -> SwapResult:
        """Обмен через разрешённый делегат (ребалансировка пула).

        sell=True: отдаём base, получаем quote; иначе наоборот.

        Полученная сумма измеряется по изменению баланса vault. Проверка
        amount_in_min выполняется после исполнения. При любой ошибке
        (включая SlippageExceeded) размещение средств восстанавливается
        по текущему funds_state, VaultState не меняется; сам обмен,
        уже исполненный делегатом, vault откатить не может.

        Raises:
            Unauthorized: вызывающий не manager
            UnauthorizedSwapDelegate: делегат не разрешён
            InvalidAmount: сумма вне uint256
            ZeroAmount: amount_out == 0
            SlippageExceeded: получено меньше amount_in_min
        """
        self._only_manager(caller)
        if swap_delegate.address not in self._state.allowed_swap_delegates:
            raise UnauthorizedSwapDelegate(f"Swap delegate {swap_delegate.address} is not allowed")
        _validate_amounts(amount_out=amount_out, amount_in_min=amount_in_min)
        if amount_out == 0:
            raise ZeroAmount("Cannot swap zero amount")

        with self._non_reentrant():
            now = self._clock()
            state = self._state
            asset_out, asset_in = (
                (state.base_asset, state.quote_asset) if sell else (state.quote_asset, state.base_asset)
            )

            try:
                if sell:
                    self._withdraw_shortfall(amount_out, 0)
                else:
                    self._withdraw_shortfall(0, amount_out)

                spent, received = self._execute_swap(swap_delegate, asset_out, asset_in, amount_out)

                if received < amount_in_min:
                    raise SlippageExceeded(
                        f"Swap received {received} {asset_in}, min {amount_in_min}"
                    )
            except Exception:
                logger.warning("Swap via %s failed, restoring funds placement", swap_delegate.address)
                self._update_position(now)
                raise

            base_change, quote_change = (-spent, received) if sell else (received, -spent)
            self.events.emit(
                SwapEvent(
                    ts=now,
                    delegate=swap_delegate.address,
                    base_change=base_change,
                    quote_change=quote_change,
                    sell=sell,
                )
            )
            logger.info(
                "Swap via %s: base %+d, quote %+d", swap_delegate.address, base_change, quote_change
            )

            self._update_position(now)

        return SwapResult(amount_out=spent, amount_in=received)

    # =========================================================================
    # CONFIGURATION (manager)
    # =========================================================================

    def set_fee_data(
        self,
        caller: str,
        performance_fee: int,
        management_fee: int,
        fee_recipient: str,
        use_peak_high_water_mark: Optional[bool] = None,
    ) -> None:
        """Новые ставки комиссий; комиссии по старым ставкам начисляются до смены.

        Raises:
            Unauthorized: вызывающий не manager
            FeeTooHigh: ставка выше максимума
            ZeroAddress: пустой получатель
        """
        self._only_manager(caller)
        _validate_amounts(performance_fee=performance_fee, management_fee=management_fee)
        if performance_fee > MAX_PERFORMANCE_FEE or management_fee > MAX_MANAGEMENT_FEE:
            raise FeeTooHigh(
                f"performance_fee={performance_fee} (max {MAX_PERFORMANCE_FEE}), "
                f"management_fee={management_fee} (max {MAX_MANAGEMENT_FEE})"
            )
        if not fee_recipient or not fee_recipient.strip():
            raise ZeroAddress("fee_recipient must be set")

        with self._non_reentrant():
            now = self._clock()
            snapshot = self._accrue(now)
            self._mint_fee_shares(snapshot, now)

            peak_mode = (
                snapshot.state.fee_data.use_peak_high_water_mark
                if use_peak_high_water_mark is None
                else use_peak_high_water_mark
            )
            fee_data = FeeData(
                performance_fee=performance_fee,
                management_fee=management_fee,
                fee_recipient=fee_recipient,
                use_peak_high_water_mark=peak_mode,
            )
            self._state = snapshot.state.model_copy(update={"fee_data": fee_data})

            self.events.emit(
                UpdateLastValueInQuoteEvent(ts=now, value_in_quote=snapshot.state.last_value_in_quote)
            )
            self.events.emit(
                SetFeeDataEvent(
                    ts=now,
                    performance_fee=performance_fee,
                    management_fee=management_fee,
                    fee_recipient=fee_recipient,
                )
            )
        logger.info(
            "Fee data set: performance=%d management=%d recipient=%s",
            performance_fee, management_fee, fee_recipient,
        )

    def set_max_value_in_quote(self, caller: str, max_value_in_quote: int) -> None:
        """Лимит стоимости пула для новых депозитов."""
        self._only_manager(caller)
        _validate_amounts(max_value_in_quote=max_value_in_quote)
        self._state = self._state.model_copy(update={"max_value_in_quote": max_value_in_quote})
        self.events.emit(
            SetMaxValueInQuoteEvent(ts=self._clock(), max_value_in_quote=max_value_in_quote)
        )
        logger.info("Max value in quote set to %d", max_value_in_quote)

    def set_position(self, caller: str, ladder: LadderParams, funds_state: FundsState) -> PositionUpdateResult:
        """Новые параметры ладдера и состояние размещения средств.

        Raises:
            Unauthorized: вызывающий не manager
            InvalidLadderParams: ACTIVE без ступеней ладдера
        """
        self._only_manager(caller)
        if funds_state == FundsState.ACTIVE and ladder.price_points == 0:
            raise InvalidLadderParams("ACTIVE funds state requires price_points > 0")

        with self._non_reentrant():
            now = self._clock()
            self._state = self._state.model_copy(update={"ladder": ladder, "funds_state": funds_state})
            self.events.emit(
                SetLadderPositionEvent(
                    ts=now,
                    tick_index0=ladder.tick_index0,
                    tick_offset=ladder.tick_offset,
                    step_size=ladder.step_size,
                    price_points=ladder.price_points,
                    gas_hint=ladder.gas_hint,
                    gas_price_hint=ladder.gas_price_hint,
                    funds_state=funds_state,
                )
            )
            logger.info("Ladder position set: %s, funds_state=%s", ladder, funds_state.value)
            return self._update_position(now)

    def update_position(self) -> PositionUpdateResult:
        """Явное применение текущего funds_state (идемпотентно)."""
        with self._non_reentrant():
            return self._update_position(self._clock())

    def allow_swap_delegate(self, caller: str, delegate_address: str) -> None:
        self._set_swap_delegate(caller, delegate_address, allowed=True)

    def disallow_swap_delegate(self, caller: str, delegate_address: str) -> None:
        self._set_swap_delegate(caller, delegate_address, allowed=False)

    def withdraw_asset(self, caller: str, asset: str, amount: int, recipient: str) -> None:
        """Аварийный вывод посторонних активов с адреса vault.

        Raises:
            CannotWithdrawPoolAsset: asset — base, quote или токен долей
        """
        self._only_manager(caller)
        _validate_amounts(amount=amount)
        state = self._state
        if asset in {state.base_asset, state.quote_asset, state.share_asset}:
            raise CannotWithdrawPoolAsset(f"{asset} belongs to the pool")
        if not recipient:
            raise ZeroAddress("recipient must be set")

        self.ledger.transfer(asset, self.address, recipient, amount)
        logger.info("Withdrew %d %s to %s", amount, asset, recipient)

    # =========================================================================
    # INTERNALS
    # =========================================================================

    @contextmanager
    def _non_reentrant(self) -> Iterator[None]:
        if self._entered:
            raise ReentrantCall("Vault operation already in progress")
        self._entered = True
        try:
            yield
        finally:
            self._entered = False

    def _only_manager(self, caller: str) -> None:
        if caller != self.manager:
            raise Unauthorized(f"{caller} is not the vault manager")

    def _accrue(self, now: int) -> _AccrualSnapshot:
        """Начисление комиссий и чекпоинт без эффектов."""
        tick = self.oracle.current_tick()
        base_total, quote_total = self.get_total_balances()
        accrual = self.fee_accrual.accrue(self._state, base_total, quote_total, tick, now)
        state = checkpoint(with_fee_shares(self._state, accrual), accrual.value_in_quote, now)
        return _AccrualSnapshot(
            accrual=accrual, state=state, base_total=base_total, quote_total=quote_total
        )

    def _mint_fee_shares(self, snapshot: _AccrualSnapshot, now: int) -> None:
        accrual = snapshot.accrual
        if accrual.fee_shares == 0:
            return

        recipient = snapshot.state.fee_data.fee_recipient
        self.ledger.mint(snapshot.state.share_asset, recipient, accrual.fee_shares)
        self.events.emit(
            AccrueFeesEvent(
                ts=now,
                fee_recipient=recipient,
                fee_shares=accrual.fee_shares,
                value_in_quote=accrual.value_in_quote,
            )
        )

    def _require_funds(self, caller: str, asset: str, amount: int) -> None:
        balance = self.ledger.balance_of(asset, caller)
        allowance = self.ledger.allowance(asset, caller, self.address)
        if balance < amount or allowance < amount:
            raise InsufficientFunds(
                f"{caller} has {balance} {asset} (allowance {allowance}), needs {amount}"
            )

    def _collect_deposit(self, caller: str, base_in: int, quote_in: int) -> None:
        """Перевод депозита в custody vault; base возвращается, если quote не прошёл."""
        state = self._state
        self.ledger.transfer_from(state.base_asset, self.address, caller, self.address, base_in)
        try:
            self.ledger.transfer_from(state.quote_asset, self.address, caller, self.address, quote_in)
        except Exception:
            self.ledger.transfer(state.base_asset, self.address, caller, base_in)
            raise

    def _execute_swap(
        self, swap_delegate: SwapDelegate, asset_out: str, asset_in: str, amount_out: int
    ) -> tuple[int, int]:
        """Исполнение обмена делегатом; (потрачено, получено) по балансам vault."""
        out_before = self.ledger.balance_of(asset_out, self.address)
        in_before = self.ledger.balance_of(asset_in, self.address)

        self.ledger.approve(asset_out, self.address, swap_delegate.address, amount_out)
        try:
            swap_delegate.execute_swap(self.address, asset_out, asset_in, amount_out)
        finally:
            self.ledger.approve(asset_out, self.address, swap_delegate.address, 0)

        spent = safe_sub(out_before, self.ledger.balance_of(asset_out, self.address))
        received = safe_sub(self.ledger.balance_of(asset_in, self.address), in_before)
        return spent, received

    def _commit_checkpoint(self, value: int, now: int) -> None:
        self._state = checkpoint(self._state, value, now)
        self.events.emit(UpdateLastValueInQuoteEvent(ts=now, value_in_quote=value))

    def _withdraw_shortfall(self, base_needed: int, quote_needed: int) -> None:
        """Довывод из резерва недостающих в custody vault сумм."""
        vault_base, vault_quote = self.get_vault_balances()
        base_shortfall = safe_sub(base_needed, vault_base)
        quote_shortfall = safe_sub(quote_needed, vault_quote)
        if base_shortfall == 0 and quote_shortfall == 0:
            return

        self.delegate.withdraw_funds(base_shortfall, quote_shortfall, self.address)
        logger.debug(
            "Withdrew shortfall from reserve: base=%d quote=%d", base_shortfall, quote_shortfall
        )

    def _update_position(self, now: int) -> PositionUpdateResult:
        result = self.funds.update_position(self._state)
        self.events.emit(
            PositionUpdateEvent(
                ts=now,
                funds_state=result.funds_state,
                posted=result.posted,
                reason=result.reason,
                bid_gives=result.bid_gives,
                ask_gives=result.ask_gives,
            )
        )
        return result

    def _set_swap_delegate(self, caller: str, delegate_address: str, allowed: bool) -> None:
        self._only_manager(caller)
        if not delegate_address:
            raise ZeroAddress("delegate address must be set")

        delegates = set(self._state.allowed_swap_delegates)
        if allowed:
            delegates.add(delegate_address)
        else:
            delegates.discard(delegate_address)

        self._state = self._state.model_copy(
            update={"allowed_swap_delegates": frozenset(delegates)}
        )
        self.events.emit(
            SetSwapDelegateEvent(ts=self._clock(), delegate=delegate_address, allowed=allowed)
        )
