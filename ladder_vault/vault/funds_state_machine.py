"""Funds State Machine — размещение средств vault и выставление ладдера.

Состояния (FundsState):
- VAULT: снять все офферы и вернуть весь резерв в custody vault
- PASSIVE: перевести свободные средства в резерв, снять все офферы
- ACTIVE: перевести свободные средства в резерв, спланировать ладдер и
  выставить его; при невалидном плане или ошибке площадки — снять офферы

Ошибка площадки при выставлении ладдера не пробрасывается: операция,
вызвавшая update_position, уже закоммичена и не откатывается из-за
побочного эффекта market making. Выставление возвращает PostOutcome,
а fallback на снятие — явная ветка.

update_position идемпотентна: повторный вызов без mint/burn/swap между
ними не даёт наблюдаемых изменений.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ladder_vault.core.domain.distribution import Distribution
from ladder_vault.core.domain.vault_state import FundsState, VaultState
from ladder_vault.core.ports import AssetLedger, MarketMakingDelegate, PriceOracle
from ladder_vault.vault.position_planner import PlannedDistribution, PositionPlanner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PostOutcome:
    """Результат попытки выставить ладдер."""

    ok: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class PositionUpdateResult:
    """Результат update_position."""

    funds_state: FundsState
    posted: bool
    reason: str

    # Для отладки
    planned: Optional[PlannedDistribution] = None
    post_outcome: Optional[PostOutcome] = None

    @property
    def bid_gives(self) -> int:
        return self.planned.bid_gives if self.planned is not None else 0

    @property
    def ask_gives(self) -> int:
        return self.planned.ask_gives if self.planned is not None else 0


class FundsStateMachine:
    """Применение FundsState к резерву market maker и площадке."""

    def __init__(
        self,
        vault_address: str,
        ledger: AssetLedger,
        oracle: PriceOracle,
        delegate: MarketMakingDelegate,
        planner: Optional[PositionPlanner] = None,
    ):
        """
        Args:
            vault_address: адрес custody vault на леджере
            ledger: леджер активов
            oracle: источник mid тика
            delegate: market maker, держащий резерв
            planner: планировщик ладдера (по умолчанию PositionPlanner)
        """
        self.vault_address = vault_address
        self.ledger = ledger
        self.oracle = oracle
        self.delegate = delegate
        self.planner = planner or PositionPlanner()

    def update_position(self, state: VaultState) -> PositionUpdateResult:
        """Привести размещение средств и ладдер к state.funds_state."""
        if state.funds_state == FundsState.ACTIVE:
            return self._apply_active(state)

        if state.funds_state == FundsState.PASSIVE:
            self._deposit_all_funds(state)
            self.delegate.retract_ladder()
            return self._create_result(state.funds_state, posted=False, reason="passive")

        # VAULT
        self.delegate.retract_ladder()
        self._withdraw_all_funds()
        return self._create_result(state.funds_state, posted=False, reason="vault")

    def plan(self, state: VaultState) -> PlannedDistribution:
        """План ладдера для текущего резерва и тика оракула."""
        reserve_base, reserve_quote = self.delegate.reserve_balances()
        min_volumes = self.delegate.min_viable_volumes(
            state.ladder.gas_hint, state.ladder.gas_price_hint
        )
        return self.planner.plan(
            ladder=state.ladder,
            mid_tick=self.oracle.current_tick(),
            reserve_base=reserve_base,
            reserve_quote=reserve_quote,
            min_volumes=min_volumes,
        )

    def _apply_active(self, state: VaultState) -> PositionUpdateResult:
        self._deposit_all_funds(state)
        planned = self.plan(state)

        if not planned.valid:
            self.delegate.retract_ladder()
            return self._create_result(
                state.funds_state,
                posted=False,
                reason=f"invalid_distribution: {planned.reason}",
                planned=planned,
            )

        outcome = self._try_post(planned.distribution)
        if not outcome.ok:
            self.delegate.retract_ladder()
            return self._create_result(
                state.funds_state,
                posted=False,
                reason=f"post_failed: {outcome.error}",
                planned=planned,
                post_outcome=outcome,
            )

        return self._create_result(
            state.funds_state,
            posted=True,
            reason="posted",
            planned=planned,
            post_outcome=outcome,
        )

    def _try_post(self, distribution: Distribution) -> PostOutcome:
        """Выставление ладдера; любая ошибка площадки становится PostOutcome."""
        try:
            self.delegate.post_ladder(distribution)
        except Exception as e:
            logger.warning("Ladder post rejected by venue, retracting: %s", e)
            return PostOutcome(ok=False, error=str(e) or type(e).__name__)
        return PostOutcome(ok=True)

    def _deposit_all_funds(self, state: VaultState) -> None:
        """Перевод всех свободных base/quote из custody vault в резерв."""
        base_idle = self.ledger.balance_of(state.base_asset, self.vault_address)
        quote_idle = self.ledger.balance_of(state.quote_asset, self.vault_address)
        if base_idle == 0 and quote_idle == 0:
            return

        self.ledger.approve(state.base_asset, self.vault_address, self.delegate.address, base_idle)
        self.ledger.approve(state.quote_asset, self.vault_address, self.delegate.address, quote_idle)
        self.delegate.deposit_funds(base_idle, quote_idle)
        logger.debug("Swept idle funds into reserve: base=%d quote=%d", base_idle, quote_idle)

    def _withdraw_all_funds(self) -> None:
        """Возврат всего резерва в custody vault."""
        reserve_base, reserve_quote = self.delegate.reserve_balances()
        if reserve_base == 0 and reserve_quote == 0:
            return

        self.delegate.withdraw_funds(reserve_base, reserve_quote, self.vault_address)
        logger.debug(
            "Withdrew reserve to vault: base=%d quote=%d", reserve_base, reserve_quote
        )

    def _create_result(
        self,
        funds_state: FundsState,
        posted: bool,
        reason: str,
        planned: Optional[PlannedDistribution] = None,
        post_outcome: Optional[PostOutcome] = None,
    ) -> PositionUpdateResult:
        """Создание результата update_position."""
        return PositionUpdateResult(
            funds_state=funds_state,
            posted=posted,
            reason=reason,
            planned=planned,
            post_outcome=post_outcome,
        )
