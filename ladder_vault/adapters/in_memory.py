"""
In-Memory Adapters — коллабораторы vault для симуляции и тестов

Реализации портов ladder_vault.core.ports без площадки и сети:
- InMemoryLedger: балансы и allowances активов, включая токен долей
- FixedTickOracle: тик, задаваемый вручную
- InMemoryMarketMaker: резерв market maker и последний выставленный ладдер
- OracleSwapDelegate: swap по цене оракула с настраиваемым haircut
"""

import logging
from collections import defaultdict
from typing import Callable, Optional

from ladder_vault.core.domain.distribution import Distribution, OfferSide
from ladder_vault.core.math.fixed_point import safe_sub
from ladder_vault.core.math.tick_math import base_from_quote, quote_from_base, validate_tick

logger = logging.getLogger(__name__)


# =============================================================================
# EXCEPTIONS
# =============================================================================


class LedgerError(Exception):
    """Ошибка перевода на леджере."""
    pass


class InsufficientBalance(LedgerError):
    pass


class InsufficientAllowance(LedgerError):
    pass


class VenueRejection(Exception):
    """Площадка отвергла ладдер."""
    pass


# =============================================================================
# LEDGER
# =============================================================================


class InMemoryLedger:
    """Балансы активов по держателям."""

    def __init__(self):
        self._balances: dict[tuple[str, str], int] = defaultdict(int)
        self._allowances: dict[tuple[str, str, str], int] = defaultdict(int)
        self._supply: dict[str, int] = defaultdict(int)

    def balance_of(self, asset: str, holder: str) -> int:
        return self._balances[(asset, holder)]

    def total_supply(self, asset: str) -> int:
        return self._supply[asset]

    def transfer(self, asset: str, sender: str, recipient: str, amount: int) -> None:
        self._check_amount(amount)
        balance = self._balances[(asset, sender)]
        if balance < amount:
            raise InsufficientBalance(
                f"{sender} has {balance} {asset}, transferring {amount}"
            )
        self._balances[(asset, sender)] = balance - amount
        self._balances[(asset, recipient)] += amount

    def transfer_from(
        self, asset: str, spender: str, owner: str, recipient: str, amount: int
    ) -> None:
        if spender == owner:
            self.transfer(asset, owner, recipient, amount)
            return

        allowed = self._allowances[(asset, owner, spender)]
        if allowed < amount:
            raise InsufficientAllowance(
                f"{spender} may spend {allowed} {asset} of {owner}, requested {amount}"
            )
        self.transfer(asset, owner, recipient, amount)
        self._allowances[(asset, owner, spender)] = allowed - amount

    def approve(self, asset: str, owner: str, spender: str, amount: int) -> None:
        self._check_amount(amount)
        self._allowances[(asset, owner, spender)] = amount

    def allowance(self, asset: str, owner: str, spender: str) -> int:
        return self._allowances[(asset, owner, spender)]

    def mint(self, asset: str, to: str, amount: int) -> None:
        self._check_amount(amount)
        self._balances[(asset, to)] += amount
        self._supply[asset] += amount

    def burn(self, asset: str, holder: str, amount: int) -> None:
        self._check_amount(amount)
        balance = self._balances[(asset, holder)]
        if balance < amount:
            raise InsufficientBalance(f"{holder} has {balance} {asset}, burning {amount}")
        self._balances[(asset, holder)] = balance - amount
        self._supply[asset] -= amount

    def _check_amount(self, amount: int) -> None:
        if amount < 0:
            raise LedgerError(f"amount must be non-negative, got {amount}")


# =============================================================================
# ORACLE
# =============================================================================


class FixedTickOracle:
    """Оракул с тиком, задаваемым вручную."""

    def __init__(self, tick: int = 0):
        validate_tick(tick)
        self.tick = tick

    def current_tick(self) -> int:
        return self.tick

    def set_tick(self, tick: int) -> None:
        validate_tick(tick)
        self.tick = tick


# =============================================================================
# MARKET MAKER
# =============================================================================


class InMemoryMarketMaker:
    """Резерв market maker и ладдер на условной площадке.

    Минимальный объём оффера: min_volume + volume_per_gas * gas_hint.
    fail_posts эмулирует отказ площадки при выставлении.
    """

    def __init__(
        self,
        address: str,
        ledger: InMemoryLedger,
        vault_address: str,
        base_asset: str,
        quote_asset: str,
        min_volume: int = 0,
        volume_per_gas: int = 0,
    ):
        self.address = address
        self.ledger = ledger
        self.vault_address = vault_address
        self.base_asset = base_asset
        self.quote_asset = quote_asset
        self.min_volume = min_volume
        self.volume_per_gas = volume_per_gas

        self.fail_posts = False
        self.posted: Optional[Distribution] = None
        self.post_count = 0
        self.retract_count = 0

    def deposit_funds(self, base_amount: int, quote_amount: int) -> None:
        self.ledger.transfer_from(
            self.base_asset, self.address, self.vault_address, self.address, base_amount
        )
        self.ledger.transfer_from(
            self.quote_asset, self.address, self.vault_address, self.address, quote_amount
        )

    def withdraw_funds(self, base_amount: int, quote_amount: int, recipient: str) -> None:
        self.ledger.transfer(self.base_asset, self.address, recipient, base_amount)
        self.ledger.transfer(self.quote_asset, self.address, recipient, quote_amount)

    def reserve_balances(self) -> tuple[int, int]:
        return (
            self.ledger.balance_of(self.base_asset, self.address),
            self.ledger.balance_of(self.quote_asset, self.address),
        )

    def post_ladder(self, distribution: Distribution) -> None:
        if self.fail_posts:
            raise VenueRejection("venue rejected ladder")
        if distribution.is_empty:
            raise VenueRejection("empty ladder")

        crossed = distribution.live_indices(OfferSide.BID) & distribution.live_indices(OfferSide.ASK)
        if crossed:
            raise VenueRejection(f"live bid and ask on the same rungs: {sorted(crossed)}")

        bid_min, ask_min = self.min_viable_volumes(0, 0)
        for offer in distribution.live_bids():
            if offer.gives < bid_min:
                raise VenueRejection(f"bid at index {offer.index} below min volume")
        for offer in distribution.live_asks():
            if offer.gives < ask_min:
                raise VenueRejection(f"ask at index {offer.index} below min volume")

        self.posted = distribution
        self.post_count += 1

    def retract_ladder(self) -> None:
        self.posted = None
        self.retract_count += 1

    def min_viable_volumes(self, gas_hint: int, gas_price_hint: int) -> tuple[int, int]:
        minimum = self.min_volume + self.volume_per_gas * gas_hint
        return minimum, minimum


# =============================================================================
# SWAP DELEGATE
# =============================================================================


class OracleSwapDelegate:
    """Swap по цене оракула минус haircut_bps.

    Делегат должен держать ликвидность asset_in на своём адресе.
    on_execute вызывается внутри swap (например, для проверки повторного входа).
    """

    def __init__(
        self,
        address: str,
        ledger: InMemoryLedger,
        oracle: FixedTickOracle,
        base_asset: str,
        haircut_bps: int = 0,
        on_execute: Optional[Callable[[], None]] = None,
    ):
        self.address = address
        self.ledger = ledger
        self.oracle = oracle
        self.base_asset = base_asset
        self.haircut_bps = haircut_bps
        self.on_execute = on_execute

    def execute_swap(
        self, vault_address: str, asset_out: str, asset_in: str, amount_out: int
    ) -> None:
        self.ledger.transfer_from(asset_out, self.address, vault_address, self.address, amount_out)

        if self.on_execute is not None:
            self.on_execute()

        tick = self.oracle.current_tick()
        if asset_out == self.base_asset:
            fair_in = quote_from_base(tick, amount_out)
        else:
            fair_in = base_from_quote(tick, amount_out)

        amount_in = safe_sub(fair_in, fair_in * self.haircut_bps // 10_000)
        self.ledger.transfer(asset_in, self.address, vault_address, amount_in)
        logger.debug("Swapped %d %s for %d %s", amount_out, asset_out, amount_in, asset_in)
