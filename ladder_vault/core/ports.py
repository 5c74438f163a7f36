"""
Ports — контракты внешних коллабораторов

Ядро не реализует площадку, оракул, леджер и market maker: оно только
описывает, какие операции ему нужны. Все значения запрашиваются заново
на каждую операцию (без кэширования между операциями).
"""

from typing import Protocol, runtime_checkable

from ladder_vault.core.domain.distribution import Distribution


@runtime_checkable
class PriceOracle(Protocol):
    """Источник текущего ценового тика (price = 1.0001 ** tick)."""

    def current_tick(self) -> int:
        ...


@runtime_checkable
class AssetLedger(Protocol):
    """Балансы активов, включая токен долей vault."""

    def balance_of(self, asset: str, holder: str) -> int:
        ...

    def transfer(self, asset: str, sender: str, recipient: str, amount: int) -> None:
        ...

    def transfer_from(
        self, asset: str, spender: str, owner: str, recipient: str, amount: int
    ) -> None:
        ...

    def approve(self, asset: str, owner: str, spender: str, amount: int) -> None:
        ...

    def allowance(self, asset: str, owner: str, spender: str) -> int:
        ...

    def mint(self, asset: str, to: str, amount: int) -> None:
        ...

    def burn(self, asset: str, holder: str, amount: int) -> None:
        ...


@runtime_checkable
class MarketMakingDelegate(Protocol):
    """Делегат, держащий резерв и физически выставляющий ладдер.

    deposit_funds забирает средства с vault по allowance на address.
    """

    address: str

    def deposit_funds(self, base_amount: int, quote_amount: int) -> None:
        ...

    def withdraw_funds(self, base_amount: int, quote_amount: int, recipient: str) -> None:
        ...

    def reserve_balances(self) -> tuple[int, int]:
        ...

    def post_ladder(self, distribution: Distribution) -> None:
        """Может бросить исключение, если площадка отвергла ладдер."""
        ...

    def retract_ladder(self) -> None:
        ...

    def min_viable_volumes(self, gas_hint: int, gas_price_hint: int) -> tuple[int, int]:
        """Минимальные объёмы (bid, ask) для офферов с данными gas hints."""
        ...


@runtime_checkable
class SwapDelegate(Protocol):
    """Внешний исполнитель swap.

    Забирает amount_out актива asset_out с vault (по allowance) и
    переводит на vault некоторое количество asset_in.
    """

    address: str

    def execute_swap(
        self, vault_address: str, asset_out: str, asset_in: str, amount_out: int
    ) -> None:
        ...
