"""
Distribution — эфемерное описание ладдера офферов

Пересчитывается на каждый update_position и никогда не сохраняется.
bids и asks имеют одинаковую длину: каждому живому офферу одной стороны
соответствует dual-плейсхолдер (gives=0) на другой стороне.
"""

from dataclasses import dataclass, field
from enum import Enum


class OfferSide(str, Enum):
    """Сторона оффера."""

    BID = "bid"
    ASK = "ask"


@dataclass(frozen=True)
class DistributionOffer:
    """Одна ступень ладдера.

    tick — тик с точки зрения тейкера: для ask это цена base в quote,
    для bid — обратная цена (-tick ступени).
    """

    index: int
    tick: int
    gives: int

    @property
    def is_live(self) -> bool:
        return self.gives > 0


@dataclass(frozen=True)
class Distribution:
    """Полный ладдер: живые офферы и их dual-плейсхолдеры."""

    bids: tuple[DistributionOffer, ...] = field(default_factory=tuple)
    asks: tuple[DistributionOffer, ...] = field(default_factory=tuple)

    def live_bids(self) -> list[DistributionOffer]:
        return [offer for offer in self.bids if offer.is_live]

    def live_asks(self) -> list[DistributionOffer]:
        return [offer for offer in self.asks if offer.is_live]

    @property
    def is_empty(self) -> bool:
        return not self.bids and not self.asks

    def live_indices(self, side: OfferSide) -> set[int]:
        offers = self.bids if side == OfferSide.BID else self.asks
        return {offer.index for offer in offers if offer.is_live}
