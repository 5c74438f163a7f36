"""PositionPlanner — геометрический ладдер bid/ask офферов.

Ступень i имеет тик tick_index0 + i * tick_offset. Алгоритм:
1. first_ask_index — первая ступень с тиком >= mid_tick (или price_points)
2. Живые bids на [0, bid_bound), bid_bound = first_ask_index - ceil(step/2),
   ограничен сверху price_points - step_size (нужно место для dual ask)
3. Живые asks на [max(first_ask_index + floor(step/2), step), price_points)
4. Каждому живому офферу — dual-плейсхолдер (gives=0) на другой стороне:
   для bid на min(index + step, price_points - 1), для ask на max(index - step, 0)
5. Равный размер ступени на стороне: резерв // число живых ступеней
6. Ладдер валиден, только если обе стороны непусты и не меньше
   минимального объёма площадки

Дыра в половину step_size вокруг mid не даёт живому офферу и dual
другой стороны занять одну ступень.
"""

import logging
from dataclasses import dataclass

from ladder_vault.core.domain.distribution import Distribution, DistributionOffer
from ladder_vault.core.domain.vault_state import LadderParams
from ladder_vault.core.math.fixed_point import safe_sub

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlannedDistribution:
    """Результат планирования ладдера."""

    distribution: Distribution
    valid: bool

    first_ask_index: int
    live_bid_count: int
    live_ask_count: int
    bid_gives: int
    ask_gives: int

    # Диагностика
    reason: str


# =============================================================================
# ГРАНИЦЫ
# =============================================================================


def compute_first_ask_index(
    tick_index0: int, tick_offset: int, price_points: int, mid_tick: int
) -> int:
    """Первая ступень, тик которой >= mid_tick; price_points, если таких нет."""
    tick = tick_index0
    for index in range(price_points):
        if tick >= mid_tick:
            return index
        tick += tick_offset
    return price_points


def transport_destination_ask(index: int, step_size: int, price_points: int) -> int:
    """Индекс dual ask для живого bid."""
    return min(index + step_size, price_points - 1)


def transport_destination_bid(index: int, step_size: int) -> int:
    """Индекс dual bid для живого ask."""
    return max(index - step_size, 0)


def live_bounds(first_ask_index: int, step_size: int, price_points: int) -> tuple[int, int]:
    """Границы живых офферов.

    Returns:
        (bid_bound, first_live_ask): живые bids на [0, bid_bound),
        живые asks на [first_live_ask, price_points)
    """
    # При нечётном step_size пропускаем лишний bid
    bid_hole = step_size // 2 + step_size % 2
    bid_bound = safe_sub(first_ask_index, bid_hole)

    # Для bid выше этой границы нет места под dual ask
    bid_bound = min(bid_bound, safe_sub(price_points, step_size))

    first_live_ask = max(first_ask_index + step_size // 2, step_size)
    return bid_bound, first_live_ask


# =============================================================================
# ГЕНЕРАЦИЯ
# =============================================================================


def create_geometric_distribution(
    tick_index0: int,
    tick_offset: int,
    first_ask_index: int,
    bid_gives: int,
    ask_gives: int,
    price_points: int,
    step_size: int,
) -> Distribution:
    """Ладдер с живыми офферами и их dual-плейсхолдерами."""
    bid_bound, first_live_ask = live_bounds(first_ask_index, step_size, price_points)

    bids: list[DistributionOffer] = []
    asks: list[DistributionOffer] = []

    for index in range(bid_bound):
        bids.append(
            DistributionOffer(
                index=index,
                tick=-(tick_index0 + tick_offset * index),
                gives=bid_gives,
            )
        )
        dual_index = transport_destination_ask(index, step_size, price_points)
        asks.append(
            DistributionOffer(
                index=dual_index,
                tick=tick_index0 + tick_offset * dual_index,
                gives=0,
            )
        )

    for index in range(first_live_ask, price_points):
        asks.append(
            DistributionOffer(
                index=index,
                tick=tick_index0 + tick_offset * index,
                gives=ask_gives,
            )
        )
        dual_index = transport_destination_bid(index, step_size)
        bids.append(
            DistributionOffer(
                index=dual_index,
                tick=-(tick_index0 + tick_offset * dual_index),
                gives=0,
            )
        )

    return Distribution(bids=tuple(bids), asks=tuple(asks))


def plan_distribution(
    tick_index0: int,
    tick_offset: int,
    step_size: int,
    price_points: int,
    mid_tick: int,
    reserve_base: int,
    reserve_quote: int,
    min_bid_volume: int = 0,
    min_ask_volume: int = 0,
) -> PlannedDistribution:
    """Полный план ладдера для текущего mid и резерва.

    bids отдают quote, asks отдают base. Сторона без живых ступеней не
    делится (gives=0) и делает план невалидным.
    """
    first_ask_index = compute_first_ask_index(tick_index0, tick_offset, price_points, mid_tick)
    bid_bound, first_live_ask = live_bounds(first_ask_index, step_size, price_points)

    live_bid_count = bid_bound
    live_ask_count = safe_sub(price_points, first_live_ask)

    bid_gives = reserve_quote // live_bid_count if live_bid_count > 0 else 0
    ask_gives = reserve_base // live_ask_count if live_ask_count > 0 else 0

    distribution = create_geometric_distribution(
        tick_index0=tick_index0,
        tick_offset=tick_offset,
        first_ask_index=first_ask_index,
        bid_gives=bid_gives,
        ask_gives=ask_gives,
        price_points=price_points,
        step_size=step_size,
    )

    if live_bid_count == 0 or live_ask_count == 0:
        valid = False
        reason = f"no_live_rungs: bids={live_bid_count}, asks={live_ask_count}"
    elif bid_gives == 0 or bid_gives < min_bid_volume:
        valid = False
        reason = f"bid_below_min_volume: gives={bid_gives}, min={min_bid_volume}"
    elif ask_gives == 0 or ask_gives < min_ask_volume:
        valid = False
        reason = f"ask_below_min_volume: gives={ask_gives}, min={min_ask_volume}"
    else:
        valid = True
        reason = "ok"

    logger.debug(
        "Planned ladder: first_ask_index=%d bids=%d x %d asks=%d x %d valid=%s (%s)",
        first_ask_index,
        live_bid_count,
        bid_gives,
        live_ask_count,
        ask_gives,
        valid,
        reason,
    )

    return PlannedDistribution(
        distribution=distribution,
        valid=valid,
        first_ask_index=first_ask_index,
        live_bid_count=live_bid_count,
        live_ask_count=live_ask_count,
        bid_gives=bid_gives,
        ask_gives=ask_gives,
        reason=reason,
    )


class PositionPlanner:
    """Планировщик ладдера по параметрам vault."""

    def plan(
        self,
        ladder: LadderParams,
        mid_tick: int,
        reserve_base: int,
        reserve_quote: int,
        min_volumes: tuple[int, int] = (0, 0),
    ) -> PlannedDistribution:
        """План ладдера.

        Args:
            ladder: параметры ладдера
            mid_tick: текущий тик оракула
            reserve_base: base в резерве market maker
            reserve_quote: quote в резерве market maker
            min_volumes: минимальные объёмы площадки (bid, ask)
        """
        min_bid_volume, min_ask_volume = min_volumes
        return plan_distribution(
            tick_index0=ladder.tick_index0,
            tick_offset=ladder.tick_offset,
            step_size=ladder.step_size,
            price_points=ladder.price_points,
            mid_tick=mid_tick,
            reserve_base=reserve_base,
            reserve_quote=reserve_quote,
            min_bid_volume=min_bid_volume,
            min_ask_volume=min_ask_volume,
        )
