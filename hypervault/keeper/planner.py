"""Range planner for the vault keeper.

Pure: given the pool price and the vault's holdings it returns the base and
limit ranges a keeper should pass to ``rebalance``. The base range is centred on
the current tick; the limit range sits on the side that can absorb what an ideal
base deployment leaves over (above the price for surplus token0, below it for
surplus token1), so it is always single-sided and never equal to the base.
"""

from __future__ import annotations

from hypervault.core.constants import PRECISION
from hypervault.core.errors import ValidationError
from hypervault.core.models import RebalancePlan, TickRangeModel
from hypervault.core.utils.uniswap_v3_math import (
    amounts_for_liq,
    liq_for_amounts,
    mul_div,
    price_x36,
    round_tick_down,
    round_tick_up,
    sqrt_price_x96_from_tick,
    usable_tick_bounds,
)


def _clamp(tick: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, tick))


def _base_range(tick: int, spacing: int, width: int) -> tuple[int, int]:
    lo, hi = usable_tick_bounds(spacing)
    half = width // 2
    lower = _clamp(round_tick_down(tick - half, spacing), lo, hi)
    upper = _clamp(round_tick_up(tick + half, spacing), lo, hi)
    if upper <= lower:
        if lower + spacing <= hi:
            upper = lower + spacing
        else:
            lower = upper - spacing
    return lower, upper


def _limit_range(
    tick: int, spacing: int, width: int, above: bool
) -> tuple[int, int, bool]:
    lo, hi = usable_tick_bounds(spacing)
    width = max(spacing, round_tick_up(width, spacing))
    above_lower = round_tick_down(tick, spacing) + spacing
    below_upper = round_tick_down(tick, spacing)
    # fall back to the other side when the preferred one runs off the domain
    if above and above_lower + width > hi:
        above = False
    elif not above and below_upper - width < lo:
        above = True
    if above:
        return above_lower, min(hi, above_lower + width), True
    return max(lo, below_upper - width), below_upper, False


def plan_rebalance(
    sqrt_price_x96: int,
    tick: int,
    tick_spacing: int,
    total0: int,
    total1: int,
    *,
    base_width_ticks: int,
    limit_width_ticks: int,
    swap_hint: int = 0,
) -> RebalancePlan:
    if tick_spacing <= 0:
        raise ValidationError("tick spacing must be positive")
    if base_width_ticks <= 0 or limit_width_ticks <= 0:
        raise ValidationError("range widths must be positive")

    base_lower, base_upper = _base_range(tick, tick_spacing, base_width_ticks)
    liquidity = liq_for_amounts(
        sqrt_price_x96,
        sqrt_price_x96_from_tick(base_lower),
        sqrt_price_x96_from_tick(base_upper),
        total0,
        total1,
    )
    used0, used1 = amounts_for_liq(
        sqrt_price_x96,
        sqrt_price_x96_from_tick(base_lower),
        sqrt_price_x96_from_tick(base_upper),
        liquidity,
    )
    surplus0 = max(0, total0 - used0)
    surplus1 = max(0, total1 - used1)
    surplus0_in_token1 = mul_div(surplus0, price_x36(sqrt_price_x96), PRECISION)

    limit_lower, limit_upper, above = _limit_range(
        tick, tick_spacing, limit_width_ticks, surplus0_in_token1 >= surplus1
    )
    return RebalancePlan(
        base=TickRangeModel(tick_lower=base_lower, tick_upper=base_upper),
        limit=TickRangeModel(tick_lower=limit_lower, tick_upper=limit_upper),
        limit_side="above" if above else "below",
        surplus0=surplus0,
        surplus1=surplus1,
        swap_hint=swap_hint,
    )
