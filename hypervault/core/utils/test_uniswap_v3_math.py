from __future__ import annotations

import pytest

from hypervault.core.constants import (
    MAX_SQRT_RATIO,
    MAX_TICK,
    MIN_SQRT_RATIO,
    MIN_TICK,
    Q96,
)
from hypervault.core.errors import ValidationError, VaultArithmeticError
from hypervault.core.utils.uniswap_v3_math import (
    amounts_for_liq,
    encode_price_sqrt,
    get_amount0_delta,
    get_amount1_delta,
    liq_for_amounts,
    mul_div,
    mul_div_rounding_up,
    price_x36,
    round_tick_down,
    round_tick_up,
    sqrt_price_x96_from_tick,
    tick_from_sqrt_price_x96,
    usable_tick_bounds,
)


def test_sqrt_price_at_domain_edges():
    assert sqrt_price_x96_from_tick(0) == Q96
    assert sqrt_price_x96_from_tick(MIN_TICK) == MIN_SQRT_RATIO
    assert sqrt_price_x96_from_tick(MAX_TICK) == MAX_SQRT_RATIO


def test_sqrt_price_rejects_out_of_domain_tick():
    with pytest.raises(ValidationError):
        sqrt_price_x96_from_tick(MAX_TICK + 1)
    with pytest.raises(ValidationError):
        sqrt_price_x96_from_tick(MIN_TICK - 1)


@pytest.mark.parametrize("tick", [MIN_TICK, -60, -1, 0, 1, 60, 887271])
def test_tick_from_sqrt_price_is_floor(tick):
    sqrt_price = sqrt_price_x96_from_tick(tick)
    assert tick_from_sqrt_price_x96(sqrt_price) == tick
    if tick > MIN_TICK:
        assert tick_from_sqrt_price_x96(sqrt_price - 1) == tick - 1


def test_tick_from_sqrt_price_domain():
    assert tick_from_sqrt_price_x96(MAX_SQRT_RATIO - 1) == MAX_TICK - 1
    with pytest.raises(ValidationError):
        tick_from_sqrt_price_x96(MAX_SQRT_RATIO)
    with pytest.raises(ValidationError):
        tick_from_sqrt_price_x96(MIN_SQRT_RATIO - 1)


def test_encode_price_sqrt_and_price_x36():
    assert encode_price_sqrt(1, 1) == Q96
    assert encode_price_sqrt(4, 1) == 2 * Q96
    assert price_x36(Q96) == 10**36
    assert price_x36(2 * Q96) == 4 * 10**36


def test_mul_div_rounding():
    assert mul_div(5, 3, 2) == 7
    assert mul_div_rounding_up(5, 3, 2) == 8
    assert mul_div_rounding_up(4, 3, 2) == 6
    with pytest.raises(VaultArithmeticError):
        mul_div(1, 1, 0)


def test_amount_deltas():
    liquidity = 10**18
    assert get_amount0_delta(Q96, 2 * Q96, liquidity, False) == liquidity // 2
    assert get_amount0_delta(2 * Q96, Q96, liquidity, True) == liquidity // 2
    assert get_amount1_delta(Q96, 2 * Q96, liquidity, False) == liquidity
    assert get_amount1_delta(Q96, Q96 + 1, 1, False) == 0
    assert get_amount1_delta(Q96, Q96 + 1, 1, True) == 1


def test_amounts_for_liq_by_price_position():
    sqrt_lower = sqrt_price_x96_from_tick(-600)
    sqrt_upper = sqrt_price_x96_from_tick(600)
    liquidity = 10**21

    below0, below1 = amounts_for_liq(
        sqrt_price_x96_from_tick(-1200), sqrt_lower, sqrt_upper, liquidity
    )
    above0, above1 = amounts_for_liq(
        sqrt_price_x96_from_tick(1200), sqrt_lower, sqrt_upper, liquidity
    )
    inside0, inside1 = amounts_for_liq(Q96, sqrt_lower, sqrt_upper, liquidity)

    assert below0 > 0 and below1 == 0
    assert above0 == 0 and above1 > 0
    assert 0 < inside0 < below0
    assert 0 < inside1 < above1


def test_liq_for_amounts_never_exceeds_budget():
    sqrt_lower = sqrt_price_x96_from_tick(-1800)
    sqrt_upper = sqrt_price_x96_from_tick(1800)
    amount0 = 1_000 * 10**18
    amount1 = 700 * 10**18

    liquidity = liq_for_amounts(Q96, sqrt_lower, sqrt_upper, amount0, amount1)
    used0, used1 = amounts_for_liq(Q96, sqrt_lower, sqrt_upper, liquidity)

    assert liquidity > 0
    assert used0 <= amount0
    assert used1 <= amount1
    # token1 is the binding side at a symmetric range
    assert amount1 - used1 < 10**6


def test_round_tick_helpers():
    assert round_tick_down(-23, 10) == -30
    assert round_tick_up(-23, 10) == -20
    assert round_tick_up(20, 10) == 20
    assert round_tick_down(23, 10) == 20
    assert usable_tick_bounds(60) == (-887220, 887220)
