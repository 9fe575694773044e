"""Uniswap v3 math helpers.

Integer tick/price/liquidity conversions shared by the vault and the simulated
pool. Rounding follows the on-chain libraries so that a position valued here
matches what burning the same liquidity returns.
"""

from __future__ import annotations

import math

from hypervault.core.constants import (
    MAX_SQRT_RATIO,
    MAX_TICK,
    MIN_SQRT_RATIO,
    MIN_TICK,
    PRECISION,
    Q96,
)
from hypervault.core.errors import ValidationError, VaultArithmeticError

Q32 = 1 << 32


def mul_div(a: int, b: int, denominator: int) -> int:
    if denominator == 0:
        raise VaultArithmeticError("division by zero")
    return (a * b) // denominator


def mul_div_rounding_up(a: int, b: int, denominator: int) -> int:
    if denominator == 0:
        raise VaultArithmeticError("division by zero")
    q, r = divmod(a * b, denominator)
    return q + 1 if r else q


def price_to_sqrt_price_x96(price: float, decimals0: int, decimals1: int) -> int:
    scale = 10 ** (decimals1 - decimals0)
    p = price * scale
    sqrtp = math.sqrt(p)
    return int(sqrtp * (1 << 96))


def encode_price_sqrt(reserve1: int, reserve0: int) -> int:
    """sqrt(reserve1 / reserve0) as a Q64.96, computed without floats."""
    if reserve0 <= 0 or reserve1 <= 0:
        raise ValidationError("reserves must be positive")
    return math.isqrt((reserve1 << 192) // reserve0)


def price_x36(sqrt_price_x96: int) -> int:
    """token1 per token0, scaled by 1e36."""
    return mul_div(sqrt_price_x96 * sqrt_price_x96, PRECISION, 1 << 192)


def round_tick_down(tick: int, spacing: int) -> int:
    # Python's // floors toward -inf
    return (tick // spacing) * spacing


def round_tick_up(tick: int, spacing: int) -> int:
    remainder = tick % spacing
    if remainder == 0:
        return tick
    return tick + (spacing - remainder)


def usable_tick_bounds(spacing: int) -> tuple[int, int]:
    return round_tick_up(MIN_TICK, spacing), round_tick_down(MAX_TICK, spacing)


def sqrt_price_x96_from_tick(
    tick: int, *, min_tick: int = MIN_TICK, max_tick: int = MAX_TICK
) -> int:
    if tick < min_tick or tick > max_tick:
        raise ValidationError(f"tick {tick} out of range [{min_tick}, {max_tick}]")

    abs_tick = tick if tick >= 0 else -tick
    ratio = 0x100000000000000000000000000000000

    if abs_tick & 0x1:
        ratio = (ratio * 0xFFFCB933BD6FAD37AA2D162D1A594001) >> 128
    if abs_tick & 0x2:
        ratio = (ratio * 0xFFF97272373D413259A46990580E213A) >> 128
    if abs_tick & 0x4:
        ratio = (ratio * 0xFFF2E50F5F656932EF12357CF3C7FDCC) >> 128
    if abs_tick & 0x8:
        ratio = (ratio * 0xFFE5CACA7E10E4E61C3624EAA0941CD0) >> 128
    if abs_tick & 0x10:
        ratio = (ratio * 0xFFCB9843D60F6159C9DB58835C926644) >> 128
    if abs_tick & 0x20:
        ratio = (ratio * 0xFF973B41FA98C081472E6896DFB254C0) >> 128
    if abs_tick & 0x40:
        ratio = (ratio * 0xFF2EA16466C96A3843EC78B326B52861) >> 128
    if abs_tick & 0x80:
        ratio = (ratio * 0xFE5DEE046A99A2A811C461F1969C3053) >> 128
    if abs_tick & 0x100:
        ratio = (ratio * 0xFCBE86C7900A88AEDCFFC83B479AA3A4) >> 128
    if abs_tick & 0x200:
        ratio = (ratio * 0xF987A7253AC413176F2B074CF7815E54) >> 128
    if abs_tick & 0x400:
        ratio = (ratio * 0xF3392B0822B70005940C7A398E4B70F3) >> 128
    if abs_tick & 0x800:
        ratio = (ratio * 0xE7159475A2C29B7443B29C7FA6E889D9) >> 128
    if abs_tick & 0x1000:
        ratio = (ratio * 0xD097F3BDFD2022B8845AD8F792AA5825) >> 128
    if abs_tick & 0x2000:
        ratio = (ratio * 0xA9F746462D870FDF8A65DC1F90E061E5) >> 128
    if abs_tick & 0x4000:
        ratio = (ratio * 0x70D869A156D2A1B890BB3DF62BAF32F7) >> 128
    if abs_tick & 0x8000:
        ratio = (ratio * 0x31BE135F97D08FD981231505542FCFA6) >> 128
    if abs_tick & 0x10000:
        ratio = (ratio * 0x9AA508B5B7A84E1C677DE54F3E99BC9) >> 128
    if abs_tick & 0x20000:
        ratio = (ratio * 0x5D6AF8DEDB81196699C329225EE604) >> 128
    if abs_tick & 0x40000:
        ratio = (ratio * 0x2216E584F5FA1EA926041BEDFE98) >> 128
    if abs_tick & 0x80000:
        ratio = (ratio * 0x48A170391F7DC42444E8FA2) >> 128

    if tick > 0:
        ratio = ((1 << 256) - 1) // ratio

    sqrt_price_x96 = ratio >> 32
    if ratio & (Q32 - 1):
        sqrt_price_x96 += 1
    return int(sqrt_price_x96)


def tick_from_sqrt_price_x96(sqrt_price_x96: int) -> int:
    """Greatest tick whose sqrt ratio does not exceed ``sqrt_price_x96``."""
    if sqrt_price_x96 < MIN_SQRT_RATIO or sqrt_price_x96 >= MAX_SQRT_RATIO:
        raise ValidationError(f"sqrt price {sqrt_price_x96} out of range")
    lo, hi = MIN_TICK, MAX_TICK
    while lo < hi:
        mid = (lo + hi + 1) // 2
        if sqrt_price_x96_from_tick(mid) <= sqrt_price_x96:
            lo = mid
        else:
            hi = mid - 1
    return lo


def get_amount0_delta(sqrt_a: int, sqrt_b: int, liquidity: int, round_up: bool) -> int:
    a, b = _sorted_bounds(sqrt_a, sqrt_b)
    if a <= 0:
        raise VaultArithmeticError("sqrt price must be positive")
    numerator1 = liquidity << 96
    numerator2 = b - a
    if round_up:
        return mul_div_rounding_up(mul_div_rounding_up(numerator1, numerator2, b), 1, a)
    return mul_div(numerator1, numerator2, b) // a


def get_amount1_delta(sqrt_a: int, sqrt_b: int, liquidity: int, round_up: bool) -> int:
    a, b = _sorted_bounds(sqrt_a, sqrt_b)
    if round_up:
        return mul_div_rounding_up(liquidity, b - a, Q96)
    return mul_div(liquidity, b - a, Q96)


def amt0_for_liq(sqrt_a: int, sqrt_b: int, liquidity: int) -> int:
    return get_amount0_delta(sqrt_a, sqrt_b, liquidity, False)


def amt1_for_liq(sqrt_a: int, sqrt_b: int, liquidity: int) -> int:
    return get_amount1_delta(sqrt_a, sqrt_b, liquidity, False)


def liq_for_amt0(sqrt_a: int, sqrt_b: int, amount0: int) -> int:
    a, b = _sorted_bounds(sqrt_a, sqrt_b)
    if a == b:
        return 0
    intermediate = mul_div(a, b, Q96)
    return mul_div(amount0, intermediate, b - a)


def liq_for_amt1(sqrt_a: int, sqrt_b: int, amount1: int) -> int:
    a, b = _sorted_bounds(sqrt_a, sqrt_b)
    if a == b:
        return 0
    return mul_div(amount1, Q96, b - a)


def liq_for_amounts(
    sqrt_p: int, sqrt_a: int, sqrt_b: int, amount0: int, amount1: int
) -> int:
    a, b = _sorted_bounds(sqrt_a, sqrt_b)
    if sqrt_p <= a:
        return liq_for_amt0(a, b, amount0)
    if sqrt_p >= b:
        return liq_for_amt1(a, b, amount1)
    L0 = liq_for_amt0(sqrt_p, b, amount0)
    L1 = liq_for_amt1(a, sqrt_p, amount1)
    return min(L0, L1)


def amounts_for_liq(
    sqrt_p: int, sqrt_a: int, sqrt_b: int, liquidity: int
) -> tuple[int, int]:
    a, b = _sorted_bounds(sqrt_a, sqrt_b)
    if sqrt_p <= a:
        amount0 = amt0_for_liq(a, b, liquidity)
        amount1 = 0
    elif sqrt_p < b:
        amount0 = amt0_for_liq(sqrt_p, b, liquidity)
        amount1 = amt1_for_liq(a, sqrt_p, liquidity)
    else:
        amount0 = 0
        amount1 = amt1_for_liq(a, b, liquidity)
    return amount0, amount1


def _sorted_bounds(sqrt_a: int, sqrt_b: int) -> tuple[int, int]:
    a, b = sorted((int(sqrt_a), int(sqrt_b)))
    return a, b
