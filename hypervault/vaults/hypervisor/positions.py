"""
Base/limit range management for the Hypervisor.

Kept as a mixin so the vault file stays focused on share accounting. Everything
here runs inside the caller's transaction; none of it opens one of its own.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from hypervault.core.constants import (
    BPS_DENOMINATOR,
    MAX_TICK,
    MAX_UINT128,
    MIN_TICK,
    ZERO_ADDRESS,
)
from hypervault.core.errors import ValidationError
from hypervault.core.utils.uniswap_v3_math import (
    amounts_for_liq,
    get_amount0_delta,
    get_amount1_delta,
    liq_for_amounts,
    mul_div,
    sqrt_price_x96_from_tick,
)

if TYPE_CHECKING:
    from hypervault.adapters.pool_adapter.adapter import PoolAdapter
    from hypervault.adapters.token_adapter.adapter import TokenAdapter
    from hypervault.vaults.hypervisor.shares import ShareLedger

_MAX_FIT_ATTEMPTS = 8


@dataclass(frozen=True)
class TickRange:
    tick_lower: int
    tick_upper: int

    @property
    def sqrt_lower(self) -> int:
        return sqrt_price_x96_from_tick(self.tick_lower)

    @property
    def sqrt_upper(self) -> int:
        return sqrt_price_x96_from_tick(self.tick_upper)


class PositionManagerMixin:
    address: str
    base: TickRange | None
    limit: TickRange | None
    protocol_fee_bps: int
    accrued_fee0: int
    accrued_fee1: int
    shares: ShareLedger
    pool_adapter: PoolAdapter
    tokens: TokenAdapter

    def _ranges(self) -> tuple[TickRange, ...]:
        return tuple(r for r in (self.base, self.limit) if r is not None)

    def _check_range(self, rng: TickRange) -> None:
        spacing = self.pool_adapter.pool.tick_spacing
        if rng.tick_lower >= rng.tick_upper:
            raise ValidationError(
                f"lower tick {rng.tick_lower} must be below upper tick {rng.tick_upper}"
            )
        if rng.tick_lower < MIN_TICK or rng.tick_upper > MAX_TICK:
            raise ValidationError(f"range {rng} outside the tick domain")
        if rng.tick_lower % spacing or rng.tick_upper % spacing:
            raise ValidationError(f"range {rng} not aligned to tick spacing {spacing}")

    # ── valuation ───────────────────────────────────────────────────────

    def _position(self, rng: TickRange | None) -> tuple[int, int, int]:
        if rng is None:
            return 0, 0, 0
        info = self.pool_adapter.position_info(rng.tick_lower, rng.tick_upper)
        sqrt_price, _ = self.pool_adapter.current_price()
        amount0, amount1 = amounts_for_liq(
            sqrt_price, rng.sqrt_lower, rng.sqrt_upper, info.liquidity
        )
        return (
            info.liquidity,
            amount0 + info.tokens_owed0,
            amount1 + info.tokens_owed1,
        )

    def get_base_position(self) -> tuple[int, int, int]:
        """``(liquidity, amount0, amount1)`` of the base range, owed tokens included."""
        return self._position(self.base)

    def get_limit_position(self) -> tuple[int, int, int]:
        return self._position(self.limit)

    def _available(self) -> tuple[int, int]:
        # idle tokens less protocol fees held back for the next rebalance
        idle0, idle1 = self.tokens.balances()
        return idle0 - self.accrued_fee0, idle1 - self.accrued_fee1

    def get_total_amounts(self) -> tuple[int, int]:
        idle0, idle1 = self._available()
        _, base0, base1 = self.get_base_position()
        _, limit0, limit1 = self.get_limit_position()
        return idle0 + base0 + limit0, idle1 + base1 + limit1

    # ── pool interaction ────────────────────────────────────────────────

    def _zero_burn(self) -> None:
        """Materialise accrued fees into tokens owed on every funded range."""
        for rng in self._ranges():
            info = self.pool_adapter.position_info(rng.tick_lower, rng.tick_upper)
            if info.liquidity > 0:
                self.pool_adapter.burn(rng.tick_lower, rng.tick_upper, 0)

    def _withdraw_all(self) -> tuple[int, int]:
        """Burn and collect both ranges into idle. Returns the fee portion."""
        self._zero_burn()
        fees0 = fees1 = 0
        for rng in self._ranges():
            info = self.pool_adapter.position_info(rng.tick_lower, rng.tick_upper)
            fees0 += info.tokens_owed0
            fees1 += info.tokens_owed1
            if info.liquidity > 0:
                self.pool_adapter.burn(rng.tick_lower, rng.tick_upper, info.liquidity)
            self.pool_adapter.collect(
                rng.tick_lower, rng.tick_upper, self.address, MAX_UINT128, MAX_UINT128
            )
        return fees0, fees1

    def _burn_share(
        self, rng: TickRange | None, shares: int, total_supply: int, to: str
    ) -> tuple[int, int]:
        if rng is None:
            return 0, 0
        info = self.pool_adapter.position_info(rng.tick_lower, rng.tick_upper)
        liquidity = mul_div(info.liquidity, shares, total_supply)
        fees0 = mul_div(info.tokens_owed0, shares, total_supply)
        fees1 = mul_div(info.tokens_owed1, shares, total_supply)
        burned0 = burned1 = 0
        if liquidity > 0:
            burned0, burned1 = self.pool_adapter.burn(
                rng.tick_lower, rng.tick_upper, liquidity
            )
        if burned0 + fees0 == 0 and burned1 + fees1 == 0:
            return 0, 0
        return self.pool_adapter.collect(
            rng.tick_lower, rng.tick_upper, to, burned0 + fees0, burned1 + fees1
        )

    def _mint_amounts(self, rng: TickRange, sqrt_price: int, liquidity: int) -> tuple[int, int]:
        # amounts the pool charges for ``liquidity``; rounded up like the pool
        lower, upper = rng.sqrt_lower, rng.sqrt_upper
        if sqrt_price < lower:
            return get_amount0_delta(lower, upper, liquidity, True), 0
        if sqrt_price < upper:
            return (
                get_amount0_delta(sqrt_price, upper, liquidity, True),
                get_amount1_delta(lower, sqrt_price, liquidity, True),
            )
        return 0, get_amount1_delta(lower, upper, liquidity, True)

    def _liquidity_for(self, rng: TickRange, amount0: int, amount1: int) -> int:
        sqrt_price, _ = self.pool_adapter.current_price()
        budget0, budget1 = amount0, amount1
        # the pool rounds owed amounts up; shrink the budget until it fits
        for _ in range(_MAX_FIT_ATTEMPTS):
            liquidity = liq_for_amounts(
                sqrt_price, rng.sqrt_lower, rng.sqrt_upper, budget0, budget1
            )
            if liquidity == 0:
                return 0
            need0, need1 = self._mint_amounts(rng, sqrt_price, liquidity)
            if need0 <= amount0 and need1 <= amount1:
                return liquidity
            budget0 = max(0, budget0 - max(0, need0 - amount0))
            budget1 = max(0, budget1 - max(0, need1 - amount1))
        return 0

    def _mint_max(self, rng: TickRange) -> int:
        idle0, idle1 = self._available()
        liquidity = self._liquidity_for(rng, idle0, idle1)
        if liquidity > 0:
            self.pool_adapter.mint(rng.tick_lower, rng.tick_upper, liquidity)
        return liquidity

    # ── operations ──────────────────────────────────────────────────────

    def _protocol_fee(self, fees0: int, fees1: int) -> tuple[int, int]:
        return (
            fees0 * self.protocol_fee_bps // BPS_DENOMINATOR,
            fees1 * self.protocol_fee_bps // BPS_DENOMINATOR,
        )

    def _compound(self) -> tuple[int, int]:
        """Collect owed fees, hold back the protocol fee, and re-mint the rest into base."""
        self._zero_burn()
        collected0 = collected1 = 0
        for rng in self._ranges():
            c0, c1 = self.pool_adapter.collect(
                rng.tick_lower, rng.tick_upper, self.address, MAX_UINT128, MAX_UINT128
            )
            collected0 += c0
            collected1 += c1

        fee0, fee1 = self._protocol_fee(collected0, collected1)
        self.accrued_fee0 += fee0
        self.accrued_fee1 += fee1

        reinvest0, reinvest1 = collected0 - fee0, collected1 - fee1
        if self.base is not None and (reinvest0 or reinvest1):
            liquidity = self._liquidity_for(self.base, reinvest0, reinvest1)
            if liquidity > 0:
                self.pool_adapter.mint(
                    self.base.tick_lower, self.base.tick_upper, liquidity
                )
        return collected0, collected1

    def _rebalance(
        self,
        new_base: TickRange,
        new_limit: TickRange,
        fee_recipient: str,
        swap_quantity: int,
    ) -> tuple[int, int]:
        self._check_range(new_base)
        self._check_range(new_limit)
        if new_base == new_limit:
            raise ValidationError("limit range must differ from base range")
        if fee_recipient == ZERO_ADDRESS:
            raise ValidationError("fee recipient is the zero address")

        fees0, fees1 = self._withdraw_all()

        if swap_quantity != 0:
            self.pool_adapter.swap(swap_quantity > 0, abs(swap_quantity))

        # fees held back by earlier compounds are paid out with this skim
        skim0, skim1 = self._protocol_fee(fees0, fees1)
        skim0 += self.accrued_fee0
        skim1 += self.accrued_fee1
        self.accrued_fee0 = self.accrued_fee1 = 0
        self.tokens.push(self.tokens.token0, fee_recipient, skim0)
        self.tokens.push(self.tokens.token1, fee_recipient, skim1)

        self.base = new_base
        self.limit = new_limit
        self._mint_max(new_base)
        self._mint_max(new_limit)
        return skim0, skim1
