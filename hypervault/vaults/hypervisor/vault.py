"""Hypervisor: a two-range liquidity vault issuing fungible shares.

Depositors receive shares valued against the vault's idle balance plus the
redeemable value of its base and limit positions. The owner (keeper) moves the
ranges with ``rebalance`` and folds accrued fees back in with ``compound``;
the protocol fee on compounded fees is held back and paid at the next rebalance.
"""

from __future__ import annotations

from typing import Any

from hypervault.adapters.pool_adapter.adapter import PoolAdapter
from hypervault.adapters.token_adapter.adapter import TokenAdapter
from hypervault.core.adapters.decorators import only_owner
from hypervault.core.chain import Chain, Contract, atomic
from hypervault.core.constants import BPS_DENOMINATOR, PRECISION, ZERO_ADDRESS
from hypervault.core.errors import (
    AuthorizationError,
    ValidationError,
    VaultArithmeticError,
)
from hypervault.core.interfaces import PositionInterface
from hypervault.core.models import VaultSettings
from hypervault.core.utils.uniswap_v3_math import (
    mul_div,
    price_x36,
    sqrt_price_x96_from_tick,
)
from hypervault.vaults.hypervisor.positions import PositionManagerMixin, TickRange
from hypervault.vaults.hypervisor.shares import ShareLedger


class Hypervisor(PositionManagerMixin, Contract):
    storage = (
        "base",
        "limit",
        "deposit0_max",
        "deposit1_max",
        "max_total_supply",
        "protocol_fee_bps",
        "accrued_fee0",
        "accrued_fee1",
        "whitelisted_address",
        "shares",
    )

    def __init__(
        self,
        chain: Chain,
        pool: PositionInterface,
        owner: str,
        *,
        settings: VaultSettings | None = None,
        label: str = "hypervisor",
    ):
        super().__init__(chain, label)
        settings = settings or VaultSettings()
        self.pool = pool
        self.owner = owner
        self.token0 = pool.token0
        self.token1 = pool.token1
        self.tokens = TokenAdapter(self.token0, self.token1, holder=self.address)
        self.pool_adapter = PoolAdapter(pool, owner=self.address, tokens=self.tokens)

        self.base: TickRange | None = None
        self.limit: TickRange | None = None
        self.deposit0_max = settings.deposit0_max
        self.deposit1_max = settings.deposit1_max
        self.max_total_supply = settings.max_total_supply
        self.protocol_fee_bps = settings.protocol_fee_bps
        self.accrued_fee0 = 0
        self.accrued_fee1 = 0
        self.whitelisted_address: str | None = None
        self.shares = ShareLedger()

    # ── queries ─────────────────────────────────────────────────────────

    @property
    def total_supply(self) -> int:
        return self.shares.total_supply

    def balance_of(self, holder: str) -> int:
        return self.shares.balance_of(holder)

    def allowance(self, owner: str, spender: str) -> int:
        return self.shares.allowance(owner, spender)

    def current_tick(self) -> int:
        _, tick = self.pool_adapter.current_price()
        return tick

    def base_range(self) -> TickRange | None:
        return self.base

    def limit_range(self) -> TickRange | None:
        return self.limit

    def _share_price(self) -> int:
        # token1 per token0 at the current tick, scaled by PRECISION
        return price_x36(sqrt_price_x96_from_tick(self.current_tick()))

    # ── deposit ─────────────────────────────────────────────────────────

    @atomic
    def deposit(
        self,
        caller: str,
        deposit0: int,
        deposit1: int,
        to: str,
        payer: str | None = None,
    ) -> int:
        payer = payer or caller
        if deposit0 < 0 or deposit1 < 0:
            raise ValidationError("deposit amounts must be non-negative")
        if deposit0 == 0 and deposit1 == 0:
            raise ValidationError("deposit amounts are both zero")
        if to in (ZERO_ADDRESS, self.address):
            raise ValidationError(f"invalid share recipient {to}")
        if self.whitelisted_address and caller != self.whitelisted_address:
            raise AuthorizationError(f"{caller} is not the whitelisted depositor")
        if payer != caller and caller != self.whitelisted_address:
            raise AuthorizationError(f"{caller} may not deposit on behalf of {payer}")

        self._zero_burn()
        total0, total1 = self.get_total_amounts()
        if total0 + deposit0 > self.deposit0_max:
            raise ValidationError("token0 deposit ceiling exceeded")
        if total1 + deposit1 > self.deposit1_max:
            raise ValidationError("token1 deposit ceiling exceeded")

        price = self._share_price()
        supply = self.shares.total_supply
        shares = deposit1 + mul_div(deposit0, price, PRECISION)
        if supply != 0:
            pool_value = mul_div(total0, price, PRECISION) + total1
            if pool_value == 0:
                raise VaultArithmeticError("vault has supply but no value")
            shares = mul_div(shares, supply, pool_value)
        if shares == 0:
            raise VaultArithmeticError("deposit is too small to mint a share")
        if self.max_total_supply and supply + shares > self.max_total_supply:
            raise ValidationError("max total supply exceeded")

        self.tokens.pull(self.token0, payer, deposit0)
        self.tokens.pull(self.token1, payer, deposit1)
        self.shares.mint(to, shares)
        self.logger.info(
            f"Deposit {deposit0}/{deposit1} from {payer} minted {shares} shares to {to}"
        )
        return shares

    # ── withdraw ────────────────────────────────────────────────────────

    @atomic
    def withdraw(self, caller: str, shares: int, to: str, owner: str) -> tuple[int, int]:
        if shares <= 0:
            raise ValidationError("shares must be positive")
        if to == ZERO_ADDRESS:
            raise ValidationError("withdraw to the zero address")
        supply = self.shares.total_supply
        if supply == 0:
            raise ValidationError("vault has no shares outstanding")
        if caller != owner:
            self.shares.spend_allowance(owner, caller, shares)
        balance = self.shares.balance_of(owner)
        if balance < shares:
            raise ValidationError(f"shares {shares} exceed balance {balance}")

        self._zero_burn()
        idle0, idle1 = self._available()
        unused0 = mul_div(idle0, shares, supply)
        unused1 = mul_div(idle1, shares, supply)

        base0, base1 = self._burn_share(self.base, shares, supply, to)
        limit0, limit1 = self._burn_share(self.limit, shares, supply, to)
        self.tokens.push(self.token0, to, unused0)
        self.tokens.push(self.token1, to, unused1)

        self.shares.burn(owner, shares)
        amount0 = base0 + limit0 + unused0
        amount1 = base1 + limit1 + unused1
        self.logger.info(
            f"Withdraw {shares} shares of {owner} paid {amount0}/{amount1} to {to}"
        )
        return amount0, amount1

    # ── keeper operations ───────────────────────────────────────────────

    @atomic
    @only_owner
    def rebalance(
        self,
        caller: str,
        base_lower: int,
        base_upper: int,
        limit_lower: int,
        limit_upper: int,
        fee_recipient: str,
        swap_quantity: int = 0,
    ) -> tuple[int, int]:
        new_base = TickRange(base_lower, base_upper)
        new_limit = TickRange(limit_lower, limit_upper)
        skim0, skim1 = self._rebalance(new_base, new_limit, fee_recipient, swap_quantity)
        self.logger.info(
            f"Rebalanced base=[{base_lower},{base_upper}] limit=[{limit_lower},{limit_upper}] "
            f"swap={swap_quantity} fee=({skim0},{skim1})"
        )
        return skim0, skim1

    @atomic
    @only_owner
    def compound(self, caller: str) -> tuple[int, int]:
        collected0, collected1 = self._compound()
        if collected0 or collected1:
            self.logger.info(f"Compounded fees {collected0}/{collected1}")
        return collected0, collected1

    @atomic
    def poke(self) -> None:
        self._zero_burn()

    # ── configuration ───────────────────────────────────────────────────

    @atomic
    @only_owner
    def set_deposit_max(self, caller: str, deposit0_max: int, deposit1_max: int) -> None:
        if deposit0_max < 0 or deposit1_max < 0:
            raise ValidationError("deposit ceilings must be non-negative")
        self.deposit0_max = deposit0_max
        self.deposit1_max = deposit1_max

    @atomic
    @only_owner
    def set_max_total_supply(self, caller: str, max_total_supply: int) -> None:
        if max_total_supply < 0:
            raise ValidationError("max total supply must be non-negative")
        self.max_total_supply = max_total_supply

    @atomic
    @only_owner
    def set_whitelist(self, caller: str, address: str) -> None:
        if address == ZERO_ADDRESS:
            raise ValidationError("whitelist is the zero address")
        self.whitelisted_address = address

    @atomic
    @only_owner
    def remove_whitelist(self, caller: str) -> None:
        self.whitelisted_address = None

    @atomic
    @only_owner
    def set_protocol_fee(self, caller: str, protocol_fee_bps: int) -> None:
        if not 0 <= protocol_fee_bps <= BPS_DENOMINATOR:
            raise ValidationError(f"protocol fee {protocol_fee_bps} bps out of range")
        self.protocol_fee_bps = protocol_fee_bps

    # ── shares ──────────────────────────────────────────────────────────

    @atomic
    def approve(self, caller: str, spender: str, amount: int) -> bool:
        self.shares.approve(caller, spender, amount)
        return True

    @atomic
    def transfer(self, caller: str, to: str, amount: int) -> bool:
        self.shares.transfer(caller, to, amount)
        return True

    @atomic
    def transfer_from(self, caller: str, owner: str, to: str, amount: int) -> bool:
        self.shares.spend_allowance(owner, caller, amount)
        self.shares.transfer(owner, to, amount)
        return True

    # ── pool callbacks ──────────────────────────────────────────────────

    def uniswap_v3_mint_callback(
        self, sender: str, amount0_owed: int, amount1_owed: int, data: Any
    ) -> None:
        self.pool_adapter.on_mint_callback(sender, amount0_owed, amount1_owed, data)

    def uniswap_v3_swap_callback(
        self, sender: str, amount0_delta: int, amount1_delta: int, data: Any
    ) -> None:
        self.pool_adapter.on_swap_callback(sender, amount0_delta, amount1_delta, data)
