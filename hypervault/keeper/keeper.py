from __future__ import annotations

from loguru import logger

from hypervault.core.adapters.decorators import status_tuple
from hypervault.core.config import get_keeper_settings
from hypervault.core.models import (
    KeeperSettings,
    PositionView,
    RebalancePlan,
    VaultStatus,
)
from hypervault.keeper.planner import plan_rebalance
from hypervault.vaults.hypervisor.positions import TickRange
from hypervault.vaults.hypervisor.vault import Hypervisor


class VaultKeeper:
    """Off-core operator loop step: rebalance when the price drifts, else compound.

    One call to ``update`` is one attempt. Failures come back as ``(False, msg)``
    and are not retried here.
    """

    def __init__(
        self,
        vault: Hypervisor,
        operator: str,
        fee_recipient: str,
        settings: KeeperSettings | None = None,
    ):
        self.vault = vault
        self.operator = operator
        self.fee_recipient = fee_recipient
        self.settings = settings or get_keeper_settings()
        self.logger = logger.bind(keeper=vault.label)

    def plan(self) -> RebalancePlan:
        sqrt_price, tick = self.vault.pool_adapter.current_price()
        total0, total1 = self.vault.get_total_amounts()
        return plan_rebalance(
            sqrt_price,
            tick,
            self.vault.pool.tick_spacing,
            total0,
            total1,
            base_width_ticks=self.settings.base_width_ticks,
            limit_width_ticks=self.settings.limit_width_ticks,
            swap_hint=self.settings.swap_hint,
        )

    def should_rebalance(self) -> bool:
        base = self.vault.base_range()
        if base is None:
            return True
        centre = (base.tick_lower + base.tick_upper) // 2
        drift = abs(self.vault.current_tick() - centre)
        return drift >= self.settings.rebalance_tick_drift

    @status_tuple
    def update(self) -> str:
        if self.should_rebalance():
            plan = self.plan()
            self.vault.rebalance(
                self.operator,
                plan.base.tick_lower,
                plan.base.tick_upper,
                plan.limit.tick_lower,
                plan.limit.tick_upper,
                self.fee_recipient,
                plan.swap_hint,
            )
            return (
                f"rebalanced base=[{plan.base.tick_lower},{plan.base.tick_upper}] "
                f"limit=[{plan.limit.tick_lower},{plan.limit.tick_upper}]"
            )
        collected0, collected1 = self.vault.compound(self.operator)
        return f"compounded {collected0}/{collected1}"

    def status(self) -> VaultStatus:
        total0, total1 = self.vault.get_total_amounts()
        return VaultStatus(
            vault=self.vault.address,
            tick=self.vault.current_tick(),
            total_supply=self.vault.total_supply,
            total0=total0,
            total1=total1,
            base=_view(self.vault.base_range(), self.vault.get_base_position()),
            limit=_view(self.vault.limit_range(), self.vault.get_limit_position()),
            needs_rebalance=self.should_rebalance(),
        )


def _view(rng: TickRange | None, position: tuple[int, int, int]) -> PositionView:
    liquidity, amount0, amount1 = position
    return PositionView(
        tick_lower=rng.tick_lower if rng else None,
        tick_upper=rng.tick_upper if rng else None,
        liquidity=liquidity,
        amount0=amount0,
        amount1=amount1,
    )
