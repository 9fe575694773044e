from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, model_validator

from hypervault.core.constants import (
    BPS_DENOMINATOR,
    DEFAULT_DELTA_SCALE,
    DEFAULT_DEPOSIT_DELTA,
    DEFAULT_PROTOCOL_FEE_BPS,
    MAX_UINT256,
)
from hypervault.core.constants.base import (
    DEFAULT_BASE_WIDTH_TICKS,
    DEFAULT_LIMIT_WIDTH_TICKS,
    DEFAULT_REBALANCE_TICK_DRIFT,
)


class VaultSettings(BaseModel):
    deposit0_max: int = Field(default=MAX_UINT256, ge=0)
    deposit1_max: int = Field(default=MAX_UINT256, ge=0)
    # 0 disables the supply cap
    max_total_supply: int = Field(default=0, ge=0)
    protocol_fee_bps: int = Field(
        default=DEFAULT_PROTOCOL_FEE_BPS, ge=0, le=BPS_DENOMINATOR
    )


class GatewaySettings(BaseModel):
    deposit_delta: int = Field(default=DEFAULT_DEPOSIT_DELTA, gt=0)
    delta_scale: int = Field(default=DEFAULT_DELTA_SCALE, gt=0)
    free_deposit: bool = False

    @model_validator(mode="after")
    def _delta_above_scale(self) -> GatewaySettings:
        if self.deposit_delta <= self.delta_scale:
            raise ValueError("deposit_delta must exceed delta_scale")
        return self


class KeeperSettings(BaseModel):
    base_width_ticks: int = Field(default=DEFAULT_BASE_WIDTH_TICKS, gt=0)
    limit_width_ticks: int = Field(default=DEFAULT_LIMIT_WIDTH_TICKS, gt=0)
    rebalance_tick_drift: int = Field(default=DEFAULT_REBALANCE_TICK_DRIFT, ge=0)
    swap_hint: int = 0


class TickRangeModel(BaseModel):
    tick_lower: int
    tick_upper: int


class RebalancePlan(BaseModel):
    base: TickRangeModel
    limit: TickRangeModel
    limit_side: Literal["above", "below"]
    surplus0: int = 0
    surplus1: int = 0
    swap_hint: int = 0


class PositionView(BaseModel):
    tick_lower: int | None = None
    tick_upper: int | None = None
    liquidity: int = 0
    amount0: int = 0
    amount1: int = 0


class VaultStatus(BaseModel):
    vault: str
    tick: int
    total_supply: int
    total0: int
    total1: int
    base: PositionView
    limit: PositionView
    needs_rebalance: bool = False
