from hypervault.core.constants.base import (
    BPS_DENOMINATOR,
    DEFAULT_DELTA_SCALE,
    DEFAULT_DEPOSIT_DELTA,
    DEFAULT_PROTOCOL_FEE_BPS,
    FEE_TIERS,
    MAX_SQRT_RATIO,
    MAX_TICK,
    MAX_UINT128,
    MAX_UINT256,
    MIN_SQRT_RATIO,
    MIN_TICK,
    PRECISION,
    Q96,
    Q128,
    RATIO_SCALE,
)

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

__all__ = [
    "BPS_DENOMINATOR",
    "DEFAULT_DELTA_SCALE",
    "DEFAULT_DEPOSIT_DELTA",
    "DEFAULT_PROTOCOL_FEE_BPS",
    "FEE_TIERS",
    "MAX_SQRT_RATIO",
    "MAX_TICK",
    "MAX_UINT128",
    "MAX_UINT256",
    "MIN_SQRT_RATIO",
    "MIN_TICK",
    "PRECISION",
    "Q96",
    "Q128",
    "RATIO_SCALE",
    "ZERO_ADDRESS",
]
