MIN_TICK = -887272
MAX_TICK = 887272
MIN_SQRT_RATIO = 4295128739
MAX_SQRT_RATIO = 1461446703485210103287273052203988822378723970342

Q96 = 1 << 96
Q128 = 1 << 128
MAX_UINT128 = 2**128 - 1
MAX_UINT256 = 2**256 - 1

# Share pricing scale: price of token0 in token1, times 1e36
PRECISION = 10**36

BPS_DENOMINATOR = 10_000
FEE_DENOMINATOR_PIPS = 1_000_000

# fee (pips) -> tick spacing
FEE_TIERS: dict[int, int] = {100: 1, 500: 10, 3000: 60, 10000: 200}

# One tenth of collected LP fees goes to the fee recipient on rebalance
DEFAULT_PROTOCOL_FEE_BPS = 1_000

# Deposit ratio guard: both ratio quotients must stay below DELTA / SCALE
DEFAULT_DEPOSIT_DELTA = 1_010
DEFAULT_DELTA_SCALE = 1_000
RATIO_SCALE = 10**18
RATIO_CEILING = 10 * RATIO_SCALE
RATIO_FLOOR = RATIO_SCALE // 10

DEFAULT_BASE_WIDTH_TICKS = 3_600
DEFAULT_LIMIT_WIDTH_TICKS = 600
DEFAULT_REBALANCE_TICK_DRIFT = 600
