from .keeper import VaultKeeper
from .planner import plan_rebalance

__all__ = ["VaultKeeper", "plan_rebalance"]
