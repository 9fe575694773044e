from .positions import PositionManagerMixin, TickRange
from .shares import ShareLedger
from .vault import Hypervisor

__all__ = ["Hypervisor", "PositionManagerMixin", "ShareLedger", "TickRange"]
