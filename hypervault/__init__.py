__version__ = "0.1.0"

from hypervault.core import (
    BaseAdapter,
    Chain,
    Contract,
    VaultError,
)
from hypervault.gateway import DepositGateway
from hypervault.vaults.hypervisor import Hypervisor

__all__ = [
    "__version__",
    "BaseAdapter",
    "Chain",
    "Contract",
    "DepositGateway",
    "Hypervisor",
    "VaultError",
]
