from hypervault.core.adapters.BaseAdapter import BaseAdapter
from hypervault.core.chain import Chain, Contract, atomic
from hypervault.core.errors import (
    AuthorizationError,
    ImproperRatioError,
    ReentrancyError,
    ValidationError,
    VaultArithmeticError,
    VaultError,
)

__all__ = [
    "AuthorizationError",
    "BaseAdapter",
    "Chain",
    "Contract",
    "ImproperRatioError",
    "ReentrancyError",
    "ValidationError",
    "VaultArithmeticError",
    "VaultError",
    "atomic",
]
