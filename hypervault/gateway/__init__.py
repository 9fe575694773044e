from .deposit_gateway import DepositGateway, clamped_ratio

__all__ = ["DepositGateway", "clamped_ratio"]
